from __future__ import annotations

import pytest

from pairswap.config import ConfigError, PoolConfig, config_from_env, config_from_mapping, load_config


class TestPoolConfig:
    def test_defaults(self) -> None:
        c = PoolConfig(asset_a="USDC", asset_b="WETH", treasury="dao")
        assert c.fee_bps == 30
        assert c.treasury_share_bps == 10_000
        assert c.ratio_tolerance_bps is None
        s = c.initial_state()
        assert (s.asset_a, s.asset_b, s.treasury, s.fee_bps) == ("USDC", "WETH", "dao", 30)
        assert s.is_empty

    def test_same_assets(self) -> None:
        with pytest.raises(ConfigError):
            PoolConfig(asset_a="USDC", asset_b="USDC", treasury="dao")

    @pytest.mark.parametrize("fee", [-1, 10_001, True, "30"])
    def test_bad_fee(self, fee) -> None:
        with pytest.raises(ConfigError):
            PoolConfig(asset_a="USDC", asset_b="WETH", treasury="dao", fee_bps=fee)

    def test_blank_treasury(self) -> None:
        with pytest.raises(ConfigError):
            PoolConfig(asset_a="USDC", asset_b="WETH", treasury=" ")

    def test_config_error_is_value_error(self) -> None:
        assert issubclass(ConfigError, ValueError)


class TestFromMapping:
    def test_nested_pool_key(self) -> None:
        c = config_from_mapping({"pool": {"asset_a": "USDC", "asset_b": "WETH", "treasury": "dao", "fee_bps": 5}})
        assert c.fee_bps == 5

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="fee_bsp"):
            config_from_mapping({"asset_a": "USDC", "asset_b": "WETH", "treasury": "dao", "fee_bsp": 5})

    def test_missing_key(self) -> None:
        with pytest.raises(ConfigError, match="treasury"):
            config_from_mapping({"asset_a": "USDC", "asset_b": "WETH"})

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ConfigError):
            config_from_mapping(["asset_a"])  # type: ignore[arg-type]


class TestLoadConfig:
    def test_yaml(self, tmp_path) -> None:
        p = tmp_path / "pool.yaml"
        p.write_text(
            "pool:\n"
            "  asset_a: USDC\n"
            "  asset_b: WETH\n"
            "  treasury: dao\n"
            "  fee_bps: 25\n"
            "  treasury_share_bps: 2000\n"
            "  ratio_tolerance_bps: 50\n"
            "  pool_account: usdc-weth\n",
            encoding="utf-8",
        )
        c = load_config(p)
        assert c == PoolConfig(
            asset_a="USDC",
            asset_b="WETH",
            treasury="dao",
            fee_bps=25,
            treasury_share_bps=2_000,
            ratio_tolerance_bps=50,
            pool_account="usdc-weth",
        )

    def test_invalid_yaml(self, tmp_path) -> None:
        p = tmp_path / "pool.yaml"
        p.write_text("pool: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(p)

    def test_yaml_list_rejected(self, tmp_path) -> None:
        p = tmp_path / "pool.yaml"
        p.write_text("- USDC\n- WETH\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(p)

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(tmp_path / "absent.yaml")


class TestFromEnv:
    def test_reads_prefixed_vars(self) -> None:
        env = {
            "PAIRSWAP_ASSET_A": "USDC",
            "PAIRSWAP_ASSET_B": "WETH",
            "PAIRSWAP_TREASURY": "dao",
            "PAIRSWAP_FEE_BPS": " 10 ",
            "PAIRSWAP_RATIO_TOLERANCE_BPS": "",
            "OTHER": "ignored",
        }
        c = config_from_env(env)
        assert (c.asset_a, c.fee_bps, c.ratio_tolerance_bps) == ("USDC", 10, None)

    def test_custom_prefix(self) -> None:
        env = {"X_ASSET_A": "USDC", "X_ASSET_B": "WETH", "X_TREASURY": "dao"}
        assert config_from_env(env, prefix="X_").asset_b == "WETH"

    def test_bad_int(self) -> None:
        env = {"PAIRSWAP_ASSET_A": "USDC", "PAIRSWAP_ASSET_B": "WETH", "PAIRSWAP_TREASURY": "dao", "PAIRSWAP_FEE_BPS": "3%"}
        with pytest.raises(ConfigError, match="PAIRSWAP_FEE_BPS"):
            config_from_env(env)

    def test_process_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("PAIRSWAP_ASSET_A", "USDC")
        monkeypatch.setenv("PAIRSWAP_ASSET_B", "WETH")
        monkeypatch.setenv("PAIRSWAP_TREASURY", "dao")
        assert config_from_env().treasury == "dao"
