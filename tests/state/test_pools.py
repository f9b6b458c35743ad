from __future__ import annotations

from dataclasses import replace

import pytest

from pairswap.state.pools import (
    PoolState,
    Side,
    compute_pool_id,
    initial_state,
    state_from_dict,
    state_to_dict,
)


class TestPoolId:
    def test_deterministic(self) -> None:
        assert compute_pool_id("A", "B", 30) == compute_pool_id("A", "B", 30)
        assert compute_pool_id("A", "B", 30).startswith("0x")
        assert len(compute_pool_id("A", "B", 30)) == 66

    def test_depends_on_order_and_fee(self) -> None:
        assert compute_pool_id("A", "B", 30) != compute_pool_id("B", "A", 30)
        assert compute_pool_id("A", "B", 30) != compute_pool_id("A", "B", 5)

    def test_same_asset_rejected(self) -> None:
        with pytest.raises(ValueError):
            compute_pool_id("A", "A", 30)


class TestPoolState:
    def test_initial_state_is_empty(self) -> None:
        s = initial_state("A", "B", "treasury", 30)
        assert s.is_empty
        assert (s.reserve_a, s.reserve_b, s.lp_supply) == (0, 0, 0)
        assert s.lp_asset == f"LP-{s.pool_id[2:18]}"

    def test_custom_lp_asset(self) -> None:
        assert initial_state("A", "B", "treasury", 30, lp_asset="AB-LP").lp_asset == "AB-LP"

    def test_assets_must_be_distinct(self) -> None:
        s = initial_state("A", "B", "treasury", 30)
        with pytest.raises(ValueError):
            replace(s, lp_asset="A")

    def test_negative_reserve_rejected(self) -> None:
        with pytest.raises(ValueError):
            replace(initial_state("A", "B", "treasury", 30), reserve_a=-1)

    def test_bool_rejected(self) -> None:
        with pytest.raises(TypeError):
            replace(initial_state("A", "B", "treasury", 30), lp_supply=True)

    def test_fee_bounds(self) -> None:
        with pytest.raises(ValueError):
            replace(initial_state("A", "B", "treasury", 30), fee_bps=10_001)

    def test_side_helpers(self) -> None:
        s = replace(initial_state("A", "B", "treasury", 30), reserve_a=600, reserve_b=417, lp_supply=500)
        assert Side.A.other is Side.B
        assert s.side_of("B") is Side.B
        assert s.side_of("C") is None
        assert s.reserves_for(Side.B) == (417, 600)
        assert s.get_constant_product() == 600 * 417

        t = s.with_reserves_for(Side.B, 500, 501)
        assert (t.reserve_a, t.reserve_b) == (501, 500)


class TestSerialization:
    def test_round_trip(self) -> None:
        s = replace(initial_state("A", "B", "treasury", 30), reserve_a=600, reserve_b=417, lp_supply=500)
        d = state_to_dict(s)
        assert d["reserve_b"] == 417
        assert state_from_dict(d) == s

    def test_tampered_pool_id(self) -> None:
        d = state_to_dict(initial_state("A", "B", "treasury", 30))
        d["fee_bps"] = 5
        with pytest.raises(ValueError, match="pool_id"):
            state_from_dict(d)

    def test_wrong_type(self) -> None:
        d = state_to_dict(initial_state("A", "B", "treasury", 30))
        d["reserve_a"] = "5"
        with pytest.raises(TypeError):
            state_from_dict(d)

    def test_missing_field(self) -> None:
        d = state_to_dict(initial_state("A", "B", "treasury", 30))
        del d["treasury"]
        with pytest.raises(KeyError):
            state_from_dict(d)
