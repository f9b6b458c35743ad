from __future__ import annotations

import pytest

from pairswap.state.ledger import (
    AssetLedger,
    InMemoryLedger,
    InsufficientAllowance,
    InsufficientBalance,
    LedgerError,
)


def _ledger_with(account: str = "alice", asset: str = "A", amount: int = 100) -> InMemoryLedger:
    ledger = InMemoryLedger()
    ledger.mint(asset, account, amount)
    return ledger


def test_in_memory_ledger_satisfies_protocol() -> None:
    assert isinstance(InMemoryLedger(), AssetLedger)


def test_errors_are_ledger_errors() -> None:
    assert issubclass(InsufficientBalance, LedgerError)
    assert issubclass(InsufficientAllowance, LedgerError)


class TestTransfer:
    def test_moves_balance(self) -> None:
        ledger = _ledger_with()
        ledger.transfer("A", "alice", "bob", 40)
        assert ledger.balance_of("A", "alice") == 60
        assert ledger.balance_of("A", "bob") == 40
        assert ledger.total_supply("A") == 100

    def test_insufficient_balance(self) -> None:
        ledger = _ledger_with()
        with pytest.raises(InsufficientBalance):
            ledger.transfer("A", "alice", "bob", 101)
        assert ledger.balance_of("A", "alice") == 100

    def test_negative_amount(self) -> None:
        with pytest.raises(ValueError):
            _ledger_with().transfer("A", "alice", "bob", -1)

    def test_non_int_amount(self) -> None:
        with pytest.raises(TypeError):
            _ledger_with().transfer("A", "alice", "bob", True)  # type: ignore[arg-type]


class TestTransferFrom:
    def test_requires_allowance(self) -> None:
        ledger = _ledger_with()
        with pytest.raises(InsufficientAllowance):
            ledger.transfer_from("A", "alice", "pool", 10)

    def test_consumes_allowance(self) -> None:
        ledger = _ledger_with()
        ledger.approve("A", "alice", "pool", 30)
        ledger.transfer_from("A", "alice", "pool", 10)
        assert ledger.allowance("A", "alice", "pool") == 20
        assert ledger.balance_of("A", "pool") == 10

    def test_explicit_spender(self) -> None:
        ledger = _ledger_with()
        ledger.approve("A", "alice", "router", 30)
        ledger.transfer_from("A", "alice", "pool", 30, spender="router")
        assert ledger.allowance("A", "alice", "router") == 0
        assert ledger.balance_of("A", "pool") == 30

    def test_failed_move_keeps_allowance(self) -> None:
        ledger = _ledger_with(amount=5)
        ledger.approve("A", "alice", "pool", 30)
        with pytest.raises(InsufficientBalance):
            ledger.transfer_from("A", "alice", "pool", 10)
        assert ledger.allowance("A", "alice", "pool") == 30


class TestMintBurn:
    def test_mint_and_burn(self) -> None:
        ledger = InMemoryLedger()
        ledger.mint("LP", "alice", 50)
        ledger.burn("LP", "alice", 20)
        assert ledger.balance_of("LP", "alice") == 30
        assert ledger.total_supply("LP") == 30

    def test_burn_more_than_held(self) -> None:
        ledger = InMemoryLedger()
        ledger.mint("LP", "alice", 5)
        with pytest.raises(InsufficientBalance):
            ledger.burn("LP", "alice", 6)


class TestHooks:
    def test_hook_sees_transfer(self) -> None:
        seen = []
        ledger = _ledger_with()
        ledger.add_hook(lambda *args: seen.append(args))
        ledger.transfer("A", "alice", "bob", 1)
        assert seen == [("A", "alice", "bob", 1)]

    def test_raising_hook_leaves_ledger_untouched(self) -> None:
        ledger = _ledger_with()
        ledger.approve("A", "alice", "pool", 10)

        def refuse(asset, src, dst, amount):
            raise RuntimeError("refused")

        ledger.add_hook(refuse)
        with pytest.raises(RuntimeError):
            ledger.transfer_from("A", "alice", "pool", 10)
        with pytest.raises(RuntimeError):
            ledger.mint("A", "bob", 1)
        assert ledger.balance_of("A", "alice") == 100
        assert ledger.balance_of("A", "pool") == 0
        assert ledger.balance_of("A", "bob") == 0
        assert ledger.allowance("A", "alice", "pool") == 10


class TestCheckpoint:
    def test_rollback_restores_balances_and_allowances(self) -> None:
        ledger = _ledger_with()
        ledger.approve("A", "alice", "pool", 60)
        cp = ledger.checkpoint()

        ledger.transfer_from("A", "alice", "pool", 60)
        ledger.mint("LP", "alice", 7)
        ledger.rollback(cp)

        assert ledger.balance_of("A", "alice") == 100
        assert ledger.balance_of("A", "pool") == 0
        assert ledger.total_supply("LP") == 0
        assert ledger.allowance("A", "alice", "pool") == 60

    def test_rollback_skips_hooks(self) -> None:
        ledger = _ledger_with()
        cp = ledger.checkpoint()
        ledger.transfer("A", "alice", "bob", 10)

        def refuse(asset, src, dst, amount):
            raise RuntimeError("refused")

        ledger.add_hook(refuse)
        ledger.rollback(cp)
        assert ledger.balance_of("A", "bob") == 0

    def test_foreign_checkpoint_rejected(self) -> None:
        with pytest.raises(TypeError):
            InMemoryLedger().rollback({"A": 1})
