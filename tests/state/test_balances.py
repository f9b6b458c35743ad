from __future__ import annotations

import pytest

from pairswap.state.balances import AllowanceTable, BalanceTable


class TestBalanceTable:
    def test_missing_is_zero(self) -> None:
        assert BalanceTable().get("alice", "A") == 0

    def test_add_and_subtract(self) -> None:
        t = BalanceTable()
        t.add("alice", "A", 10)
        t.subtract("alice", "A", 4)
        assert t.get("alice", "A") == 6

    def test_overdraw_rejected(self) -> None:
        t = BalanceTable()
        t.set("alice", "A", 5)
        with pytest.raises(ValueError, match="Insufficient balance"):
            t.subtract("alice", "A", 6)
        assert t.get("alice", "A") == 5

    def test_negative_set_rejected(self) -> None:
        with pytest.raises(ValueError):
            BalanceTable().set("alice", "A", -1)

    def test_zero_balances_dropped(self) -> None:
        t = BalanceTable()
        t.set("alice", "A", 5)
        t.subtract("alice", "A", 5)
        assert t.get_all_balances() == {}

    def test_total_and_per_asset(self) -> None:
        t = BalanceTable()
        t.set("alice", "A", 5)
        t.set("bob", "A", 7)
        t.set("bob", "B", 1)
        assert t.total("A") == 12
        assert t.get_balances_for_asset("A") == {"alice": 5, "bob": 7}
        assert t.verify_non_negative()


class TestAllowanceTable:
    def test_consume(self) -> None:
        t = AllowanceTable()
        t.set("alice", "pool", "A", 10)
        t.consume("alice", "pool", "A", 4)
        assert t.get("alice", "pool", "A") == 6

    def test_overspend_rejected(self) -> None:
        t = AllowanceTable()
        t.set("alice", "pool", "A", 3)
        with pytest.raises(ValueError, match="Insufficient allowance"):
            t.consume("alice", "pool", "A", 4)

    def test_allowance_is_per_spender(self) -> None:
        t = AllowanceTable()
        t.set("alice", "pool", "A", 3)
        assert t.get("alice", "mallory", "A") == 0


class TestSnapshots:
    def test_restore_discards_later_changes(self) -> None:
        t = BalanceTable()
        t.set("alice", "A", 5)
        snap = t.snapshot()
        t.add("alice", "A", 10)
        t.set("bob", "B", 3)
        t.restore(snap)
        assert t.get_all_balances() == {("alice", "A"): 5}

    def test_snapshot_is_a_copy(self) -> None:
        t = AllowanceTable()
        t.set("alice", "pool", "A", 10)
        snap = t.snapshot()
        t.consume("alice", "pool", "A", 10)
        assert snap == {("alice", "pool", "A"): 10}
        t.restore(snap)
        assert t.get("alice", "pool", "A") == 10

    def test_restore_rejects_zero_entries(self) -> None:
        with pytest.raises(ValueError):
            BalanceTable().restore({("alice", "A"): 0})
