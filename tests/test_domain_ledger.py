"""
Tests for the account ledger and per-user locks.

Runs against in-memory repositories.
"""

import gc
import threading
from decimal import Decimal

import pytest

from trakvest.domain.portfolio.errors import (
    InsufficientFundsError,
    InvalidAmountError,
    UserNotFoundError,
)
from trakvest.shared.concurrency import UserLockRegistry


class TestAccountLedger:
    """Tests for balance mutations."""

    def test_new_user_starts_at_zero(self, ledger, user) -> None:
        assert ledger.balance(user.id) == Decimal("0")

    def test_top_up_adds_funds(self, ledger, user) -> None:
        assert ledger.top_up(user.id, Decimal("1000")) == Decimal("1000")
        assert ledger.top_up(user.id, Decimal("250")) == Decimal("1250")
        assert ledger.balance(user.id) == Decimal("1250")

    def test_top_up_below_minimum_rejected(self, ledger, user) -> None:
        with pytest.raises(InvalidAmountError):
            ledger.top_up(user.id, Decimal("99.99"))
        assert ledger.balance(user.id) == Decimal("0")

    def test_withdraw_removes_funds(self, ledger, user) -> None:
        ledger.top_up(user.id, Decimal("1000"))

        assert ledger.withdraw(user.id, Decimal("400")) == Decimal("600")

    def test_withdraw_more_than_balance_rejected(self, ledger, user) -> None:
        ledger.top_up(user.id, Decimal("500"))

        with pytest.raises(InsufficientFundsError) as exc_info:
            ledger.withdraw(user.id, Decimal("600"))

        assert exc_info.value.available == Decimal("500")
        assert ledger.balance(user.id) == Decimal("500")

    def test_withdraw_below_minimum_rejected(self, ledger, user) -> None:
        ledger.top_up(user.id, Decimal("500"))

        with pytest.raises(InvalidAmountError):
            ledger.withdraw(user.id, Decimal("50"))

    @pytest.mark.parametrize(
        "amount", [Decimal("0"), Decimal("-1"), Decimal("-500"), Decimal("99.99")]
    )
    def test_top_up_non_positive_or_small_rejected(self, ledger, user, amount) -> None:
        ledger.top_up(user.id, Decimal("200"))

        with pytest.raises(InvalidAmountError):
            ledger.top_up(user.id, amount)

        assert ledger.balance(user.id) == Decimal("200")

    @pytest.mark.parametrize(
        "amount", [Decimal("0"), Decimal("-1"), Decimal("-500"), Decimal("99.99")]
    )
    def test_withdraw_non_positive_or_small_rejected(self, ledger, user, amount) -> None:
        ledger.top_up(user.id, Decimal("200"))

        with pytest.raises(InvalidAmountError):
            ledger.withdraw(user.id, amount)

        assert ledger.balance(user.id) == Decimal("200")

    def test_withdraw_whole_balance(self, ledger, user) -> None:
        ledger.top_up(user.id, Decimal("300"))

        assert ledger.withdraw(user.id, Decimal("300")) == Decimal("0")

    def test_credit_accepts_small_amounts(self, ledger, user) -> None:
        assert ledger.credit(user.id, Decimal("5")) == Decimal("5")

    def test_credit_rejects_negative_amount(self, ledger, user) -> None:
        with pytest.raises(InvalidAmountError):
            ledger.credit(user.id, Decimal("-1"))

    def test_unknown_user(self, ledger) -> None:
        with pytest.raises(UserNotFoundError):
            ledger.balance("missing")

    def test_concurrent_top_ups_are_not_lost(self, ledger, user) -> None:
        threads = [
            threading.Thread(target=ledger.top_up, args=(user.id, Decimal("100")))
            for _ in range(20)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert ledger.balance(user.id) == Decimal("2000")


class TestUserLockRegistry:
    """Tests for per-user lock allocation."""

    def test_same_user_gets_same_lock(self) -> None:
        locks = UserLockRegistry()
        lock_a = locks.lock_for("a")
        lock_b = locks.lock_for("b")

        assert locks.lock_for("a") is lock_a
        assert lock_a is not lock_b
        assert len(locks) == 2

    def test_idle_locks_are_released(self) -> None:
        locks = UserLockRegistry()
        with locks.hold("a"):
            assert len(locks) == 1

        gc.collect()

        assert len(locks) == 0

    def test_lock_is_reentrant(self) -> None:
        locks = UserLockRegistry()

        with locks.hold("a"):
            with locks.hold("a"):
                entered = True

        assert entered
