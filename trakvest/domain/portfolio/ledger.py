"""
Account ledger: the only writer of user cash balances.

Every mutation re-reads the stored balance under the user's lock, checks
the minimum-amount and sufficient-funds rules, then writes the new
balance back. A rejected mutation leaves the balance untouched.
"""

import logging
from decimal import Decimal

from trakvest.domain.portfolio.errors import (
    InsufficientFundsError,
    InvalidAmountError,
    UserNotFoundError,
)
from trakvest.domain.portfolio.ports import UserRepository
from trakvest.shared.concurrency import UserLockRegistry

logger = logging.getLogger(__name__)


class AccountLedger:
    """Balance mutations with minimum-amount and sufficient-funds rules."""

    def __init__(
        self,
        user_repo: UserRepository,
        locks: UserLockRegistry,
        minimum_amount: Decimal = Decimal("100"),
    ) -> None:
        self._user_repo = user_repo
        self._locks = locks
        self._minimum_amount = minimum_amount

    @property
    def minimum_amount(self) -> Decimal:
        return self._minimum_amount

    def balance(self, user_id: str) -> Decimal:
        """Return the stored balance.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        user = self._user_repo.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user.balance

    def top_up(self, user_id: str, amount: Decimal) -> Decimal:
        """Add funds to the balance. Not idempotent.

        Raises:
            InvalidAmountError: If amount is below the minimum.
        """
        self._check_minimum(amount)
        with self._locks.hold(user_id):
            new_balance = self.balance(user_id) + amount
            self._user_repo.set_balance(user_id, new_balance)

        logger.info("Top-up for user=%s: amount=%s", user_id, amount)
        return new_balance

    def withdraw(self, user_id: str, amount: Decimal) -> Decimal:
        """Remove funds from the balance.

        Raises:
            InvalidAmountError: If amount is below the minimum.
            InsufficientFundsError: If amount exceeds the balance.
        """
        new_balance = self.debit(user_id, amount)
        logger.info("Withdrawal for user=%s: amount=%s", user_id, amount)
        return new_balance

    def ensure_funds(self, user_id: str, amount: Decimal) -> Decimal:
        """Check that a debit of amount would succeed, without writing.

        Returns:
            The current balance.
        """
        self._check_minimum(amount)
        available = self.balance(user_id)
        if amount > available:
            raise InsufficientFundsError(required=amount, available=available)
        return available

    def debit(self, user_id: str, amount: Decimal) -> Decimal:
        """Subtract amount from the balance; same rules as a withdrawal."""
        with self._locks.hold(user_id):
            available = self.ensure_funds(user_id, amount)
            new_balance = available - amount
            self._user_repo.set_balance(user_id, new_balance)
        return new_balance

    def credit(self, user_id: str, amount: Decimal) -> Decimal:
        """Add sale proceeds to the balance. Only negative amounts are rejected."""
        if amount < 0:
            raise InvalidAmountError(amount, Decimal("0"))
        with self._locks.hold(user_id):
            new_balance = self.balance(user_id) + amount
            self._user_repo.set_balance(user_id, new_balance)
        return new_balance

    def _check_minimum(self, amount: Decimal) -> None:
        if amount < self._minimum_amount:
            raise InvalidAmountError(amount, self._minimum_amount)
