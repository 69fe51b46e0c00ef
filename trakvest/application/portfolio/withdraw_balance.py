"""
Use case: Withdraw funds from the caller's balance.

Input: user ID, amount
Output: new balance
Side effects: Writes the balance.
Failure cases: InvalidAmountError, InsufficientFundsError.
"""

from decimal import Decimal

from trakvest.domain.portfolio.ledger import AccountLedger


class WithdrawBalanceUseCase:
    """Withdrawals never leave the balance negative; a rejected one changes nothing."""

    def __init__(self, ledger: AccountLedger) -> None:
        self._ledger = ledger

    def execute(self, user_id: str, amount: Decimal) -> Decimal:
        return self._ledger.withdraw(user_id, amount)
