"""
Use case: Add funds to the caller's balance.

Input: user ID, amount
Output: new balance
Side effects: Writes the balance.
Failure cases: InvalidAmountError.
"""

from decimal import Decimal

from trakvest.domain.portfolio.ledger import AccountLedger


class TopUpBalanceUseCase:
    def __init__(self, ledger: AccountLedger) -> None:
        self._ledger = ledger

    def execute(self, user_id: str, amount: Decimal) -> Decimal:
        return self._ledger.top_up(user_id, amount)
