"""
Use case: Sell a whole holding.

Input: user ID, holding ID
Output: TradeResult (no holding, new balance, sale value)
Side effects: Records a sell transaction, credits the balance, deletes the holding.
Failure cases: HoldingNotFoundError, NotOwnerError.
"""

from trakvest.application.portfolio.dtos import TradeResult
from trakvest.domain.portfolio.position_book import PositionBook


class SellHoldingUseCase:
    """Sells every unit at the cached price, falling back to the average cost."""

    def __init__(self, position_book: PositionBook) -> None:
        self._position_book = position_book

    def execute(self, user_id: str, holding_id: str) -> TradeResult:
        outcome = self._position_book.sell_all(user_id, holding_id)
        return TradeResult(
            holding=None,
            new_balance=outcome.new_balance,
            value=outcome.value,
        )
