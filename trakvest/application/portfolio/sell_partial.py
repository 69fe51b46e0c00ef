"""
Use case: Sell part of a holding.

Input: user ID, holding ID, quantity
Output: TradeResult (remaining holding or None, new balance, sale value)
Side effects: Records a sell transaction and credits the balance; deletes the
    holding when nothing remains.
Failure cases: HoldingNotFoundError, NotOwnerError, InstrumentNotFoundError,
    InvalidQuantityError.
"""

from trakvest.application.portfolio.dtos import TradeResult
from trakvest.domain.portfolio.position_book import PositionBook


class SellPartialUseCase:
    """Sells at the cached instrument price only; there is no cost fallback."""

    def __init__(self, position_book: PositionBook) -> None:
        self._position_book = position_book

    def execute(self, user_id: str, holding_id: str, quantity: int) -> TradeResult:
        outcome = self._position_book.sell_partial(user_id, holding_id, quantity)
        return TradeResult(
            holding=outcome.holding,
            new_balance=outcome.new_balance,
            value=outcome.value,
        )
