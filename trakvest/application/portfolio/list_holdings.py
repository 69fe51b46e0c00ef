"""
Use case: List the caller's holdings with current valuation.

Input: user ID
Output: list[HoldingValuation]
Side effects: None (read-only query).
Failure cases: None.
"""

from trakvest.domain.portfolio.entities import HoldingValuation
from trakvest.domain.portfolio.position_book import PositionBook


class ListHoldingsUseCase:
    """Values each holding at its cached price, or at cost when uncached."""

    def __init__(self, position_book: PositionBook) -> None:
        self._position_book = position_book

    def execute(self, user_id: str) -> list[HoldingValuation]:
        return self._position_book.list_holdings(user_id)
