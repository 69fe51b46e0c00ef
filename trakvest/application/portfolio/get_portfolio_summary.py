"""
Use case: Summarize the caller's portfolio.

Input: user ID
Output: PortfolioSummary (totals, valued holdings, cash balance)
Side effects: None (read-only query).
Failure cases: UserNotFoundError.
"""

from trakvest.domain.portfolio.entities import PortfolioSummary
from trakvest.domain.portfolio.position_book import PositionBook


class GetPortfolioSummaryUseCase:
    def __init__(self, position_book: PositionBook) -> None:
        self._position_book = position_book

    def execute(self, user_id: str) -> PortfolioSummary:
        return self._position_book.summary(user_id)
