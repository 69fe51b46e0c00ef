"""
Use case: List the caller's goals with live progress.

Input: user ID
Output: list[GoalResult], newest first
Side effects: None (read-only query).
Failure cases: None.
"""

from trakvest.application.portfolio.dtos import GoalResult
from trakvest.domain.portfolio.ports import GoalRepository
from trakvest.domain.portfolio.position_book import PositionBook
from trakvest.domain.portfolio.valuation import compute_goal_progress


class ListGoalsUseCase:
    """Recomputes each goal's progress from the current portfolio summary."""

    def __init__(self, goal_repo: GoalRepository, position_book: PositionBook) -> None:
        self._goal_repo = goal_repo
        self._position_book = position_book

    def execute(self, user_id: str) -> list[GoalResult]:
        goals = self._goal_repo.list_for_user(user_id)
        if not goals:
            return []

        summary = self._position_book.summary(user_id)
        return [
            GoalResult(goal=goal, progress=compute_goal_progress(goal, summary))
            for goal in goals
        ]
