"""
Use case: Create a savings or investment goal.

Input: user ID, CreateGoalCommand (title, target_amount, target_date, type, description)
Output: GoalResult (stored goal, current progress)
Side effects: Persists the goal.
Failure cases: MissingFieldError, InvalidGoalError.
"""

import logging

from trakvest.application.portfolio.dtos import CreateGoalCommand, GoalResult
from trakvest.domain.portfolio.entities import Goal, GoalType
from trakvest.domain.portfolio.errors import InvalidGoalError, MissingFieldError
from trakvest.domain.portfolio.ports import GoalRepository
from trakvest.domain.portfolio.position_book import PositionBook
from trakvest.domain.portfolio.valuation import compute_goal_progress

logger = logging.getLogger(__name__)


class CreateGoalUseCase:
    """Validates and stores a goal, seeding its progress from the portfolio."""

    def __init__(self, goal_repo: GoalRepository, position_book: PositionBook) -> None:
        self._goal_repo = goal_repo
        self._position_book = position_book

    def execute(self, user_id: str, command: CreateGoalCommand) -> GoalResult:
        """Run the create-goal use case.

        Raises:
            MissingFieldError: If title, target amount or target date is absent.
            InvalidGoalError: If the target is not positive or the type is unknown.
        """
        missing = []
        if not command.title or not command.title.strip():
            missing.append("title")
        if command.target_amount is None:
            missing.append("target_amount")
        if command.target_date is None:
            missing.append("target_date")
        if missing:
            raise MissingFieldError(missing)

        if command.target_amount <= 0:
            raise InvalidGoalError("Target amount must be positive")

        try:
            goal_type = GoalType(command.type) if command.type else GoalType.INVESTMENT
        except ValueError:
            raise InvalidGoalError(f"Unknown goal type: {command.type}")

        goal = Goal(
            user_id=user_id,
            title=command.title.strip(),
            target_amount=command.target_amount,
            target_date=command.target_date,
            type=goal_type,
            description=command.description,
        )
        goal.progress = compute_goal_progress(goal, self._position_book.summary(user_id))
        goal = self._goal_repo.add(goal)

        logger.info("Goal %s created for user=%s: type=%s", goal.id, user_id, goal_type.value)
        return GoalResult(goal=goal, progress=goal.progress)
