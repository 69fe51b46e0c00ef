"""
Use case: Delete one of the caller's goals.

Input: user ID, goal ID
Output: None
Side effects: Deletes the goal.
Failure cases: GoalNotFoundError (also for another user's goal).
"""

import logging

from trakvest.domain.portfolio.errors import GoalNotFoundError
from trakvest.domain.portfolio.ports import GoalRepository

logger = logging.getLogger(__name__)


class DeleteGoalUseCase:
    def __init__(self, goal_repo: GoalRepository) -> None:
        self._goal_repo = goal_repo

    def execute(self, user_id: str, goal_id: str) -> None:
        goal = self._goal_repo.get(goal_id)
        if goal is None or goal.user_id != user_id:
            raise GoalNotFoundError(goal_id)

        self._goal_repo.delete(goal_id)
        logger.info("Goal %s deleted for user=%s", goal_id, user_id)
