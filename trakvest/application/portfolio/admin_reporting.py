"""
Use cases: Administrative read models.

Input: None, show_disabled flag, or user ID
Output: AdminStats, list[UserOverview], UserOverview
Side effects: None (read-only queries).
Failure cases: UserNotFoundError.
"""

import logging

from trakvest.application.portfolio.dtos import AdminStats, UserOverview
from trakvest.domain.portfolio.entities import utcnow
from trakvest.domain.portfolio.errors import UserNotFoundError
from trakvest.domain.portfolio.ports import (
    HoldingRepository,
    InstrumentRepository,
    UserRepository,
)
from trakvest.domain.portfolio.position_book import PositionBook

logger = logging.getLogger(__name__)


class GetAdminStatsUseCase:
    """Counts users, holdings and cached instruments."""

    def __init__(
        self,
        user_repo: UserRepository,
        holding_repo: HoldingRepository,
        instrument_repo: InstrumentRepository,
    ) -> None:
        self._user_repo = user_repo
        self._holding_repo = holding_repo
        self._instrument_repo = instrument_repo

    def execute(self) -> AdminStats:
        return AdminStats(
            total_users=self._user_repo.count(),
            total_holdings=self._holding_repo.count(),
            total_instruments=self._instrument_repo.count(),
            last_updated=utcnow(),
        )


class ListUsersUseCase:
    """Lists accounts joined with their valued holdings.

    Disabled accounts are hidden unless `show_disabled` is set.
    """

    def __init__(self, user_repo: UserRepository, position_book: PositionBook) -> None:
        self._user_repo = user_repo
        self._position_book = position_book

    def execute(self, show_disabled: bool = False) -> list[UserOverview]:
        users = self._user_repo.list_all(include_inactive=show_disabled)
        logger.info("Admin listing %d users (show_disabled=%s)", len(users), show_disabled)
        return [
            UserOverview(user=user, holdings=self._position_book.list_holdings(user.id))
            for user in users
        ]


class GetUserDetailUseCase:
    def __init__(self, user_repo: UserRepository, position_book: PositionBook) -> None:
        self._user_repo = user_repo
        self._position_book = position_book

    def execute(self, user_id: str) -> UserOverview:
        user = self._user_repo.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return UserOverview(user=user, holdings=self._position_book.list_holdings(user_id))
