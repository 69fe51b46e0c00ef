"""
Use cases: Administrative account management.

Input: UpdateUserCommand, user ID, or user ID + holding ID
Output: User, None
Side effects: Updates account flags, soft-deletes accounts, hard-deletes holdings.
Failure cases: UserNotFoundError, HoldingNotFoundError.
"""

import logging

from trakvest.application.portfolio.dtos import UpdateUserCommand
from trakvest.domain.portfolio.entities import User
from trakvest.domain.portfolio.errors import HoldingNotFoundError, UserNotFoundError
from trakvest.domain.portfolio.ports import HoldingRepository, UserRepository
from trakvest.shared.concurrency import UserLockRegistry

logger = logging.getLogger(__name__)


class UpdateUserUseCase:
    """Edits name, phone, admin flag and active flag of any account."""

    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    def execute(self, command: UpdateUserCommand) -> User:
        changes = {
            key: value
            for key, value in (
                ("name", command.name),
                ("phone", command.phone),
                ("is_admin", command.is_admin),
                ("is_active", command.is_active),
            )
            if value is not None
        }
        user = self._user_repo.update_profile(command.user_id, changes)
        if user is None:
            raise UserNotFoundError(command.user_id)

        logger.info("Admin updated user=%s: fields=%s", command.user_id, sorted(changes))
        return user


class DisableUserUseCase:
    """Soft-deletes an account. Its holdings and goals are kept."""

    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    def execute(self, user_id: str) -> User:
        user = self._user_repo.update_profile(user_id, {"is_active": False})
        if user is None:
            raise UserNotFoundError(user_id)

        logger.info("Admin disabled user=%s", user_id)
        return user


class DeleteUserHoldingUseCase:
    """Hard-deletes one holding of a user without any balance effect."""

    def __init__(
        self,
        user_repo: UserRepository,
        holding_repo: HoldingRepository,
        locks: UserLockRegistry,
    ) -> None:
        self._user_repo = user_repo
        self._holding_repo = holding_repo
        self._locks = locks

    def execute(self, user_id: str, holding_id: str) -> None:
        if self._user_repo.get(user_id) is None:
            raise UserNotFoundError(user_id)

        with self._locks.hold(user_id):
            holding = self._holding_repo.get(holding_id)
            if holding is None or holding.user_id != user_id:
                raise HoldingNotFoundError(holding_id)
            self._holding_repo.delete(holding_id)

        logger.info("Admin deleted holding=%s of user=%s", holding_id, user_id)
