"""
Use case: Edit the caller's own profile.

Input: user ID, UpdateProfileCommand (name, phone, profile_image)
Output: User
Side effects: Persists the profile fields. The balance is never touched.
Failure cases: InvalidProfileImageError, UserNotFoundError.
"""

import base64
import binascii
import logging

from trakvest.application.portfolio.dtos import UpdateProfileCommand
from trakvest.domain.portfolio.entities import User
from trakvest.domain.portfolio.errors import InvalidProfileImageError, UserNotFoundError
from trakvest.domain.portfolio.ports import UserRepository

logger = logging.getLogger(__name__)

DATA_URL_MARKER = ";base64,"


class UpdateProfileUseCase:
    """Applies name, phone and profile image changes."""

    def __init__(self, user_repo: UserRepository, max_image_bytes: int) -> None:
        self._user_repo = user_repo
        self._max_image_bytes = max_image_bytes

    def execute(self, user_id: str, command: UpdateProfileCommand) -> User:
        changes = {}
        if command.name is not None and command.name.strip():
            changes["name"] = command.name.strip()
        if command.phone is not None:
            changes["phone"] = command.phone.strip() or None
        if command.profile_image is not None:
            self._check_image(command.profile_image)
            changes["profile_image"] = command.profile_image

        user = self._user_repo.update_profile(user_id, changes)
        if user is None:
            raise UserNotFoundError(user_id)

        logger.info("Profile updated for user=%s: fields=%s", user_id, sorted(changes))
        return user

    def _check_image(self, image: str) -> None:
        """Accept only base64 data URLs within the size limit."""
        if not image.startswith("data:") or DATA_URL_MARKER not in image:
            raise InvalidProfileImageError("Profile image must be a base64 data URL")

        payload = image.split(DATA_URL_MARKER, 1)[1]
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            raise InvalidProfileImageError("Profile image is not valid base64")

        if len(raw) > self._max_image_bytes:
            raise InvalidProfileImageError(
                f"Profile image exceeds {self._max_image_bytes} bytes"
            )
