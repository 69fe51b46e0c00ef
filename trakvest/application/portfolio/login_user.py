"""
Use case: Sign in with email and password.

Input: LoginCommand (email, password)
Output: AuthResult (bearer token, stored user)
Side effects: Sends a best-effort login notification.
Failure cases: InvalidCredentialsError.
"""

import logging

from trakvest.application.portfolio.dtos import AuthResult, LoginCommand
from trakvest.domain.portfolio.errors import InvalidCredentialsError, NotificationError
from trakvest.domain.portfolio.ports import (
    Mailer,
    PasswordHasher,
    TokenService,
    UserRepository,
)

logger = logging.getLogger(__name__)


class LoginUserUseCase:
    """Verifies credentials and issues a bearer token.

    Unknown email, wrong password and disabled account all raise the same
    error so the response does not reveal which one failed.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
        mailer: Mailer,
    ) -> None:
        self._user_repo = user_repo
        self._hasher = hasher
        self._tokens = tokens
        self._mailer = mailer

    def execute(self, command: LoginCommand) -> AuthResult:
        user = self._user_repo.get_by_email((command.email or "").strip().lower())
        # Unknown emails still pay for one hash check.
        password_hash = user.password_hash if user is not None else self._hasher.dummy_hash()
        password_ok = self._hasher.verify(command.password or "", password_hash)
        if user is None or not user.is_active or not password_ok:
            logger.info("Failed login attempt")
            raise InvalidCredentialsError()

        logger.info("User=%s logged in", user.id)

        try:
            self._mailer.send_login(user)
        except NotificationError as exc:
            logger.warning("Login email for user=%s not sent: %s", user.id, exc.reason)

        return AuthResult(token=self._tokens.issue(user.id), user=user)
