"""
Use case: Register a new account.

Input: RegisterCommand (email, password, name)
Output: AuthResult (bearer token, stored user)
Side effects: Persists the user; sends a best-effort welcome email.
Failure cases: MissingFieldError, EmailAlreadyRegisteredError.
"""

import logging

from trakvest.application.portfolio.dtos import AuthResult, RegisterCommand
from trakvest.domain.portfolio.entities import User
from trakvest.domain.portfolio.errors import (
    EmailAlreadyRegisteredError,
    MissingFieldError,
    NotificationError,
)
from trakvest.domain.portfolio.ports import (
    Mailer,
    PasswordHasher,
    TokenService,
    UserRepository,
)

logger = logging.getLogger(__name__)


class RegisterUserUseCase:
    """Creates an account and signs the caller in.

    The email is stored lower-cased so that uniqueness holds
    case-insensitively. The password is hashed before it reaches the
    repository.
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

    def execute(self, command: RegisterCommand) -> AuthResult:
        """Run the registration use case.

        Args:
            command: Registration data.

        Returns:
            A bearer token and the created user.

        Raises:
            MissingFieldError: If email, password or name is blank.
            EmailAlreadyRegisteredError: If the email is already taken.
        """
        missing = [
            name
            for name, value in (
                ("email", command.email),
                ("password", command.password),
                ("name", command.name),
            )
            if not value or not value.strip()
        ]
        if missing:
            raise MissingFieldError(missing)

        email = command.email.strip().lower()
        if self._user_repo.get_by_email(email) is not None:
            raise EmailAlreadyRegisteredError(email)

        user = self._user_repo.add(
            User(
                email=email,
                password_hash=self._hasher.hash(command.password),
                name=command.name.strip(),
            )
        )
        logger.info("Registered user=%s", user.id)

        try:
            self._mailer.send_registration(user)
        except NotificationError as exc:
            logger.warning("Welcome email for user=%s not sent: %s", user.id, exc.reason)

        return AuthResult(token=self._tokens.issue(user.id), user=user)
