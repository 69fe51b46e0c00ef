"""
Use case: Resolve a bearer token to the current account.

Input: raw bearer token (may be None)
Output: User
Side effects: None.
Failure cases: InvalidTokenError, AdminRequiredError (require_admin).
"""

from typing import Optional

from trakvest.domain.portfolio.entities import User
from trakvest.domain.portfolio.errors import AdminRequiredError, InvalidTokenError
from trakvest.domain.portfolio.ports import TokenService, UserRepository


class AuthenticateUseCase:
    """Verifies a token and loads the stored user it names.

    A token for a deleted or disabled account is rejected even if its
    signature and expiry are valid.
    """

    def __init__(self, user_repo: UserRepository, tokens: TokenService) -> None:
        self._user_repo = user_repo
        self._tokens = tokens

    def execute(self, token: Optional[str]) -> User:
        if not token:
            raise InvalidTokenError("No token, authorization denied")

        user_id = self._tokens.verify(token)
        user = self._user_repo.get(user_id)
        if user is None or not user.is_active:
            raise InvalidTokenError("Token is not valid")
        return user


def require_admin(user: User) -> User:
    """Return the user if it is an admin.

    Raises:
        AdminRequiredError: Otherwise.
    """
    if not user.is_admin:
        raise AdminRequiredError()
    return user
