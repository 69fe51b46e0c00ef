"""
Adapter: Signed bearer tokens with PyJWT.

Implements TokenService port. Tokens carry the user ID as `sub`, plus
`iat` and `exp` claims, and are signed with the configured secret.
"""

import logging
from datetime import timedelta

import jwt

from trakvest.domain.portfolio.entities import utcnow
from trakvest.domain.portfolio.errors import InvalidTokenError
from trakvest.domain.portfolio.ports import TokenService

logger = logging.getLogger(__name__)


class JwtTokenService(TokenService):
    """HS256 JWTs with a fixed lifetime."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_hours: int = 24) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(hours=ttl_hours)

    def issue(self, user_id: str) -> str:
        now = utcnow()
        claims = {"sub": user_id, "iat": now, "exp": now + self._ttl}
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError("Token has expired")
        except jwt.PyJWTError as exc:
            logger.debug("Rejected token: %s", exc)
            raise InvalidTokenError()
        return str(claims["sub"])
