"""
Adapter: User account repository.

Implements UserRepository port.
Reads/writes the users table. Emails are stored lower-cased.
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from trakvest.domain.portfolio.entities import User
from trakvest.domain.portfolio.errors import EmailAlreadyRegisteredError
from trakvest.domain.portfolio.ports import UserRepository
from trakvest.infrastructure.database import as_utc, users

logger = logging.getLogger(__name__)

PROFILE_FIELDS = frozenset({"name", "phone", "profile_image", "is_admin", "is_active"})


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        name=row.name,
        phone=row.phone,
        profile_image=row.profile_image,
        balance=Decimal(row.balance),
        is_admin=bool(row.is_admin),
        is_active=bool(row.is_active),
        created_at=as_utc(row.created_at),
    )


class UserRepositoryAdapter(UserRepository):
    """SQL adapter for the users table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, user: User) -> User:
        user.email = user.email.strip().lower()
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    insert(users).values(
                        id=user.id,
                        email=user.email,
                        password_hash=user.password_hash,
                        name=user.name,
                        phone=user.phone,
                        profile_image=user.profile_image,
                        balance=user.balance,
                        is_admin=user.is_admin,
                        is_active=user.is_active,
                        created_at=user.created_at,
                    )
                )
        except IntegrityError:
            raise EmailAlreadyRegisteredError(user.email)
        return user

    def get(self, user_id: str) -> Optional[User]:
        with self._engine.connect() as conn:
            row = conn.execute(select(users).where(users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        query = select(users).where(users.c.email == email.strip().lower())
        with self._engine.connect() as conn:
            row = conn.execute(query).fetchone()
        return _row_to_user(row) if row else None

    def update_profile(self, user_id: str, changes: dict[str, Any]) -> Optional[User]:
        """Apply profile changes. Unknown fields (balance included) are rejected."""
        unknown = set(changes) - PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Not a profile field: {', '.join(sorted(unknown))}")

        if changes:
            with self._engine.begin() as conn:
                conn.execute(update(users).where(users.c.id == user_id).values(**changes))
        return self.get(user_id)

    def set_balance(self, user_id: str, balance: Decimal) -> None:
        with self._engine.begin() as conn:
            conn.execute(update(users).where(users.c.id == user_id).values(balance=balance))
        logger.debug("Balance written for user=%s", user_id)

    def list_all(self, include_inactive: bool = False) -> list[User]:
        query = select(users).order_by(users.c.created_at, users.c.id)
        if not include_inactive:
            query = query.where(users.c.is_active.is_(True))
        with self._engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_user(row) for row in rows]

    def count(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(users)).scalar_one()
