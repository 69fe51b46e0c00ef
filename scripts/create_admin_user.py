#!/usr/bin/env python3
"""
Create an admin account, or promote an existing account to admin.

Usage:
    python scripts/create_admin_user.py --email admin@example.com --name "Admin User"

The password is read from --password or, when omitted, prompted for.
"""

import argparse
import getpass
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from trakvest.core.config import settings
from trakvest.domain.portfolio.entities import User
from trakvest.infrastructure.database import build_engine, create_schema
from trakvest.infrastructure.portfolio.password_hasher import BcryptPasswordHasher
from trakvest.infrastructure.portfolio.user_repository import UserRepositoryAdapter
from trakvest.shared.logging import configure_logging

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("--email", required=True, help="Admin login email")
    parser.add_argument("--name", default="Admin User", help="Display name")
    parser.add_argument("--password", help="Password (prompted when omitted)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args()
    configure_logging(args.log_level)

    engine = build_engine(settings.get_database_url())
    create_schema(engine)
    users = UserRepositoryAdapter(engine)

    existing = users.get_by_email(args.email)
    if existing is not None:
        if existing.is_admin and existing.is_active:
            logger.info("Admin user already exists: %s", existing.email)
            return 0
        users.update_profile(existing.id, {"is_admin": True, "is_active": True})
        logger.info("Promoted existing user to admin: %s", existing.email)
        return 0

    password = args.password or getpass.getpass("Admin password: ")
    if len(password) < 6:
        logger.error("Password must be at least 6 characters")
        return 1

    hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)
    admin = users.add(
        User(
            email=args.email,
            password_hash=hasher.hash(password),
            name=args.name,
            is_admin=True,
        )
    )
    logger.info("Admin user created: %s (id=%s)", admin.email, admin.id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
