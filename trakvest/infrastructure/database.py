"""
Database engine and schema.

Tables are declared with SQLAlchemy Core and created on startup.
Repositories run Core statements through `engine.begin()` (writes) and
`engine.connect()` (reads).
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

metadata = MetaData()

MONEY = Numeric(18, 4)
# Weighted average cost; money totals derived from it are rounded to MONEY scale.
AVERAGE_PRICE = Numeric(28, 10)

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("name", String(255), nullable=False),
    Column("phone", String(32)),
    Column("profile_image", Text),
    Column("balance", MONEY, nullable=False, default=0),
    Column("is_admin", Boolean, nullable=False, default=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

instruments = Table(
    "instruments",
    metadata,
    Column("symbol", String(32), primary_key=True),
    Column("company_name", String(255), nullable=False),
    Column("current_price", MONEY, nullable=False),
    Column("day_high", MONEY),
    Column("day_low", MONEY),
    Column("volume", BigInteger),
    Column("sector", String(255)),
    Column("industry", String(255)),
    Column("description", Text),
    Column("last_updated", DateTime(timezone=True), nullable=False),
)

holdings = Table(
    "holdings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("symbol", String(32), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("average_buy_price", AVERAGE_PRICE, nullable=False),
    Column("investment_date", DateTime(timezone=True), nullable=False),
    Column("last_updated", DateTime(timezone=True), nullable=False),
    UniqueConstraint("user_id", "symbol", name="uix_holding_user_symbol"),
)

holding_transactions = Table(
    "holding_transactions",
    metadata,
    Column("id", String(36), primary_key=True),
    Column(
        "holding_id",
        String(36),
        ForeignKey("holdings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("type", String(4), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("price", MONEY, nullable=False),
    Column("timestamp", DateTime(timezone=True), nullable=False),
)

goals = Table(
    "goals",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("title", String(255), nullable=False),
    Column("description", Text),
    Column("target_amount", MONEY, nullable=False),
    Column("target_date", Date, nullable=False),
    Column("type", String(32), nullable=False),
    Column("progress", Numeric(7, 2), nullable=False, default=0),
    Column("created_at", DateTime(timezone=True), nullable=False),
)


def build_engine(url: str) -> Engine:
    """Build a SQLAlchemy engine for the given DSN.

    In-memory SQLite gets a single shared connection so that every
    session sees the same database.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def create_schema(engine: Engine) -> None:
    """Create every missing table."""
    metadata.create_all(engine)
    logger.info("Database schema ready on %s", engine.url.render_as_string(hide_password=True))


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from backends without time zones."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
