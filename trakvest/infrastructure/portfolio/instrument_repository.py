"""
Adapter: Instrument cache repository.

Implements InstrumentRepository port.
Reads/writes the instruments table (last known quote per symbol).
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Engine

from trakvest.domain.portfolio.entities import Instrument, Quote, utcnow
from trakvest.domain.portfolio.ports import InstrumentRepository
from trakvest.infrastructure.database import as_utc, instruments

logger = logging.getLogger(__name__)


def _optional_decimal(value) -> Optional[Decimal]:
    return Decimal(value) if value is not None else None


def _row_to_instrument(row) -> Instrument:
    return Instrument(
        symbol=row.symbol,
        company_name=row.company_name,
        current_price=Decimal(row.current_price),
        day_high=_optional_decimal(row.day_high),
        day_low=_optional_decimal(row.day_low),
        volume=row.volume,
        sector=row.sector,
        industry=row.industry,
        description=row.description,
        last_updated=as_utc(row.last_updated),
    )


class InstrumentRepositoryAdapter(InstrumentRepository):
    """SQL adapter for the instruments table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, symbol: str) -> Optional[Instrument]:
        query = select(instruments).where(instruments.c.symbol == symbol.upper())
        with self._engine.connect() as conn:
            row = conn.execute(query).fetchone()
        return _row_to_instrument(row) if row else None

    def list_all(self) -> list[Instrument]:
        with self._engine.connect() as conn:
            rows = conn.execute(select(instruments).order_by(instruments.c.symbol)).fetchall()
        return [_row_to_instrument(row) for row in rows]

    def list_symbols(self) -> list[str]:
        query = select(instruments.c.symbol).order_by(instruments.c.symbol)
        with self._engine.connect() as conn:
            return list(conn.execute(query).scalars())

    def upsert(self, instrument: Instrument) -> Instrument:
        """Insert or overwrite the row for the instrument's symbol."""
        instrument.symbol = instrument.symbol.upper()
        values = {
            "company_name": instrument.company_name,
            "current_price": instrument.current_price,
            "day_high": instrument.day_high,
            "day_low": instrument.day_low,
            "volume": instrument.volume,
            "sector": instrument.sector,
            "industry": instrument.industry,
            "description": instrument.description,
            "last_updated": instrument.last_updated,
        }
        with self._engine.begin() as conn:
            exists = conn.execute(
                select(instruments.c.symbol).where(instruments.c.symbol == instrument.symbol)
            ).first()
            if exists:
                conn.execute(
                    update(instruments)
                    .where(instruments.c.symbol == instrument.symbol)
                    .values(**values)
                )
            else:
                conn.execute(insert(instruments).values(symbol=instrument.symbol, **values))

        logger.debug("Upserted instrument %s", instrument.symbol)
        return instrument

    def apply_quote(self, quote: Quote) -> Optional[Instrument]:
        """Write a fresh quote into an existing row. Returns None if not cached."""
        with self._engine.begin() as conn:
            result = conn.execute(
                update(instruments)
                .where(instruments.c.symbol == quote.symbol.upper())
                .values(
                    current_price=quote.price,
                    day_high=quote.day_high,
                    day_low=quote.day_low,
                    volume=quote.volume,
                    last_updated=utcnow(),
                )
            )
        if result.rowcount == 0:
            return None
        return self.get(quote.symbol)

    def delete(self, symbol: str) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                delete(instruments).where(instruments.c.symbol == symbol.upper())
            )
        return result.rowcount > 0

    def count(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(instruments)).scalar_one()
