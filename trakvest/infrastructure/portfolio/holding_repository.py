"""
Adapter: Holding repository.

Implements HoldingRepository port.
Reads/writes the holdings table and its append-only holding_transactions.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection, Engine

from trakvest.domain.portfolio.entities import Holding, Transaction, TransactionType
from trakvest.domain.portfolio.ports import HoldingRepository
from trakvest.infrastructure.database import as_utc, holding_transactions, holdings

logger = logging.getLogger(__name__)


def _row_to_transaction(row) -> Transaction:
    return Transaction(
        id=row.id,
        type=TransactionType(row.type),
        quantity=row.quantity,
        price=Decimal(row.price),
        timestamp=as_utc(row.timestamp),
    )


def _row_to_holding(row, transactions: list[Transaction]) -> Holding:
    return Holding(
        id=row.id,
        user_id=row.user_id,
        symbol=row.symbol,
        quantity=row.quantity,
        average_buy_price=Decimal(row.average_buy_price),
        transactions=transactions,
        investment_date=as_utc(row.investment_date),
        last_updated=as_utc(row.last_updated),
    )


class HoldingRepositoryAdapter(HoldingRepository):
    """SQL adapter for holdings and their transaction history."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, holding_id: str) -> Optional[Holding]:
        return self._load_one(holdings.c.id == holding_id)

    def find_by_symbol(self, user_id: str, symbol: str) -> Optional[Holding]:
        return self._load_one(
            (holdings.c.user_id == user_id) & (holdings.c.symbol == symbol.upper())
        )

    def list_for_user(self, user_id: str) -> list[Holding]:
        query = (
            select(holdings)
            .where(holdings.c.user_id == user_id)
            .order_by(holdings.c.investment_date, holdings.c.id)
        )
        with self._engine.connect() as conn:
            rows = conn.execute(query).fetchall()
            history = self._transactions_for(conn, [row.id for row in rows])
        return [_row_to_holding(row, history.get(row.id, [])) for row in rows]

    def save(self, holding: Holding) -> Holding:
        """Insert or update the holding, then append unsaved transactions."""
        values = {
            "user_id": holding.user_id,
            "symbol": holding.symbol.upper(),
            "quantity": holding.quantity,
            "average_buy_price": holding.average_buy_price,
            "investment_date": holding.investment_date,
            "last_updated": holding.last_updated,
        }
        with self._engine.begin() as conn:
            exists = conn.execute(
                select(holdings.c.id).where(holdings.c.id == holding.id)
            ).first()
            if exists:
                conn.execute(update(holdings).where(holdings.c.id == holding.id).values(**values))
            else:
                conn.execute(insert(holdings).values(id=holding.id, **values))

            stored = set(
                conn.execute(
                    select(holding_transactions.c.id).where(
                        holding_transactions.c.holding_id == holding.id
                    )
                ).scalars()
            )
            new_rows = [
                {
                    "id": tx.id,
                    "holding_id": holding.id,
                    "type": tx.type.value,
                    "quantity": tx.quantity,
                    "price": tx.price,
                    "timestamp": tx.timestamp,
                }
                for tx in holding.transactions
                if tx.id not in stored
            ]
            if new_rows:
                conn.execute(insert(holding_transactions), new_rows)

        logger.debug(
            "Saved holding %s (%d new transactions)", holding.id, len(new_rows)
        )
        return holding

    def delete(self, holding_id: str) -> bool:
        with self._engine.begin() as conn:
            conn.execute(
                delete(holding_transactions).where(
                    holding_transactions.c.holding_id == holding_id
                )
            )
            result = conn.execute(delete(holdings).where(holdings.c.id == holding_id))
        return result.rowcount > 0

    def count(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(holdings)).scalar_one()

    def _load_one(self, condition) -> Optional[Holding]:
        with self._engine.connect() as conn:
            row = conn.execute(select(holdings).where(condition)).fetchone()
            if row is None:
                return None
            history = self._transactions_for(conn, [row.id])
        return _row_to_holding(row, history.get(row.id, []))

    @staticmethod
    def _transactions_for(
        conn: Connection, holding_ids: list[str]
    ) -> dict[str, list[Transaction]]:
        if not holding_ids:
            return {}
        query = (
            select(holding_transactions)
            .where(holding_transactions.c.holding_id.in_(holding_ids))
            .order_by(holding_transactions.c.timestamp, holding_transactions.c.id)
        )
        history: dict[str, list[Transaction]] = {}
        for row in conn.execute(query):
            history.setdefault(row.holding_id, []).append(_row_to_transaction(row))
        return history
