"""
Adapter: Goal repository.

Implements GoalRepository port.
Reads/writes the goals table.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Engine

from trakvest.domain.portfolio.entities import Goal, GoalType
from trakvest.domain.portfolio.ports import GoalRepository
from trakvest.infrastructure.database import as_utc, goals


def _row_to_goal(row) -> Goal:
    return Goal(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        description=row.description,
        target_amount=Decimal(row.target_amount),
        target_date=row.target_date,
        type=GoalType(row.type),
        progress=Decimal(row.progress),
        created_at=as_utc(row.created_at),
    )


class GoalRepositoryAdapter(GoalRepository):
    """SQL adapter for the goals table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, goal: Goal) -> Goal:
        with self._engine.begin() as conn:
            conn.execute(
                insert(goals).values(
                    id=goal.id,
                    user_id=goal.user_id,
                    title=goal.title,
                    description=goal.description,
                    target_amount=goal.target_amount,
                    target_date=goal.target_date,
                    type=goal.type.value,
                    progress=goal.progress,
                    created_at=goal.created_at,
                )
            )
        return goal

    def get(self, goal_id: str) -> Optional[Goal]:
        with self._engine.connect() as conn:
            row = conn.execute(select(goals).where(goals.c.id == goal_id)).fetchone()
        return _row_to_goal(row) if row else None

    def list_for_user(self, user_id: str) -> list[Goal]:
        query = (
            select(goals)
            .where(goals.c.user_id == user_id)
            .order_by(goals.c.created_at.desc(), goals.c.id.desc())
        )
        with self._engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_goal(row) for row in rows]

    def delete(self, goal_id: str) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(delete(goals).where(goals.c.id == goal_id))
        return result.rowcount > 0
