"""
Tests for the SQL repository adapters.

Runs against an in-memory SQLite engine with the full schema.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from conftest import make_instrument
from trakvest.domain.portfolio.entities import (
    Goal,
    GoalType,
    Holding,
    Quote,
    TransactionType,
    User,
    utcnow,
)
from trakvest.domain.portfolio.errors import EmailAlreadyRegisteredError
from trakvest.domain.portfolio.valuation import value_holding
from trakvest.infrastructure.portfolio.goal_repository import GoalRepositoryAdapter
from trakvest.infrastructure.portfolio.holding_repository import HoldingRepositoryAdapter
from trakvest.infrastructure.portfolio.instrument_repository import (
    InstrumentRepositoryAdapter,
)
from trakvest.infrastructure.portfolio.user_repository import UserRepositoryAdapter


@pytest.fixture
def users(engine) -> UserRepositoryAdapter:
    return UserRepositoryAdapter(engine)


@pytest.fixture
def stored_user(users) -> User:
    return users.add(User(email="Owner@Example.com", password_hash="hash", name="Owner"))


class TestUserRepository:
    """Tests for UserRepositoryAdapter."""

    def test_add_and_get(self, users, stored_user) -> None:
        loaded = users.get(stored_user.id)

        assert loaded.email == "owner@example.com"
        assert loaded.balance == Decimal("0")
        assert loaded.is_active is True
        assert loaded.created_at.tzinfo is not None

    def test_lookup_by_email_is_case_insensitive(self, users, stored_user) -> None:
        assert users.get_by_email("OWNER@example.COM").id == stored_user.id

    def test_duplicate_email_rejected(self, users, stored_user) -> None:
        with pytest.raises(EmailAlreadyRegisteredError):
            users.add(User(email="owner@EXAMPLE.com", password_hash="h", name="Dup"))

    def test_set_balance(self, users, stored_user) -> None:
        users.set_balance(stored_user.id, Decimal("1234.5"))

        assert users.get(stored_user.id).balance == Decimal("1234.5")

    def test_profile_update_cannot_touch_balance(self, users, stored_user) -> None:
        with pytest.raises(ValueError):
            users.update_profile(stored_user.id, {"balance": Decimal("1000000")})

        assert users.get(stored_user.id).balance == Decimal("0")

    def test_update_profile_of_missing_user(self, users) -> None:
        assert users.update_profile("missing", {"name": "X"}) is None

    def test_list_all_hides_inactive(self, users, stored_user) -> None:
        other = users.add(User(email="b@x.com", password_hash="h", name="B"))
        users.update_profile(other.id, {"is_active": False})

        assert [u.id for u in users.list_all()] == [stored_user.id]
        assert len(users.list_all(include_inactive=True)) == 2
        assert users.count() == 2


class TestInstrumentRepository:
    """Tests for InstrumentRepositoryAdapter."""

    def test_upsert_inserts_then_overwrites(self, engine) -> None:
        repo = InstrumentRepositoryAdapter(engine)
        repo.upsert(make_instrument("infy", "1500"))
        repo.upsert(make_instrument("INFY", "1550.25"))

        loaded = repo.get("infy")
        assert loaded.symbol == "INFY"
        assert loaded.current_price == Decimal("1550.25")
        assert repo.count() == 1

    def test_apply_quote_updates_price_fields(self, engine) -> None:
        repo = InstrumentRepositoryAdapter(engine)
        repo.upsert(make_instrument("TCS", "3000"))

        updated = repo.apply_quote(
            Quote(symbol="TCS", price=Decimal("3100"), day_high=Decimal("3150"),
                  day_low=Decimal("2990"), volume=42)
        )

        assert updated.current_price == Decimal("3100")
        assert updated.day_high == Decimal("3150")
        assert updated.volume == 42
        assert updated.company_name == "TCS Ltd"

    def test_apply_quote_for_uncached_symbol(self, engine) -> None:
        repo = InstrumentRepositoryAdapter(engine)

        result = repo.apply_quote(
            Quote(symbol="TCS", price=Decimal("1"), day_high=None, day_low=None, volume=None)
        )

        assert result is None
        assert repo.count() == 0

    def test_list_symbols_sorted_and_delete(self, engine) -> None:
        repo = InstrumentRepositoryAdapter(engine)
        for symbol in ("TCS", "INFY", "SBIN"):
            repo.upsert(make_instrument(symbol, "100"))

        assert repo.list_symbols() == ["INFY", "SBIN", "TCS"]
        assert repo.delete("sbin") is True
        assert repo.delete("SBIN") is False
        assert [i.symbol for i in repo.list_all()] == ["INFY", "TCS"]


class TestHoldingRepository:
    """Tests for HoldingRepositoryAdapter."""

    def test_save_persists_transactions(self, engine, stored_user) -> None:
        repo = HoldingRepositoryAdapter(engine)
        holding = Holding.open(stored_user.id, "INFY", 5, Decimal("100"))
        repo.save(holding)

        holding.record_buy(5, Decimal("200"))
        repo.save(holding)

        loaded = repo.get(holding.id)
        assert loaded.quantity == 10
        assert loaded.average_buy_price == Decimal("150")
        assert [t.type for t in loaded.transactions] == [
            TransactionType.BUY,
            TransactionType.BUY,
        ]

    def test_average_cost_keeps_investment_exact(self, engine, stored_user) -> None:
        repo = HoldingRepositoryAdapter(engine)
        holding = Holding.open(stored_user.id, "INFY", 1, Decimal("100"))
        holding.record_buy(2, Decimal("101"))
        repo.save(holding)

        valuation = value_holding(repo.get(holding.id), None)

        assert valuation.investment == Decimal("302")
        assert valuation.current_value == Decimal("302")
        assert valuation.profit_loss == Decimal("0")

    def test_saving_twice_does_not_duplicate_transactions(self, engine, stored_user) -> None:
        repo = HoldingRepositoryAdapter(engine)
        holding = Holding.open(stored_user.id, "INFY", 5, Decimal("100"))
        repo.save(holding)
        repo.save(holding)

        assert len(repo.get(holding.id).transactions) == 1

    def test_find_by_symbol_and_list(self, engine, stored_user) -> None:
        repo = HoldingRepositoryAdapter(engine)
        repo.save(Holding.open(stored_user.id, "INFY", 5, Decimal("100")))
        repo.save(Holding.open(stored_user.id, "TCS", 1, Decimal("300")))

        assert repo.find_by_symbol(stored_user.id, "tcs").quantity == 1
        assert repo.find_by_symbol(stored_user.id, "SBIN") is None
        assert {h.symbol for h in repo.list_for_user(stored_user.id)} == {"INFY", "TCS"}
        assert repo.count() == 2

    def test_delete_removes_history(self, engine, stored_user) -> None:
        repo = HoldingRepositoryAdapter(engine)
        holding = repo.save(Holding.open(stored_user.id, "INFY", 5, Decimal("100")))

        assert repo.delete(holding.id) is True
        assert repo.get(holding.id) is None
        assert repo.delete(holding.id) is False


class TestGoalRepository:
    """Tests for GoalRepositoryAdapter."""

    def test_round_trip_and_newest_first(self, engine, stored_user) -> None:
        repo = GoalRepositoryAdapter(engine)
        older = Goal(
            user_id=stored_user.id,
            title="Car",
            target_amount=Decimal("5000"),
            target_date=date(2028, 1, 1),
            type=GoalType.SAVINGS,
            created_at=utcnow() - timedelta(days=1),
        )
        newer = Goal(
            user_id=stored_user.id,
            title="House",
            target_amount=Decimal("90000"),
            target_date=date(2035, 1, 1),
            progress=Decimal("12.5"),
        )
        repo.add(older)
        repo.add(newer)

        goals = repo.list_for_user(stored_user.id)

        assert [g.title for g in goals] == ["House", "Car"]
        assert goals[0].progress == Decimal("12.5")
        assert goals[1].type is GoalType.SAVINGS
        assert goals[1].target_date == date(2028, 1, 1)

    def test_delete(self, engine, stored_user) -> None:
        repo = GoalRepositoryAdapter(engine)
        goal = repo.add(
            Goal(user_id=stored_user.id, title="X", target_amount=Decimal("1"),
                 target_date=date(2030, 1, 1))
        )

        assert repo.delete(goal.id) is True
        assert repo.get(goal.id) is None
