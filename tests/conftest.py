"""
Shared fixtures for the test suite.

Environment switches are set before any trakvest import so the module
level settings, limiter and app pick them up.
"""

import copy
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PRICE_REFRESH_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"

from decimal import Decimal
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from trakvest.domain.portfolio.entities import (
    CompanyProfile,
    Goal,
    Holding,
    Instrument,
    Quote,
    User,
    utcnow,
)
from trakvest.domain.portfolio.errors import EmailAlreadyRegisteredError, QuoteNotFoundError
from trakvest.domain.portfolio.ledger import AccountLedger
from trakvest.domain.portfolio.market_data import QuoteService
from trakvest.domain.portfolio.ports import (
    GoalRepository,
    HoldingRepository,
    InstrumentRepository,
    Mailer,
    MarketDataSource,
    UserRepository,
)
from trakvest.domain.portfolio.position_book import PositionBook
from trakvest.infrastructure.database import build_engine, create_schema
from trakvest.infrastructure.portfolio.password_hasher import BcryptPasswordHasher
from trakvest.infrastructure.portfolio.token_service import JwtTokenService
from trakvest.infrastructure.portfolio.user_repository import UserRepositoryAdapter
from trakvest.shared.concurrency import UserLockRegistry

API = "/api/v1"


# =====================================================================
# In-memory ports
# =====================================================================


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self.users: dict[str, User] = {}

    def add(self, user: User) -> User:
        user.email = user.email.strip().lower()
        if self.get_by_email(user.email) is not None:
            raise EmailAlreadyRegisteredError(user.email)
        self.users[user.id] = copy.deepcopy(user)
        return user

    def get(self, user_id: str) -> Optional[User]:
        user = self.users.get(user_id)
        return copy.deepcopy(user) if user else None

    def get_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email.strip().lower():
                return copy.deepcopy(user)
        return None

    def update_profile(self, user_id: str, changes: dict[str, Any]) -> Optional[User]:
        user = self.users.get(user_id)
        if user is None:
            return None
        for key, value in changes.items():
            setattr(user, key, value)
        return copy.deepcopy(user)

    def set_balance(self, user_id: str, balance: Decimal) -> None:
        self.users[user_id].balance = balance

    def list_all(self, include_inactive: bool = False) -> list[User]:
        return [
            copy.deepcopy(u)
            for u in self.users.values()
            if include_inactive or u.is_active
        ]

    def count(self) -> int:
        return len(self.users)


class InMemoryInstrumentRepository(InstrumentRepository):
    def __init__(self) -> None:
        self.instruments: dict[str, Instrument] = {}

    def get(self, symbol: str) -> Optional[Instrument]:
        instrument = self.instruments.get(symbol.upper())
        return copy.deepcopy(instrument) if instrument else None

    def list_all(self) -> list[Instrument]:
        return [copy.deepcopy(i) for i in self.instruments.values()]

    def list_symbols(self) -> list[str]:
        return sorted(self.instruments)

    def upsert(self, instrument: Instrument) -> Instrument:
        self.instruments[instrument.symbol.upper()] = copy.deepcopy(instrument)
        return instrument

    def apply_quote(self, quote: Quote) -> Optional[Instrument]:
        instrument = self.instruments.get(quote.symbol.upper())
        if instrument is None:
            return None
        instrument.current_price = quote.price
        instrument.day_high = quote.day_high
        instrument.day_low = quote.day_low
        instrument.volume = quote.volume
        instrument.last_updated = quote.timestamp
        return copy.deepcopy(instrument)

    def delete(self, symbol: str) -> bool:
        return self.instruments.pop(symbol.upper(), None) is not None

    def count(self) -> int:
        return len(self.instruments)


class InMemoryHoldingRepository(HoldingRepository):
    def __init__(self) -> None:
        self.holdings: dict[str, Holding] = {}

    def get(self, holding_id: str) -> Optional[Holding]:
        holding = self.holdings.get(holding_id)
        return copy.deepcopy(holding) if holding else None

    def find_by_symbol(self, user_id: str, symbol: str) -> Optional[Holding]:
        for holding in self.holdings.values():
            if holding.user_id == user_id and holding.symbol == symbol.upper():
                return copy.deepcopy(holding)
        return None

    def list_for_user(self, user_id: str) -> list[Holding]:
        return [copy.deepcopy(h) for h in self.holdings.values() if h.user_id == user_id]

    def save(self, holding: Holding) -> Holding:
        self.holdings[holding.id] = copy.deepcopy(holding)
        return holding

    def delete(self, holding_id: str) -> bool:
        return self.holdings.pop(holding_id, None) is not None

    def count(self) -> int:
        return len(self.holdings)


class InMemoryGoalRepository(GoalRepository):
    def __init__(self) -> None:
        self.goals: dict[str, Goal] = {}

    def add(self, goal: Goal) -> Goal:
        self.goals[goal.id] = copy.deepcopy(goal)
        return goal

    def get(self, goal_id: str) -> Optional[Goal]:
        goal = self.goals.get(goal_id)
        return copy.deepcopy(goal) if goal else None

    def list_for_user(self, user_id: str) -> list[Goal]:
        goals = [copy.deepcopy(g) for g in self.goals.values() if g.user_id == user_id]
        return sorted(goals, key=lambda g: g.created_at, reverse=True)

    def delete(self, goal_id: str) -> bool:
        return self.goals.pop(goal_id, None) is not None


# =====================================================================
# Fake collaborators
# =====================================================================


class FakeSource(MarketDataSource):
    """Market-data source serving fixed prices.

    A price entry may be an exception instance, which is raised instead.
    Unknown symbols raise QuoteNotFoundError.
    """

    def __init__(self, name: str = "fake", prices: Optional[dict] = None) -> None:
        self.name = name
        self.prices = dict(prices or {})
        self.calls: list[str] = []

    def fetch_quote(self, symbol: str) -> Quote:
        self.calls.append(symbol)
        price = self._lookup(symbol)
        return Quote(
            symbol=symbol,
            price=price,
            day_high=price + 1,
            day_low=price - 1,
            volume=1000,
        )

    def fetch_company_profile(self, symbol: str) -> CompanyProfile:
        self._lookup(symbol)
        return CompanyProfile(
            symbol=symbol,
            company_name=f"{symbol} Ltd",
            sector="Technology",
            industry="IT Services",
            description=f"{symbol} from {self.name}",
        )

    def _lookup(self, symbol: str) -> Decimal:
        value = self.prices.get(symbol)
        if value is None:
            raise QuoteNotFoundError(symbol, self.name)
        if isinstance(value, Exception):
            raise value
        return Decimal(str(value))


class FakeMailer(Mailer):
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.sent: list[tuple[str, str]] = []
        self._error = error

    def send_registration(self, user: User) -> None:
        self._deliver("registration", user)

    def send_login(self, user: User) -> None:
        self._deliver("login", user)

    def _deliver(self, kind: str, user: User) -> None:
        if self._error is not None:
            raise self._error
        self.sent.append((kind, user.email))


def make_instrument(symbol: str, price: str) -> Instrument:
    return Instrument(
        symbol=symbol,
        company_name=f"{symbol} Ltd",
        current_price=Decimal(price),
        last_updated=utcnow(),
    )


# =====================================================================
# Domain fixtures
# =====================================================================


@pytest.fixture
def locks() -> UserLockRegistry:
    return UserLockRegistry()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def instrument_repo() -> InMemoryInstrumentRepository:
    return InMemoryInstrumentRepository()


@pytest.fixture
def holding_repo() -> InMemoryHoldingRepository:
    return InMemoryHoldingRepository()


@pytest.fixture
def goal_repo() -> InMemoryGoalRepository:
    return InMemoryGoalRepository()


@pytest.fixture
def ledger(user_repo, locks) -> AccountLedger:
    return AccountLedger(user_repo, locks, minimum_amount=Decimal("100"))


@pytest.fixture
def book(holding_repo, instrument_repo, ledger, locks) -> PositionBook:
    return PositionBook(holding_repo, instrument_repo, ledger, locks)


@pytest.fixture
def user(user_repo) -> User:
    return user_repo.add(User(email="investor@example.com", password_hash="x", name="Investor"))


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def tokens() -> JwtTokenService:
    return JwtTokenService(secret="test-secret", ttl_hours=1)


@pytest.fixture
def primary() -> FakeSource:
    return FakeSource("primary", {"INFY": "1500", "TCS": "3500"})


@pytest.fixture
def secondary() -> FakeSource:
    return FakeSource("secondary", {"INFY": "1490", "AAPL": "190"})


@pytest.fixture
def quote_service(primary, secondary) -> QuoteService:
    return QuoteService(primary=primary, secondary=secondary)


# =====================================================================
# Database and API fixtures
# =====================================================================


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def client(engine, quote_service, mailer, hasher, tokens):
    from trakvest.interfaces.portfolio.dependencies import (
        get_engine,
        get_mailer,
        get_password_hasher,
        get_quote_service,
        get_token_service,
    )
    from trakvest.main import app

    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_quote_service] = lambda: quote_service
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_token_service] = lambda: tokens
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client: TestClient, email: str, password: str = "secret123", name: str = "Test"):
    """Register through the API and return (token, user_id)."""
    resp = client.post(
        f"{API}/auth/register",
        json={"email": email, "password": password, "name": name},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return body["token"], body["user"]["id"]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def promote_to_admin(engine, user_id: str) -> None:
    UserRepositoryAdapter(engine).update_profile(user_id, {"is_admin": True})
