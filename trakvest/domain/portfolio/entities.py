"""
Domain entities for the portfolio bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4


def utcnow() -> datetime:
    """Timezone-aware current time, used for every stored timestamp."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class TransactionType(Enum):
    """Direction of a holding transaction."""

    BUY = "buy"
    SELL = "sell"


class GoalType(Enum):
    """What a goal's target amount is measured against."""

    INVESTMENT = "investment"
    SAVINGS = "savings"
    PROFIT = "profit"
    PORTFOLIO_VALUE = "portfolio_value"


@dataclass
class User:
    """A registered account.

    The balance is owned by the AccountLedger; everything else is
    profile data editable by the owner or an admin.
    """

    email: str
    password_hash: str
    name: str
    id: str = field(default_factory=new_id)
    balance: Decimal = Decimal("0")
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    is_admin: bool = False
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class Quote:
    """A point-in-time price snapshot for an instrument."""

    symbol: str
    price: Decimal
    day_high: Optional[Decimal]
    day_low: Optional[Decimal]
    volume: Optional[int]
    timestamp: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class CompanyProfile:
    """Descriptive data for a listed company."""

    symbol: str
    company_name: str
    sector: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None


@dataclass
class Instrument:
    """A tradable symbol with its last known market data.

    `cached` is True when the data was served from the cache because
    the live fetch failed.
    """

    symbol: str
    company_name: str
    current_price: Decimal
    day_high: Optional[Decimal] = None
    day_low: Optional[Decimal] = None
    volume: Optional[int] = None
    sector: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    last_updated: datetime = field(default_factory=utcnow)
    cached: bool = False


@dataclass(frozen=True)
class Transaction:
    """An immutable buy or sell entry in a holding's history."""

    type: TransactionType
    quantity: int
    price: Decimal
    timestamp: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)

    @property
    def value(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class Holding:
    """A user's position in one instrument.

    Invariant: quantity equals the sum of bought quantities minus the
    sum of sold quantities over the retained transactions.
    """

    user_id: str
    symbol: str
    quantity: int
    average_buy_price: Decimal
    id: str = field(default_factory=new_id)
    transactions: list[Transaction] = field(default_factory=list)
    investment_date: datetime = field(default_factory=utcnow)
    last_updated: datetime = field(default_factory=utcnow)

    @classmethod
    def open(cls, user_id: str, symbol: str, quantity: int, price: Decimal) -> "Holding":
        """Open a new position with its first buy transaction."""
        holding = cls(
            user_id=user_id,
            symbol=symbol,
            quantity=0,
            average_buy_price=price,
        )
        holding.record_buy(quantity, price)
        return holding

    @property
    def investment(self) -> Decimal:
        return self.average_buy_price * self.quantity

    def record_buy(self, quantity: int, price: Decimal) -> Transaction:
        """Merge a purchase into the position and recompute the average cost."""
        new_quantity = self.quantity + quantity
        total_cost = self.average_buy_price * self.quantity + price * quantity
        self.quantity = new_quantity
        self.average_buy_price = total_cost / new_quantity
        return self._append(TransactionType.BUY, quantity, price)

    def record_sell(self, quantity: int, price: Decimal) -> Transaction:
        """Reduce the position. The average cost is left untouched."""
        self.quantity -= quantity
        return self._append(TransactionType.SELL, quantity, price)

    def _append(self, kind: TransactionType, quantity: int, price: Decimal) -> Transaction:
        transaction = Transaction(type=kind, quantity=quantity, price=price)
        self.transactions.append(transaction)
        self.last_updated = transaction.timestamp
        return transaction


@dataclass
class Goal:
    """A user-defined savings or investment target.

    `progress` is advisory; the authoritative value is recomputed
    from the current portfolio valuation on every read.
    """

    user_id: str
    title: str
    target_amount: Decimal
    target_date: date
    type: GoalType = GoalType.INVESTMENT
    description: Optional[str] = None
    progress: Decimal = Decimal("0")
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class HoldingValuation:
    """A holding joined with the current instrument price."""

    holding: Holding
    current_price: Decimal
    investment: Decimal
    current_value: Decimal
    profit_loss: Decimal
    profit_loss_percentage: Optional[Decimal]


@dataclass(frozen=True)
class PortfolioSummary:
    """Aggregate valuation of all holdings of one user."""

    total_investment: Decimal
    current_value: Decimal
    items: list[HoldingValuation]
    balance: Decimal = Decimal("0")

    @property
    def profit_loss(self) -> Decimal:
        return self.current_value - self.total_investment

    @property
    def profit_loss_percentage(self) -> Optional[Decimal]:
        if not self.total_investment:
            return None
        return self.profit_loss / self.total_investment * 100


@dataclass(frozen=True)
class PriceUpdate:
    """A pushed price delta for one symbol, as received by a subscriber."""

    symbol: str
    current_price: Decimal
    day_high: Optional[Decimal] = None
    day_low: Optional[Decimal] = None
    volume: Optional[int] = None
    last_updated: Optional[datetime] = None
