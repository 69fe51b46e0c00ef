"""
Pydantic schemas for portfolio API request/response validation.

These schemas enforce input validation and define the API contract.
Money fields are Decimals and serialize as strings.
No business logic belongs here: business rules (minimum amounts,
allowlist, sufficient funds) are enforced by the domain layer.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field

from trakvest.domain.portfolio.entities import (
    Holding,
    HoldingValuation,
    Instrument,
    PortfolioSummary,
    Transaction,
    User,
)
from trakvest.domain.portfolio.valuation import value_holding

SYMBOL_DESCRIPTION = "Exchange ticker symbol, case-insensitive"
SYMBOL_PATTERN = r"^[A-Za-z0-9&.\-]+$"
SYMBOL_MIN_LEN = 1
SYMBOL_MAX_LEN = 32


# ----------------------------------------------------------------------
# Shared
# ----------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: Optional[str] = None
    code: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str


class MessageResponse(BaseModel):
    message: str


# ----------------------------------------------------------------------
# Access gateway
# ----------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request schema for registration.

    Attributes:
        email: Login email; uniqueness is case-insensitive.
        password: Plain-text password (6-128 characters).
        name: Display name.
    """

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    """Account representation. Credentials are never included."""

    id: str
    email: str
    name: str
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    balance: Decimal
    is_admin: bool
    is_active: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            phone=user.phone,
            profile_image=user.profile_image,
            balance=user.balance,
            is_admin=user.is_admin,
            is_active=user.is_active,
            created_at=user.created_at,
        )


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class ProfileUpdateRequest(BaseModel):
    """Self-service profile edit. Omitted fields stay unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    profile_image: Optional[str] = Field(
        None, description="Base64 data URL (data:image/...;base64,...)"
    )


class AmountRequest(BaseModel):
    """Top-up or withdrawal amount. The minimum is enforced by the ledger."""

    amount: Decimal = Field(..., description="Amount in base currency units")


class BalanceResponse(BaseModel):
    message: str
    balance: Decimal


# ----------------------------------------------------------------------
# Position book
# ----------------------------------------------------------------------


class TransactionResponse(BaseModel):
    id: str
    type: str
    quantity: int
    price: Decimal
    value: Decimal
    timestamp: datetime

    @classmethod
    def from_entity(cls, transaction: Transaction) -> "TransactionResponse":
        return cls(
            id=transaction.id,
            type=transaction.type.value,
            quantity=transaction.quantity,
            price=transaction.price,
            value=transaction.value,
            timestamp=transaction.timestamp,
        )


class HoldingResponse(BaseModel):
    """A holding valued at the cached price (average cost when uncached)."""

    id: str
    symbol: str
    quantity: int
    average_buy_price: Decimal
    investment: Decimal
    current_price: Decimal
    current_value: Decimal
    profit_loss: Decimal
    profit_loss_percentage: Optional[Decimal] = None
    investment_date: datetime
    last_updated: datetime
    transaction_count: int
    transactions: list[TransactionResponse]

    @classmethod
    def from_valuation(cls, valuation: HoldingValuation) -> "HoldingResponse":
        holding = valuation.holding
        return cls(
            id=holding.id,
            symbol=holding.symbol,
            quantity=holding.quantity,
            average_buy_price=holding.average_buy_price,
            investment=valuation.investment,
            current_price=valuation.current_price,
            current_value=valuation.current_value,
            profit_loss=valuation.profit_loss,
            profit_loss_percentage=valuation.profit_loss_percentage,
            investment_date=holding.investment_date,
            last_updated=holding.last_updated,
            transaction_count=len(holding.transactions),
            transactions=[TransactionResponse.from_entity(t) for t in holding.transactions],
        )

    @classmethod
    def from_holding(cls, holding: Holding) -> "HoldingResponse":
        """Represent a holding just written by a command, valued at cost."""
        return cls.from_valuation(value_holding(holding, None))


class PortfolioSummaryResponse(BaseModel):
    total_investment: Decimal
    current_value: Decimal
    profit_loss: Decimal
    profit_loss_percentage: Optional[Decimal] = None
    balance: Decimal
    holdings: list[HoldingResponse]

    @classmethod
    def from_summary(cls, summary: PortfolioSummary) -> "PortfolioSummaryResponse":
        return cls(
            total_investment=summary.total_investment,
            current_value=summary.current_value,
            profit_loss=summary.profit_loss,
            profit_loss_percentage=summary.profit_loss_percentage,
            balance=summary.balance,
            holdings=[HoldingResponse.from_valuation(v) for v in summary.items],
        )


class BuyRequest(BaseModel):
    """Request schema for a purchase.

    Attributes:
        symbol: Allowlisted ticker, case-insensitive.
        quantity: Whole units to buy.
        price: Unit price.
    """

    symbol: str = Field(
        ...,
        min_length=SYMBOL_MIN_LEN,
        max_length=SYMBOL_MAX_LEN,
        pattern=SYMBOL_PATTERN,
        description=SYMBOL_DESCRIPTION,
    )
    quantity: int
    price: Decimal


class PartialSellRequest(BaseModel):
    quantity: int


class UpdateHoldingRequest(BaseModel):
    """Direct holding edit. No transaction is recorded and the balance is untouched."""

    quantity: Optional[int] = None
    average_buy_price: Optional[Decimal] = Field(None, gt=0)


class TradeResponse(BaseModel):
    message: str
    holding: Optional[HoldingResponse] = None
    new_balance: Decimal
    value: Decimal


# ----------------------------------------------------------------------
# Instrument cache
# ----------------------------------------------------------------------


class InstrumentResponse(BaseModel):
    symbol: str
    company_name: str
    current_price: Decimal
    day_high: Optional[Decimal] = None
    day_low: Optional[Decimal] = None
    volume: Optional[int] = None
    sector: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    last_updated: datetime
    cached: bool = False

    @classmethod
    def from_entity(cls, instrument: Instrument) -> "InstrumentResponse":
        return cls(
            symbol=instrument.symbol,
            company_name=instrument.company_name,
            current_price=instrument.current_price,
            day_high=instrument.day_high,
            day_low=instrument.day_low,
            volume=instrument.volume,
            sector=instrument.sector,
            industry=instrument.industry,
            description=instrument.description,
            last_updated=instrument.last_updated,
            cached=instrument.cached,
        )


class InstrumentUpsertRequest(BaseModel):
    symbol: str = Field(
        ...,
        min_length=SYMBOL_MIN_LEN,
        max_length=SYMBOL_MAX_LEN,
        pattern=SYMBOL_PATTERN,
        description=SYMBOL_DESCRIPTION,
    )
    company_name: str = Field(..., min_length=1, max_length=255)
    current_price: Decimal = Field(..., gt=0)
    day_high: Optional[Decimal] = None
    day_low: Optional[Decimal] = None
    volume: Optional[int] = Field(None, ge=0)
    sector: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None


# ----------------------------------------------------------------------
# Goals
# ----------------------------------------------------------------------


class GoalCreateRequest(BaseModel):
    """Goal creation. Required fields are checked by the use case."""

    title: Optional[str] = Field(None, max_length=255)
    target_amount: Optional[Decimal] = None
    target_date: Optional[date] = None
    type: Optional[str] = Field(
        None, description="investment, savings, profit or portfolio_value"
    )
    description: Optional[str] = None


class GoalResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    target_amount: Decimal
    target_date: date
    type: str
    progress: Decimal
    created_at: datetime


# ----------------------------------------------------------------------
# Administration
# ----------------------------------------------------------------------


class AdminStatsResponse(BaseModel):
    total_users: int
    total_holdings: int
    total_instruments: int
    last_updated: datetime


class AdminUserResponse(UserResponse):
    holdings: list[HoldingResponse]


class AdminUserUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    is_admin: Optional[bool] = None
    is_active: Optional[bool] = None


# ----------------------------------------------------------------------
# Realtime
# ----------------------------------------------------------------------


class RealtimeStatusResponse(BaseModel):
    stream: dict[str, Any]
    loop: Optional[dict[str, Any]] = None
    recent_events: list[dict[str, Any]] = []
