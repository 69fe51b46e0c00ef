"""
Data Transfer Objects for the portfolio application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from trakvest.domain.portfolio.entities import (
    Goal,
    Holding,
    HoldingValuation,
    User,
)


# ----------------------------------------------------------------------
# Access gateway
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class RegisterCommand:
    """Input DTO for account registration.

    Attributes:
        email: Login email, compared case-insensitively.
        password: Plain-text password. Only its hash is stored.
        name: Display name.
    """

    email: str
    password: str
    name: str


@dataclass(frozen=True)
class LoginCommand:
    email: str
    password: str


@dataclass(frozen=True)
class AuthResult:
    """Output DTO for register and login: a bearer token and the account."""

    token: str
    user: User


@dataclass(frozen=True)
class UpdateProfileCommand:
    """Input DTO for a self-service profile edit. None means unchanged."""

    name: Optional[str] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None


# ----------------------------------------------------------------------
# Position book
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class BuyCommand:
    """Input DTO for a purchase.

    Attributes:
        symbol: Instrument symbol, case-insensitive.
        quantity: Whole units to buy.
        price: Unit price the user buys at.
    """

    symbol: str
    quantity: int
    price: Decimal


@dataclass(frozen=True)
class UpdateHoldingCommand:
    holding_id: str
    quantity: Optional[int] = None
    average_buy_price: Optional[Decimal] = None


@dataclass(frozen=True)
class TradeResult:
    """Output DTO for buy and sell operations.

    Attributes:
        holding: The holding after the trade; None when it was sold out.
        new_balance: Cash balance after the trade.
        value: Total cash moved by the trade.
    """

    holding: Optional[Holding]
    new_balance: Decimal
    value: Decimal


# ----------------------------------------------------------------------
# Instrument cache
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class UpsertInstrumentCommand:
    """Input DTO for an admin write into the instrument cache."""

    symbol: str
    company_name: str
    current_price: Decimal
    day_high: Optional[Decimal] = None
    day_low: Optional[Decimal] = None
    volume: Optional[int] = None
    sector: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None


# ----------------------------------------------------------------------
# Goals
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class CreateGoalCommand:
    """Input DTO for goal creation. Required fields may arrive empty."""

    title: Optional[str]
    target_amount: Optional[Decimal]
    target_date: Optional[date]
    type: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class GoalResult:
    """Output DTO: a goal with its progress recomputed from the portfolio."""

    goal: Goal
    progress: Decimal


# ----------------------------------------------------------------------
# Administration
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class AdminStats:
    total_users: int
    total_holdings: int
    total_instruments: int
    last_updated: datetime


@dataclass(frozen=True)
class UserOverview:
    """Output DTO: an account joined with its valued holdings."""

    user: User
    holdings: list[HoldingValuation] = field(default_factory=list)


@dataclass(frozen=True)
class UpdateUserCommand:
    """Input DTO for an admin account edit. None means unchanged."""

    user_id: str
    name: Optional[str] = None
    phone: Optional[str] = None
    is_admin: Optional[bool] = None
    is_active: Optional[bool] = None
