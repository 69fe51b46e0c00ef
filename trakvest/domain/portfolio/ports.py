"""
Port interfaces (ABCs) for the portfolio bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Optional

from trakvest.domain.portfolio.entities import (
    CompanyProfile,
    Goal,
    Holding,
    Instrument,
    Quote,
    User,
)


class UserRepository(ABC):
    """Port for persisting and retrieving user accounts.

    Emails are compared case-insensitively. The balance is written only
    through `set_balance`, which is reserved for the AccountLedger.
    """

    @abstractmethod
    def add(self, user: User) -> User:
        """Persist a new user.

        Raises:
            EmailAlreadyRegisteredError: If the email is already taken.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, user_id: str) -> Optional[User]:
        """Return a user by ID, or None if not found."""
        raise NotImplementedError

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Return a user by email (case-insensitive), or None."""
        raise NotImplementedError

    @abstractmethod
    def update_profile(self, user_id: str, changes: dict[str, Any]) -> Optional[User]:
        """Apply profile changes (name, phone, profile_image, is_admin, is_active).

        Returns:
            The updated user, or None if the user does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    def set_balance(self, user_id: str, balance: Decimal) -> None:
        """Overwrite the stored cash balance."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self, include_inactive: bool = False) -> list[User]:
        """Return users ordered by creation date."""
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        """Return the total number of users, active or not."""
        raise NotImplementedError


class InstrumentRepository(ABC):
    """Port for the instrument cache (last known quote per symbol)."""

    @abstractmethod
    def get(self, symbol: str) -> Optional[Instrument]:
        """Return a cached instrument, or None."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> list[Instrument]:
        """Return all cached instruments ordered by symbol."""
        raise NotImplementedError

    @abstractmethod
    def list_symbols(self) -> list[str]:
        """Return every cached symbol ordered alphabetically."""
        raise NotImplementedError

    @abstractmethod
    def upsert(self, instrument: Instrument) -> Instrument:
        """Create or overwrite the cached row for the instrument's symbol."""
        raise NotImplementedError

    @abstractmethod
    def apply_quote(self, quote: Quote) -> Optional[Instrument]:
        """Write a fresh quote into an existing row and clear the cached flag.

        Returns:
            The updated instrument, or None if the symbol is not cached.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, symbol: str) -> bool:
        """Delete a cached instrument. Returns False if it was absent."""
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError


class HoldingRepository(ABC):
    """Port for persisting holdings and their transaction history."""

    @abstractmethod
    def get(self, holding_id: str) -> Optional[Holding]:
        """Return a holding by ID, or None."""
        raise NotImplementedError

    @abstractmethod
    def find_by_symbol(self, user_id: str, symbol: str) -> Optional[Holding]:
        """Return the user's holding in a symbol, or None."""
        raise NotImplementedError

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[Holding]:
        """Return the user's holdings, oldest first."""
        raise NotImplementedError

    @abstractmethod
    def save(self, holding: Holding) -> Holding:
        """Insert or update a holding. New transactions are appended."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, holding_id: str) -> bool:
        """Delete a holding and its transactions. Returns False if absent."""
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError


class GoalRepository(ABC):
    """Port for persisting goals."""

    @abstractmethod
    def add(self, goal: Goal) -> Goal:
        raise NotImplementedError

    @abstractmethod
    def get(self, goal_id: str) -> Optional[Goal]:
        raise NotImplementedError

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[Goal]:
        """Return the user's goals, newest first."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, goal_id: str) -> bool:
        raise NotImplementedError


class MarketDataSource(ABC):
    """Port for one upstream market-data provider.

    Implementations translate library failures into MarketDataError
    subclasses so that callers can route on typed failures.
    """

    name: str = "market-data"

    @abstractmethod
    def fetch_quote(self, symbol: str) -> Quote:
        """Return the current quote for a symbol.

        Raises:
            ProviderNotConfiguredError: If a credential is missing.
            ProviderRateLimitedError: If the upstream quota is exhausted.
            QuoteNotFoundError: If the provider has no data for the symbol.
            ProviderUnavailableError: On any other upstream failure.
        """
        raise NotImplementedError

    @abstractmethod
    def fetch_company_profile(self, symbol: str) -> CompanyProfile:
        """Return descriptive company data for a symbol."""
        raise NotImplementedError


class PasswordHasher(ABC):
    """Port for irreversible credential hashing."""

    @abstractmethod
    def hash(self, password: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        """Compare a candidate password against a stored hash."""
        raise NotImplementedError

    @abstractmethod
    def dummy_hash(self) -> str:
        """Return a valid hash that no account uses, at the normal cost."""
        raise NotImplementedError


class TokenService(ABC):
    """Port for issuing and verifying signed bearer tokens."""

    @abstractmethod
    def issue(self, user_id: str) -> str:
        """Return a signed, time-boxed token embedding the user ID."""
        raise NotImplementedError

    @abstractmethod
    def verify(self, token: str) -> str:
        """Return the user ID embedded in a valid token.

        Raises:
            InvalidTokenError: If the token is malformed, expired or forged.
        """
        raise NotImplementedError


class Mailer(ABC):
    """Port for outbound account notifications."""

    @abstractmethod
    def send_registration(self, user: User) -> None:
        """Send the welcome message.

        Raises:
            NotificationError: If delivery failed.
        """
        raise NotImplementedError

    @abstractmethod
    def send_login(self, user: User) -> None:
        """Send the login confirmation message."""
        raise NotImplementedError
