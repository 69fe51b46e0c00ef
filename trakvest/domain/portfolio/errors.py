"""
Domain-specific errors for the portfolio bounded context.

All errors raised from the domain layer must be defined here.
Each error belongs to one category base class; the interface layer
maps categories to HTTP responses.
No framework imports allowed.
"""

from decimal import Decimal


class PortfolioDomainError(Exception):
    """Base error for all portfolio domain errors."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


# ----------------------------------------------------------------------
# Categories
# ----------------------------------------------------------------------


class ValidationError(PortfolioDomainError):
    """Input is missing, malformed or breaks a business rule."""

    code = "VALIDATION_ERROR"


class AuthenticationError(PortfolioDomainError):
    """Caller could not be authenticated."""

    code = "UNAUTHORIZED"


class PermissionDeniedError(PortfolioDomainError):
    """Caller is authenticated but not entitled to the resource."""

    code = "FORBIDDEN"


class NotFoundError(PortfolioDomainError):
    """Entity is absent or not visible to the caller."""

    code = "NOT_FOUND"


class ConflictError(PortfolioDomainError):
    """A unique key is already taken."""

    code = "CONFLICT"


class MarketDataError(PortfolioDomainError):
    """Base for failures reported by a market-data source."""

    code = "MARKET_DATA_ERROR"


class ProviderUnavailableError(MarketDataError):
    """Upstream market-data provider failed or returned garbage."""

    code = "PROVIDER_UNAVAILABLE"

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"Market data provider {provider} unavailable: {reason}")
        self.provider = provider
        self.reason = reason


class ProviderNotConfiguredError(ProviderUnavailableError):
    """The provider needs a credential that the operator did not configure."""

    code = "PROVIDER_NOT_CONFIGURED"

    def __init__(self, provider: str, setting: str) -> None:
        MarketDataError.__init__(
            self,
            f"{provider} API key not configured. Set {setting} in the environment "
            "or .env file. Required for international stocks.",
        )
        self.provider = provider
        self.reason = "not configured"
        self.setting = setting


class ProviderRateLimitedError(MarketDataError):
    """Upstream quota is exhausted; the caller may retry later."""

    code = "RATE_LIMITED"

    def __init__(self, provider: str) -> None:
        super().__init__(
            f"{provider} API rate limit reached. Please try again in a minute."
        )
        self.provider = provider


class QuoteNotFoundError(MarketDataError, NotFoundError):
    """The provider returned no data for the symbol."""

    code = "QUOTE_NOT_FOUND"

    def __init__(self, symbol: str, provider: str) -> None:
        PortfolioDomainError.__init__(
            self, f"No data found for symbol {symbol} from {provider}"
        )
        self.symbol = symbol
        self.provider = provider


# ----------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------


class MissingFieldError(ValidationError):
    """Raised when required fields are absent."""

    code = "MISSING_FIELD"

    def __init__(self, fields: list[str]) -> None:
        super().__init__(f"{', '.join(fields)} {'is' if len(fields) == 1 else 'are'} required")
        self.fields = fields


class InvalidAmountError(ValidationError):
    """Raised when a cash amount is below the minimum or not positive."""

    code = "INVALID_AMOUNT"

    def __init__(self, amount: Decimal, minimum: Decimal) -> None:
        super().__init__(f"Invalid amount {amount}: minimum amount is {minimum}")
        self.amount = amount
        self.minimum = minimum


class BelowMinimumError(ValidationError):
    """Raised when a purchase total is below the minimum order value."""

    code = "BELOW_MINIMUM"

    def __init__(self, total: Decimal, minimum: Decimal) -> None:
        super().__init__(f"Minimum purchase amount is {minimum}, got {total}")
        self.total = total
        self.minimum = minimum


class InsufficientFundsError(ValidationError):
    """Raised when the cash balance cannot cover a debit."""

    code = "INSUFFICIENT_FUNDS"

    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            f"Insufficient funds: required {required}, available {available}"
        )
        self.required = required
        self.available = available


class InvalidSymbolError(ValidationError):
    """Raised when a symbol is outside the tradable allowlist."""

    code = "INVALID_SYMBOL"

    def __init__(self, symbol: str) -> None:
        super().__init__(f'Invalid stock symbol. "{symbol}" is not a valid stock.')
        self.symbol = symbol


class InvalidQuantityError(ValidationError):
    """Raised when a trade quantity is not positive or exceeds the holding."""

    code = "INVALID_QUANTITY"

    def __init__(self, quantity: int, available: int | None = None) -> None:
        detail = f"Invalid quantity: {quantity}"
        if available is not None:
            detail += f" (held: {available})"
        super().__init__(detail)
        self.quantity = quantity
        self.available = available


class InvalidProfileImageError(ValidationError):
    """Raised when a profile image is not an acceptable base64 data URL."""

    code = "INVALID_IMAGE"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)


class InvalidGoalError(ValidationError):
    """Raised when a goal carries an unusable value."""

    code = "INVALID_GOAL"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)


# ----------------------------------------------------------------------
# Access
# ----------------------------------------------------------------------


class InvalidCredentialsError(AuthenticationError):
    """Raised on failed login. Never reveals which part was wrong."""

    code = "INVALID_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token is missing, invalid, expired or revoked."""

    code = "INVALID_TOKEN"

    def __init__(self, reason: str = "Invalid or expired token") -> None:
        super().__init__(reason)


class AdminRequiredError(PermissionDeniedError):
    """Raised when a non-admin calls an admin operation."""

    code = "ADMIN_REQUIRED"

    def __init__(self) -> None:
        super().__init__("Admin access required")


class NotOwnerError(PermissionDeniedError):
    """Raised when a user touches another user's holding."""

    code = "NOT_OWNER"

    def __init__(self, resource: str, resource_id: str) -> None:
        super().__init__(f"Not authorized to access this {resource}")
        self.resource = resource
        self.resource_id = resource_id


# ----------------------------------------------------------------------
# Lookups
# ----------------------------------------------------------------------


class UserNotFoundError(NotFoundError):
    """Raised when a user cannot be found."""

    code = "USER_NOT_FOUND"

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class HoldingNotFoundError(NotFoundError):
    """Raised when a holding cannot be found."""

    code = "HOLDING_NOT_FOUND"

    def __init__(self, holding_id: str) -> None:
        super().__init__(f"Portfolio item not found: {holding_id}")
        self.holding_id = holding_id


class GoalNotFoundError(NotFoundError):
    """Raised when a goal is absent or belongs to another user."""

    code = "GOAL_NOT_FOUND"

    def __init__(self, goal_id: str) -> None:
        super().__init__(f"Goal not found: {goal_id}")
        self.goal_id = goal_id


class InstrumentNotFoundError(NotFoundError):
    """Raised when a symbol is not present in the instrument cache."""

    code = "INSTRUMENT_NOT_FOUND"

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Stock not found: {symbol}")
        self.symbol = symbol


# ----------------------------------------------------------------------
# Conflicts
# ----------------------------------------------------------------------


class EmailAlreadyRegisteredError(ConflictError):
    """Raised when registering an email that is already taken."""

    code = "EMAIL_TAKEN"

    def __init__(self, email: str) -> None:
        super().__init__("User already exists")
        self.email = email


# ----------------------------------------------------------------------
# Notifications
# ----------------------------------------------------------------------


class NotificationError(PortfolioDomainError):
    """Raised by a mailer when a message could not be delivered."""

    code = "NOTIFICATION_FAILED"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Notification failed: {reason}")
        self.reason = reason
