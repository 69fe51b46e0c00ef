"""
Dependency injection for the portfolio bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the portfolio context.

Process-wide singletons (engine, locks, quote service, hasher, token
service) are cached with lru_cache; tests replace them through
`app.dependency_overrides`.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.engine import Engine

from trakvest.application.portfolio.admin_accounts import (
    DeleteUserHoldingUseCase,
    DisableUserUseCase,
    UpdateUserUseCase,
)
from trakvest.application.portfolio.admin_reporting import (
    GetAdminStatsUseCase,
    GetUserDetailUseCase,
    ListUsersUseCase,
)
from trakvest.application.portfolio.authenticate import AuthenticateUseCase, require_admin
from trakvest.application.portfolio.buy_instrument import BuyInstrumentUseCase
from trakvest.application.portfolio.create_goal import CreateGoalUseCase
from trakvest.application.portfolio.delete_goal import DeleteGoalUseCase
from trakvest.application.portfolio.delete_instrument import DeleteInstrumentUseCase
from trakvest.application.portfolio.get_instrument import GetInstrumentUseCase
from trakvest.application.portfolio.get_portfolio_summary import GetPortfolioSummaryUseCase
from trakvest.application.portfolio.list_goals import ListGoalsUseCase
from trakvest.application.portfolio.list_holdings import ListHoldingsUseCase
from trakvest.application.portfolio.list_instruments import ListInstrumentsUseCase
from trakvest.application.portfolio.login_user import LoginUserUseCase
from trakvest.application.portfolio.refresh_instrument_price import (
    RefreshInstrumentPriceUseCase,
)
from trakvest.application.portfolio.register_user import RegisterUserUseCase
from trakvest.application.portfolio.sell_holding import SellHoldingUseCase
from trakvest.application.portfolio.sell_partial import SellPartialUseCase
from trakvest.application.portfolio.top_up_balance import TopUpBalanceUseCase
from trakvest.application.portfolio.update_holding import UpdateHoldingUseCase
from trakvest.application.portfolio.update_profile import UpdateProfileUseCase
from trakvest.application.portfolio.upsert_instrument import UpsertInstrumentUseCase
from trakvest.application.portfolio.withdraw_balance import WithdrawBalanceUseCase
from trakvest.core.config import settings
from trakvest.domain.portfolio.entities import User
from trakvest.domain.portfolio.ledger import AccountLedger
from trakvest.domain.portfolio.market_data import QuoteService
from trakvest.domain.portfolio.ports import (
    GoalRepository,
    HoldingRepository,
    InstrumentRepository,
    Mailer,
    PasswordHasher,
    TokenService,
    UserRepository,
)
from trakvest.domain.portfolio.position_book import PositionBook
from trakvest.infrastructure.database import build_engine
from trakvest.infrastructure.portfolio.alpha_vantage_quote_source import (
    AlphaVantageQuoteSource,
)
from trakvest.infrastructure.portfolio.goal_repository import GoalRepositoryAdapter
from trakvest.infrastructure.portfolio.holding_repository import HoldingRepositoryAdapter
from trakvest.infrastructure.portfolio.instrument_repository import (
    InstrumentRepositoryAdapter,
)
from trakvest.infrastructure.portfolio.password_hasher import BcryptPasswordHasher
from trakvest.infrastructure.portfolio.smtp_mailer import SmtpMailer
from trakvest.infrastructure.portfolio.token_service import JwtTokenService
from trakvest.infrastructure.portfolio.user_repository import UserRepositoryAdapter
from trakvest.infrastructure.portfolio.yahoo_quote_source import YahooQuoteSource
from trakvest.shared.concurrency import UserLockRegistry

bearer_scheme = HTTPBearer(auto_error=False)


# ----------------------------------------------------------------------
# Singletons
# ----------------------------------------------------------------------


@lru_cache
def get_engine() -> Engine:
    """Build a SQLAlchemy engine from application settings."""
    return build_engine(settings.get_database_url())


@lru_cache
def get_locks() -> UserLockRegistry:
    return UserLockRegistry()


@lru_cache
def get_quote_service() -> QuoteService:
    """Yahoo Finance for allowlisted symbols, Alpha Vantage as fallback and for the rest."""
    return QuoteService(
        primary=YahooQuoteSource(suffix=settings.domestic_symbol_suffix),
        secondary=AlphaVantageQuoteSource(
            api_key=settings.alpha_vantage_api_key,
            base_url=settings.alpha_vantage_base_url,
            timeout=settings.provider_timeout_seconds,
        ),
    )


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return BcryptPasswordHasher(rounds=settings.bcrypt_rounds)


@lru_cache
def get_token_service() -> TokenService:
    return JwtTokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl_hours=settings.token_ttl_hours,
    )


def get_mailer() -> Mailer:
    return SmtpMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        sender_name=settings.smtp_sender_name,
        timeout=settings.smtp_timeout_seconds,
    )


# ----------------------------------------------------------------------
# Repositories and domain services
# ----------------------------------------------------------------------


def get_user_repository(engine: Engine = Depends(get_engine)) -> UserRepository:
    return UserRepositoryAdapter(engine)


def get_instrument_repository(engine: Engine = Depends(get_engine)) -> InstrumentRepository:
    return InstrumentRepositoryAdapter(engine)


def get_holding_repository(engine: Engine = Depends(get_engine)) -> HoldingRepository:
    return HoldingRepositoryAdapter(engine)


def get_goal_repository(engine: Engine = Depends(get_engine)) -> GoalRepository:
    return GoalRepositoryAdapter(engine)


def get_ledger(
    user_repo: UserRepository = Depends(get_user_repository),
    locks: UserLockRegistry = Depends(get_locks),
) -> AccountLedger:
    return AccountLedger(user_repo, locks, minimum_amount=settings.minimum_amount)


def get_position_book(
    holding_repo: HoldingRepository = Depends(get_holding_repository),
    instrument_repo: InstrumentRepository = Depends(get_instrument_repository),
    ledger: AccountLedger = Depends(get_ledger),
    locks: UserLockRegistry = Depends(get_locks),
) -> PositionBook:
    return PositionBook(holding_repo, instrument_repo, ledger, locks)


# ----------------------------------------------------------------------
# Access gateway
# ----------------------------------------------------------------------


def get_register_user_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
    mailer: Mailer = Depends(get_mailer),
) -> RegisterUserUseCase:
    return RegisterUserUseCase(user_repo, hasher, tokens, mailer)


def get_login_user_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
    mailer: Mailer = Depends(get_mailer),
) -> LoginUserUseCase:
    return LoginUserUseCase(user_repo, hasher, tokens, mailer)


def get_authenticate_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
    tokens: TokenService = Depends(get_token_service),
) -> AuthenticateUseCase:
    return AuthenticateUseCase(user_repo, tokens)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authenticate: AuthenticateUseCase = Depends(get_authenticate_use_case),
) -> User:
    """Resolve the bearer token of the request to the stored user."""
    return authenticate.execute(credentials.credentials if credentials else None)


def get_current_admin(user: User = Depends(get_current_user)) -> User:
    return require_admin(user)


def get_update_profile_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
) -> UpdateProfileUseCase:
    return UpdateProfileUseCase(user_repo, max_image_bytes=settings.max_profile_image_bytes)


# ----------------------------------------------------------------------
# Ledger and position book
# ----------------------------------------------------------------------


def get_top_up_use_case(ledger: AccountLedger = Depends(get_ledger)) -> TopUpBalanceUseCase:
    return TopUpBalanceUseCase(ledger)


def get_withdraw_use_case(
    ledger: AccountLedger = Depends(get_ledger),
) -> WithdrawBalanceUseCase:
    return WithdrawBalanceUseCase(ledger)


def get_list_holdings_use_case(
    book: PositionBook = Depends(get_position_book),
) -> ListHoldingsUseCase:
    return ListHoldingsUseCase(book)


def get_portfolio_summary_use_case(
    book: PositionBook = Depends(get_position_book),
) -> GetPortfolioSummaryUseCase:
    return GetPortfolioSummaryUseCase(book)


def get_buy_use_case(book: PositionBook = Depends(get_position_book)) -> BuyInstrumentUseCase:
    return BuyInstrumentUseCase(book)


def get_sell_holding_use_case(
    book: PositionBook = Depends(get_position_book),
) -> SellHoldingUseCase:
    return SellHoldingUseCase(book)


def get_sell_partial_use_case(
    book: PositionBook = Depends(get_position_book),
) -> SellPartialUseCase:
    return SellPartialUseCase(book)


def get_update_holding_use_case(
    book: PositionBook = Depends(get_position_book),
) -> UpdateHoldingUseCase:
    return UpdateHoldingUseCase(book)


# ----------------------------------------------------------------------
# Instrument cache
# ----------------------------------------------------------------------


def get_instrument_use_case(
    instrument_repo: InstrumentRepository = Depends(get_instrument_repository),
    quote_service: QuoteService = Depends(get_quote_service),
) -> GetInstrumentUseCase:
    return GetInstrumentUseCase(instrument_repo, quote_service)


def get_list_instruments_use_case(
    instrument_repo: InstrumentRepository = Depends(get_instrument_repository),
) -> ListInstrumentsUseCase:
    return ListInstrumentsUseCase(instrument_repo)


def get_refresh_price_use_case(
    instrument_repo: InstrumentRepository = Depends(get_instrument_repository),
    quote_service: QuoteService = Depends(get_quote_service),
) -> RefreshInstrumentPriceUseCase:
    return RefreshInstrumentPriceUseCase(instrument_repo, quote_service)


def get_upsert_instrument_use_case(
    instrument_repo: InstrumentRepository = Depends(get_instrument_repository),
) -> UpsertInstrumentUseCase:
    return UpsertInstrumentUseCase(instrument_repo)


def get_delete_instrument_use_case(
    instrument_repo: InstrumentRepository = Depends(get_instrument_repository),
) -> DeleteInstrumentUseCase:
    return DeleteInstrumentUseCase(instrument_repo)


# ----------------------------------------------------------------------
# Goals
# ----------------------------------------------------------------------


def get_create_goal_use_case(
    goal_repo: GoalRepository = Depends(get_goal_repository),
    book: PositionBook = Depends(get_position_book),
) -> CreateGoalUseCase:
    return CreateGoalUseCase(goal_repo, book)


def get_list_goals_use_case(
    goal_repo: GoalRepository = Depends(get_goal_repository),
    book: PositionBook = Depends(get_position_book),
) -> ListGoalsUseCase:
    return ListGoalsUseCase(goal_repo, book)


def get_delete_goal_use_case(
    goal_repo: GoalRepository = Depends(get_goal_repository),
) -> DeleteGoalUseCase:
    return DeleteGoalUseCase(goal_repo)


# ----------------------------------------------------------------------
# Administration
# ----------------------------------------------------------------------


def get_admin_stats_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
    holding_repo: HoldingRepository = Depends(get_holding_repository),
    instrument_repo: InstrumentRepository = Depends(get_instrument_repository),
) -> GetAdminStatsUseCase:
    return GetAdminStatsUseCase(user_repo, holding_repo, instrument_repo)


def get_list_users_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
    book: PositionBook = Depends(get_position_book),
) -> ListUsersUseCase:
    return ListUsersUseCase(user_repo, book)


def get_user_detail_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
    book: PositionBook = Depends(get_position_book),
) -> GetUserDetailUseCase:
    return GetUserDetailUseCase(user_repo, book)


def get_update_user_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
) -> UpdateUserUseCase:
    return UpdateUserUseCase(user_repo)


def get_disable_user_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
) -> DisableUserUseCase:
    return DisableUserUseCase(user_repo)


def get_delete_user_holding_use_case(
    user_repo: UserRepository = Depends(get_user_repository),
    holding_repo: HoldingRepository = Depends(get_holding_repository),
    locks: UserLockRegistry = Depends(get_locks),
) -> DeleteUserHoldingUseCase:
    return DeleteUserHoldingUseCase(user_repo, holding_repo, locks)
