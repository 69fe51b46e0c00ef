"""
Adapter: Domestic market data via Yahoo Finance.

Implements MarketDataSource port using yfinance. Symbols are looked up
on the domestic exchange by appending the configured suffix (".NS").
Every library failure is translated into a MarketDataError subclass.
"""

import logging
import math
from decimal import Decimal
from typing import Any, Callable, Optional

import yfinance as yf

from trakvest.domain.portfolio.entities import CompanyProfile, Quote, utcnow
from trakvest.domain.portfolio.errors import ProviderUnavailableError, QuoteNotFoundError
from trakvest.domain.portfolio.ports import MarketDataSource

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Yahoo Finance"


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    number = float(value)
    if math.isnan(number):
        return None
    return Decimal(str(round(number, 4)))


def _to_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    number = float(value)
    if math.isnan(number):
        return None
    return int(number)


class YahooQuoteSource(MarketDataSource):
    """yfinance adapter for allowlisted domestic symbols.

    Args:
        suffix: Exchange suffix appended to the bare symbol.
        ticker_factory: Builds a ticker object from an exchange symbol.
            Defaults to `yfinance.Ticker`.
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        suffix: str = ".NS",
        ticker_factory: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self._suffix = suffix
        self._ticker_factory = ticker_factory or yf.Ticker

    def exchange_symbol(self, symbol: str) -> str:
        return f"{symbol.upper()}{self._suffix}"

    def fetch_quote(self, symbol: str) -> Quote:
        """Return the latest daily bar as a quote."""
        exchange_symbol = self.exchange_symbol(symbol)
        try:
            history = self._ticker_factory(exchange_symbol).history(period="1d")
        except Exception as exc:
            logger.warning("yfinance history failed for %s: %s", exchange_symbol, exc)
            raise ProviderUnavailableError(PROVIDER_NAME, str(exc)) from exc

        if history is None or history.empty:
            raise QuoteNotFoundError(symbol, PROVIDER_NAME)

        last_row = history.iloc[-1]
        price = _to_decimal(last_row["Close"])
        if price is None:
            raise QuoteNotFoundError(symbol, PROVIDER_NAME)

        return Quote(
            symbol=symbol.upper(),
            price=price,
            day_high=_to_decimal(last_row.get("High")),
            day_low=_to_decimal(last_row.get("Low")),
            volume=_to_int(last_row.get("Volume")),
            timestamp=utcnow(),
        )

    def fetch_company_profile(self, symbol: str) -> CompanyProfile:
        exchange_symbol = self.exchange_symbol(symbol)
        try:
            info = self._ticker_factory(exchange_symbol).info or {}
        except Exception as exc:
            logger.warning("yfinance info failed for %s: %s", exchange_symbol, exc)
            raise ProviderUnavailableError(PROVIDER_NAME, str(exc)) from exc

        company_name = info.get("longName") or info.get("shortName")
        if not company_name:
            raise QuoteNotFoundError(symbol, PROVIDER_NAME)

        return CompanyProfile(
            symbol=symbol.upper(),
            company_name=company_name,
            sector=info.get("sector") or "N/A",
            industry=info.get("industry") or "N/A",
            description=info.get("longBusinessSummary")
            or "Company information from Yahoo Finance",
        )
