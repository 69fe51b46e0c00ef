"""
Quote routing across the two market-data sources.

Domestic symbols (the fixed tradable allowlist) are served by the
primary source with the secondary one as fallback. Every other symbol
goes straight to the secondary source.
"""

import logging

from trakvest.domain.portfolio.entities import CompanyProfile, Quote
from trakvest.domain.portfolio.errors import MarketDataError
from trakvest.domain.portfolio.ports import MarketDataSource

logger = logging.getLogger(__name__)

TRADABLE_SYMBOLS: frozenset[str] = frozenset(
    {
        "RELIANCE", "TCS", "INFY", "HDFCBANK", "ICICIBANK", "HINDUNILVR",
        "BHARTIARTL", "SBIN", "BAJFINANCE", "WIPRO", "LT", "AXISBANK",
        "ASIANPAINT", "MARUTI", "KOTAKBANK", "TATAMOTORS", "SUNPHARMA",
        "NESTLEIND", "TITAN", "BAJAJFINSV", "ULTRACEMCO", "TECHM", "NTPC",
        "POWERGRID", "HCLTECH", "ITC", "M&M", "TATASTEEL", "ONGC", "ADANIENT",
    }
)


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().upper()


def is_tradable(symbol: str) -> bool:
    """Return True if the symbol belongs to the tradable allowlist (case-insensitive)."""
    return normalize_symbol(symbol) in TRADABLE_SYMBOLS


class QuoteService:
    """Two-source quote lookup with ordered fallback.

    Sources raise MarketDataError subclasses; only the last source's
    failure reaches the caller.
    """

    def __init__(self, primary: MarketDataSource, secondary: MarketDataSource) -> None:
        self._primary = primary
        self._secondary = secondary

    def is_tradable(self, symbol: str) -> bool:
        return is_tradable(symbol)

    def sources_for(self, symbol: str) -> list[MarketDataSource]:
        """Return the sources to try for a symbol, in order."""
        if is_tradable(symbol):
            return [self._primary, self._secondary]
        return [self._secondary]

    def get_quote(self, symbol: str) -> Quote:
        """Return the current quote for a symbol.

        Raises:
            MarketDataError: The failure reported by the last source tried.
        """
        symbol = normalize_symbol(symbol)
        return self._first_success(symbol, lambda source: source.fetch_quote(symbol))

    def get_company_info(self, symbol: str) -> CompanyProfile:
        """Return company name, sector, industry and description for a symbol."""
        symbol = normalize_symbol(symbol)
        return self._first_success(
            symbol, lambda source: source.fetch_company_profile(symbol)
        )

    def _first_success(self, symbol, fetch):
        sources = self.sources_for(symbol)
        for index, source in enumerate(sources):
            try:
                return fetch(source)
            except MarketDataError as exc:
                if index == len(sources) - 1:
                    raise
                logger.info(
                    "%s failed for %s (%s); trying %s",
                    source.name,
                    symbol,
                    exc.code,
                    sources[index + 1].name,
                )
        raise AssertionError("unreachable: sources_for never returns an empty list")
