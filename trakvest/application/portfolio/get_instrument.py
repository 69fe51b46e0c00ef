"""
Use case: Fetch live market data for a symbol and refresh the cache.

Input: symbol
Output: Instrument (cached=False when live, cached=True on fallback)
Side effects: Upserts the instrument cache on a live fetch.
Failure cases: ProviderNotConfiguredError (never masked by the cache),
    any other MarketDataError when the symbol is not cached.
"""

import logging

from trakvest.domain.portfolio.entities import Instrument, utcnow
from trakvest.domain.portfolio.errors import MarketDataError, ProviderNotConfiguredError
from trakvest.domain.portfolio.market_data import QuoteService, normalize_symbol
from trakvest.domain.portfolio.ports import InstrumentRepository

logger = logging.getLogger(__name__)


class GetInstrumentUseCase:
    """Merges the live quote with company info and caches the result.

    When the providers fail, the last cached row is served with
    `cached=True` so the caller can tell it is stale.
    """

    def __init__(
        self, instrument_repo: InstrumentRepository, quote_service: QuoteService
    ) -> None:
        self._instrument_repo = instrument_repo
        self._quote_service = quote_service

    def execute(self, symbol: str) -> Instrument:
        """Run the get-instrument use case.

        Args:
            symbol: Instrument symbol, case-insensitive.

        Returns:
            Fresh or cached instrument data.

        Raises:
            ProviderNotConfiguredError: If the provider credential is missing.
            MarketDataError: If the fetch failed and nothing is cached.
        """
        symbol = normalize_symbol(symbol)
        try:
            quote = self._quote_service.get_quote(symbol)
            profile = self._quote_service.get_company_info(symbol)
        except ProviderNotConfiguredError:
            raise
        except MarketDataError as exc:
            cached = self._instrument_repo.get(symbol)
            if cached is None:
                raise
            logger.warning(
                "Serving cached data for %s after provider failure: %s",
                symbol,
                exc.message,
            )
            cached.cached = True
            return cached

        instrument = Instrument(
            symbol=symbol,
            company_name=profile.company_name or symbol,
            current_price=quote.price,
            day_high=quote.day_high,
            day_low=quote.day_low,
            volume=quote.volume,
            sector=profile.sector,
            industry=profile.industry,
            description=profile.description,
            last_updated=utcnow(),
            cached=False,
        )
        return self._instrument_repo.upsert(instrument)
