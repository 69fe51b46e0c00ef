"""
Use case: Refresh the cached price of one instrument.

Input: symbol
Output: Instrument
Side effects: Writes the live quote into the cached row.
Failure cases: InstrumentNotFoundError, MarketDataError (no cache fallback).
"""

import logging

from trakvest.domain.portfolio.entities import Instrument
from trakvest.domain.portfolio.errors import InstrumentNotFoundError
from trakvest.domain.portfolio.market_data import QuoteService, normalize_symbol
from trakvest.domain.portfolio.ports import InstrumentRepository

logger = logging.getLogger(__name__)


class RefreshInstrumentPriceUseCase:
    def __init__(
        self, instrument_repo: InstrumentRepository, quote_service: QuoteService
    ) -> None:
        self._instrument_repo = instrument_repo
        self._quote_service = quote_service

    def execute(self, symbol: str) -> Instrument:
        symbol = normalize_symbol(symbol)
        if self._instrument_repo.get(symbol) is None:
            raise InstrumentNotFoundError(symbol)

        quote = self._quote_service.get_quote(symbol)
        instrument = self._instrument_repo.apply_quote(quote)
        if instrument is None:
            raise InstrumentNotFoundError(symbol)

        logger.info("Refreshed %s at %s", symbol, quote.price)
        return instrument
