"""
Use case: Remove an instrument from the cache (admin).

Input: symbol
Output: None
Side effects: Deletes the cached row. Holdings in the symbol are kept and
    fall back to cost valuation.
Failure cases: InstrumentNotFoundError.
"""

import logging

from trakvest.domain.portfolio.errors import InstrumentNotFoundError
from trakvest.domain.portfolio.market_data import normalize_symbol
from trakvest.domain.portfolio.ports import InstrumentRepository

logger = logging.getLogger(__name__)


class DeleteInstrumentUseCase:
    def __init__(self, instrument_repo: InstrumentRepository) -> None:
        self._instrument_repo = instrument_repo

    def execute(self, symbol: str) -> None:
        symbol = normalize_symbol(symbol)
        if not self._instrument_repo.delete(symbol):
            raise InstrumentNotFoundError(symbol)
        logger.info("Deleted instrument %s", symbol)
