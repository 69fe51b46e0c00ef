"""
Use case: Create or overwrite a cached instrument (admin).

Input: UpsertInstrumentCommand
Output: Instrument
Side effects: Writes the instrument cache.
Failure cases: None beyond request validation.
"""

import logging

from trakvest.application.portfolio.dtos import UpsertInstrumentCommand
from trakvest.domain.portfolio.entities import Instrument, utcnow
from trakvest.domain.portfolio.market_data import normalize_symbol
from trakvest.domain.portfolio.ports import InstrumentRepository

logger = logging.getLogger(__name__)


class UpsertInstrumentUseCase:
    def __init__(self, instrument_repo: InstrumentRepository) -> None:
        self._instrument_repo = instrument_repo

    def execute(self, command: UpsertInstrumentCommand) -> Instrument:
        instrument = Instrument(
            symbol=normalize_symbol(command.symbol),
            company_name=command.company_name,
            current_price=command.current_price,
            day_high=command.day_high,
            day_low=command.day_low,
            volume=command.volume,
            sector=command.sector,
            industry=command.industry,
            description=command.description,
            last_updated=utcnow(),
        )
        logger.info("Upserting instrument %s", instrument.symbol)
        return self._instrument_repo.upsert(instrument)
