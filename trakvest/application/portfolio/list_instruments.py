"""
Use case: List every cached instrument.

Input: None
Output: list[Instrument] ordered by symbol
Side effects: None (read-only query).
Failure cases: None.
"""

from trakvest.domain.portfolio.entities import Instrument
from trakvest.domain.portfolio.ports import InstrumentRepository


class ListInstrumentsUseCase:
    def __init__(self, instrument_repo: InstrumentRepository) -> None:
        self._instrument_repo = instrument_repo

    def execute(self) -> list[Instrument]:
        return self._instrument_repo.list_all()
