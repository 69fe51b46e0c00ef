"""
Price broadcast loop.

Refreshes every cached instrument from the market-data providers and
pushes each fresh quote to connected WebSocket clients.

State machine:
    IDLE ──▶ RUNNING(batch 1/N) ──▶ WAITING ──▶ RUNNING(batch 2/N) ──▶ ... ──▶ IDLE

One cycle runs right after startup, then the next one is armed
`interval` seconds after the previous cycle finished. The job is a
one-shot APScheduler DateTrigger that re-arms itself, so cycles never
overlap even when a cycle takes longer than the interval.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from trakvest.domain.portfolio.market_data import QuoteService
from trakvest.domain.portfolio.ports import InstrumentRepository
from trakvest.realtime.stream import PriceStreamManager

logger = logging.getLogger(__name__)

JOB_ID = "price_refresh"


class LoopState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    WAITING = "waiting"


@dataclass
class CycleResult:
    """Outcome of one refresh cycle."""

    started_at: str
    finished_at: str | None = None
    symbols: int = 0
    refreshed: int = 0
    failed: list[str] = field(default_factory=list)
    error: str | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def split_batches(symbols: list[str], batch_size: int) -> list[list[str]]:
    """Split symbols into consecutive batches of at most batch_size."""
    size = max(batch_size, 1)
    return [symbols[i:i + size] for i in range(0, len(symbols), size)]


class PriceBroadcastLoop:
    """Timer-driven batched refresh of the instrument cache.

    Provider and database calls are blocking, so each one runs in a
    worker thread; a batch is fetched concurrently. A failed symbol is
    logged and skipped. A failed cycle is logged and the next cycle is
    still armed.

    Usage:
        loop = PriceBroadcastLoop(instrument_repo, quote_service, stream_manager)
        loop.start()           # inside a running event loop
        await loop.run_cycle() # one cycle, on demand
        loop.stop()
    """

    def __init__(
        self,
        instrument_repo: InstrumentRepository,
        quote_service: QuoteService,
        stream_manager: PriceStreamManager,
        interval_seconds: float = 300,
        batch_size: int = 5,
        batch_delay_seconds: float = 60.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._instrument_repo = instrument_repo
        self._quote_service = quote_service
        self._stream = stream_manager
        self._interval = interval_seconds
        self._batch_size = batch_size
        self._batch_delay = batch_delay_seconds
        self._sleep = sleep

        self._state = LoopState.IDLE
        self._current_batch = 0
        self._total_batches = 0
        self._last_result: Optional[CycleResult] = None
        self._cycles = 0
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None

    @property
    def last_result(self) -> Optional[CycleResult]:
        return self._last_result

    @property
    def status(self) -> dict:
        next_run = None
        if self._scheduler is not None:
            job = self._scheduler.get_job(JOB_ID)
            if job is not None and job.next_run_time is not None:
                next_run = job.next_run_time.isoformat()

        return {
            "scheduled": self.is_running,
            "state": self._state.value,
            "current_batch": self._current_batch,
            "total_batches": self._total_batches,
            "cycles_completed": self._cycles,
            "interval_seconds": self._interval,
            "next_run_time": next_run,
            "last_cycle": asdict(self._last_result) if self._last_result else None,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the scheduler and arm an immediate first cycle."""
        if self._scheduler is not None:
            logger.warning("PriceBroadcastLoop already running.")
            return

        self._scheduler = AsyncIOScheduler(
            timezone="UTC",
            job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": None},
        )
        self._scheduler.start()
        self._arm(_now())
        logger.info(
            "PriceBroadcastLoop started (interval=%ss, batch_size=%d, batch_delay=%ss).",
            self._interval,
            self._batch_size,
            self._batch_delay,
        )

    def stop(self) -> None:
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
        self._state = LoopState.IDLE
        logger.info("PriceBroadcastLoop stopped.")

    def _arm(self, run_at: datetime) -> None:
        if self._scheduler is None:
            return
        self._scheduler.add_job(
            self._run_and_rearm,
            DateTrigger(run_date=run_at),
            id=JOB_ID,
            name="Refresh cached instrument prices",
            replace_existing=True,
        )

    async def _run_and_rearm(self) -> None:
        try:
            await self.run_cycle()
        except Exception:
            logger.exception("Price refresh cycle failed")
        finally:
            self._arm(_now() + timedelta(seconds=self._interval))

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    async def run_cycle(self) -> CycleResult:
        """Refresh every cached symbol, batch by batch."""
        result = CycleResult(started_at=_now().isoformat())
        self._state = LoopState.RUNNING
        try:
            symbols = await asyncio.to_thread(self._instrument_repo.list_symbols)
            batches = split_batches(symbols, self._batch_size)
            result.symbols = len(symbols)
            self._total_batches = len(batches)

            for index, batch in enumerate(batches):
                self._state = LoopState.RUNNING
                self._current_batch = index + 1
                logger.info(
                    "Refreshing batch %d/%d: %s", index + 1, len(batches), ", ".join(batch)
                )

                outcomes = await asyncio.gather(*(self._refresh_symbol(s) for s in batch))
                result.refreshed += sum(1 for ok in outcomes if ok)
                result.failed.extend(s for s, ok in zip(batch, outcomes) if not ok)

                if index < len(batches) - 1:
                    self._state = LoopState.WAITING
                    await self._sleep(self._batch_delay)
        except Exception as exc:
            result.error = str(exc)
            raise
        finally:
            result.finished_at = _now().isoformat()
            self._state = LoopState.IDLE
            self._current_batch = 0
            self._cycles += 1
            self._last_result = result

        logger.info(
            "Price refresh cycle done: %d/%d refreshed, %d failed",
            result.refreshed,
            result.symbols,
            len(result.failed),
        )
        return result

    async def _refresh_symbol(self, symbol: str) -> bool:
        """Fetch, store and broadcast one quote. Returns False on any failure."""
        try:
            quote = await asyncio.to_thread(self._quote_service.get_quote, symbol)
            instrument = await asyncio.to_thread(self._instrument_repo.apply_quote, quote)
            if instrument is None:
                logger.info("Skipping %s: removed from cache during refresh", symbol)
                return False
            await self._stream.broadcast_price(instrument)
            return True
        except Exception as exc:
            logger.warning("Price refresh failed for %s: %s", symbol, exc)
            return False
