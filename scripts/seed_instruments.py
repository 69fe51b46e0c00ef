#!/usr/bin/env python3
"""
Seed the instrument cache with live market data.

Fetches quote and company data for each symbol and upserts it into the
instruments table. Symbols that fail are logged and skipped.

Usage:
    python scripts/seed_instruments.py                 # all tradable symbols
    python scripts/seed_instruments.py INFY TCS SBIN   # selected symbols
    python scripts/seed_instruments.py --clear
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from trakvest.application.portfolio.get_instrument import GetInstrumentUseCase
from trakvest.core.config import settings
from trakvest.domain.portfolio.errors import MarketDataError
from trakvest.domain.portfolio.market_data import TRADABLE_SYMBOLS, QuoteService
from trakvest.infrastructure.database import build_engine, create_schema
from trakvest.infrastructure.portfolio.alpha_vantage_quote_source import (
    AlphaVantageQuoteSource,
)
from trakvest.infrastructure.portfolio.instrument_repository import (
    InstrumentRepositoryAdapter,
)
from trakvest.infrastructure.portfolio.yahoo_quote_source import YahooQuoteSource
from trakvest.shared.logging import configure_logging

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the instrument cache")
    parser.add_argument("symbols", nargs="*", help="Symbols to seed (default: allowlist)")
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete every cached instrument before seeding",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args()
    configure_logging(args.log_level)

    engine = build_engine(settings.get_database_url())
    create_schema(engine)
    instruments = InstrumentRepositoryAdapter(engine)

    if args.clear:
        for symbol in instruments.list_symbols():
            instruments.delete(symbol)
        logger.info("Cleared existing instruments")

    quote_service = QuoteService(
        primary=YahooQuoteSource(suffix=settings.domestic_symbol_suffix),
        secondary=AlphaVantageQuoteSource(
            api_key=settings.alpha_vantage_api_key,
            base_url=settings.alpha_vantage_base_url,
            timeout=settings.provider_timeout_seconds,
        ),
    )
    use_case = GetInstrumentUseCase(instruments, quote_service)

    symbols = [s.upper() for s in args.symbols] or sorted(TRADABLE_SYMBOLS)
    seeded = 0
    for symbol in symbols:
        try:
            instrument = use_case.execute(symbol)
        except MarketDataError as exc:
            logger.warning("Skipping %s: %s", symbol, exc.message)
            continue
        seeded += 1
        logger.info("Seeded %s at %s", instrument.symbol, instrument.current_price)

    logger.info("Seeded %d/%d instruments", seeded, len(symbols))
    return 0 if seeded else 1


if __name__ == "__main__":
    sys.exit(main())
