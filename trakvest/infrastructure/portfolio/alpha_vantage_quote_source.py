"""
Adapter: International market data via the Alpha Vantage REST API.

Implements MarketDataSource port with an httpx client.
Uses the GLOBAL_QUOTE function for prices and OVERVIEW for company data.
Alpha Vantage reports quota exhaustion in-band with a 200 response
carrying a "Note" or "Information" field.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from trakvest.domain.portfolio.entities import CompanyProfile, Quote, utcnow
from trakvest.domain.portfolio.errors import (
    ProviderNotConfiguredError,
    ProviderRateLimitedError,
    ProviderUnavailableError,
    QuoteNotFoundError,
)
from trakvest.domain.portfolio.ports import MarketDataSource

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Alpha Vantage"
API_KEY_SETTING = "ALPHA_VANTAGE_API_KEY"
RATE_LIMIT_FIELDS = ("Note", "Information")


def _decimal_field(data: dict, key: str) -> Optional[Decimal]:
    raw = data.get(key)
    if raw in (None, "", "None"):
        return None
    try:
        return Decimal(str(raw))
    except InvalidOperation:
        return None


def _int_field(data: dict, key: str) -> Optional[int]:
    raw = data.get(key)
    try:
        return int(raw) if raw not in (None, "") else None
    except (TypeError, ValueError):
        return None


class AlphaVantageQuoteSource(MarketDataSource):
    """httpx adapter for the Alpha Vantage query endpoint.

    Args:
        api_key: Alpha Vantage credential. Without it every call raises
            ProviderNotConfiguredError.
        base_url: Query endpoint.
        timeout: Per-request timeout in seconds.
        client: Optional pre-built httpx.Client (tests inject a MockTransport).
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://www.alphavantage.co/query",
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._client = client or httpx.Client(timeout=timeout)

    def fetch_quote(self, symbol: str) -> Quote:
        payload = self._query("GLOBAL_QUOTE", symbol)
        data = payload.get("Global Quote") or {}
        if not data:
            raise QuoteNotFoundError(symbol, PROVIDER_NAME)

        price = _decimal_field(data, "05. price")
        if price is None:
            raise QuoteNotFoundError(symbol, PROVIDER_NAME)

        return Quote(
            symbol=symbol.upper(),
            price=price,
            day_high=_decimal_field(data, "03. high"),
            day_low=_decimal_field(data, "04. low"),
            volume=_int_field(data, "06. volume"),
            timestamp=utcnow(),
        )

    def fetch_company_profile(self, symbol: str) -> CompanyProfile:
        payload = self._query("OVERVIEW", symbol)
        if not payload.get("Name"):
            raise QuoteNotFoundError(symbol, PROVIDER_NAME)

        return CompanyProfile(
            symbol=symbol.upper(),
            company_name=payload["Name"],
            sector=payload.get("Sector"),
            industry=payload.get("Industry"),
            description=payload.get("Description"),
        )

    def close(self) -> None:
        self._client.close()

    def _query(self, function: str, symbol: str) -> dict[str, Any]:
        """Call the query endpoint and classify in-band failures."""
        if not self._api_key:
            raise ProviderNotConfiguredError(PROVIDER_NAME, API_KEY_SETTING)

        try:
            response = self._client.get(
                self._base_url,
                params={"function": function, "symbol": symbol, "apikey": self._api_key},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed for %s: %s", PROVIDER_NAME, function, symbol, exc)
            raise ProviderUnavailableError(PROVIDER_NAME, str(exc)) from exc
        except ValueError as exc:
            raise ProviderUnavailableError(PROVIDER_NAME, "invalid JSON response") from exc

        if not isinstance(payload, dict):
            raise ProviderUnavailableError(PROVIDER_NAME, "unexpected response shape")

        if any(field in payload for field in RATE_LIMIT_FIELDS):
            logger.warning("%s rate limit reached (%s %s)", PROVIDER_NAME, function, symbol)
            raise ProviderRateLimitedError(PROVIDER_NAME)

        if "Error Message" in payload:
            raise QuoteNotFoundError(symbol, PROVIDER_NAME)

        return payload
