"""
Tests for the external-service adapters.

Market-data sources run against httpx.MockTransport and fake ticker
objects; no network access. Mail delivery uses a fake SMTP class.
"""

import smtplib
from decimal import Decimal

import httpx
import pytest

from trakvest.domain.portfolio.entities import User
from trakvest.domain.portfolio.errors import (
    InvalidTokenError,
    NotificationError,
    ProviderNotConfiguredError,
    ProviderRateLimitedError,
    ProviderUnavailableError,
    QuoteNotFoundError,
)
from trakvest.infrastructure.portfolio.alpha_vantage_quote_source import (
    AlphaVantageQuoteSource,
)
from trakvest.infrastructure.portfolio.password_hasher import BcryptPasswordHasher
from trakvest.infrastructure.portfolio.smtp_mailer import SmtpMailer, render_message
from trakvest.infrastructure.portfolio.token_service import JwtTokenService
from trakvest.infrastructure.portfolio.yahoo_quote_source import YahooQuoteSource

GLOBAL_QUOTE = {
    "Global Quote": {
        "01. symbol": "AAPL",
        "03. high": "191.50",
        "04. low": "188.20",
        "05. price": "190.10",
        "06. volume": "53000000",
    }
}

OVERVIEW = {
    "Symbol": "AAPL",
    "Name": "Apple Inc",
    "Sector": "TECHNOLOGY",
    "Industry": "ELECTRONIC COMPUTERS",
    "Description": "Apple designs smartphones.",
}


def _alpha_vantage(handler, api_key: str = "demo-key") -> AlphaVantageQuoteSource:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return AlphaVantageQuoteSource(api_key=api_key, base_url="https://av.test/query", client=client)


class FakeHistory:
    """Stands in for the DataFrame returned by Ticker.history."""

    def __init__(self, rows: list[dict]) -> None:
        self.iloc = rows
        self.empty = not rows


class FakeTicker:
    def __init__(self, rows=None, info=None, error: Exception | None = None) -> None:
        self._rows = rows or []
        self.info = info or {}
        self._error = error

    def history(self, period: str) -> FakeHistory:
        if self._error is not None:
            raise self._error
        return FakeHistory(self._rows)


def _yahoo(ticker: FakeTicker) -> tuple[YahooQuoteSource, list[str]]:
    requested: list[str] = []

    def factory(symbol: str) -> FakeTicker:
        requested.append(symbol)
        return ticker

    return YahooQuoteSource(suffix=".NS", ticker_factory=factory), requested


# =====================================================================
# Alpha Vantage
# =====================================================================


class TestAlphaVantageQuoteSource:
    """Tests for the Alpha Vantage adapter."""

    def test_fetch_quote_parses_global_quote(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json=GLOBAL_QUOTE)

        quote = _alpha_vantage(handler).fetch_quote("aapl")

        assert quote.symbol == "AAPL"
        assert quote.price == Decimal("190.10")
        assert quote.day_high == Decimal("191.50")
        assert quote.day_low == Decimal("188.20")
        assert quote.volume == 53000000
        assert seen["function"] == "GLOBAL_QUOTE"
        assert seen["apikey"] == "demo-key"

    def test_fetch_company_profile(self) -> None:
        source = _alpha_vantage(lambda request: httpx.Response(200, json=OVERVIEW))

        profile = source.fetch_company_profile("AAPL")

        assert profile.company_name == "Apple Inc"
        assert profile.sector == "TECHNOLOGY"

    def test_missing_api_key(self) -> None:
        source = _alpha_vantage(lambda request: httpx.Response(200, json=GLOBAL_QUOTE), api_key="")

        with pytest.raises(ProviderNotConfiguredError) as exc_info:
            source.fetch_quote("AAPL")

        assert "ALPHA_VANTAGE_API_KEY" in exc_info.value.message

    @pytest.mark.parametrize("field", ["Note", "Information"])
    def test_in_band_rate_limit(self, field: str) -> None:
        source = _alpha_vantage(
            lambda request: httpx.Response(200, json={field: "Thank you for using Alpha Vantage"})
        )

        with pytest.raises(ProviderRateLimitedError):
            source.fetch_quote("AAPL")

    def test_error_message_means_unknown_symbol(self) -> None:
        source = _alpha_vantage(
            lambda request: httpx.Response(200, json={"Error Message": "Invalid API call"})
        )

        with pytest.raises(QuoteNotFoundError):
            source.fetch_quote("NOPE")

    def test_empty_global_quote(self) -> None:
        source = _alpha_vantage(lambda request: httpx.Response(200, json={"Global Quote": {}}))

        with pytest.raises(QuoteNotFoundError):
            source.fetch_quote("NOPE")

    def test_http_failure_is_unavailable(self) -> None:
        source = _alpha_vantage(lambda request: httpx.Response(502, text="bad gateway"))

        with pytest.raises(ProviderUnavailableError):
            source.fetch_quote("AAPL")

    def test_connection_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderUnavailableError):
            _alpha_vantage(handler).fetch_quote("AAPL")


# =====================================================================
# Yahoo Finance
# =====================================================================


class TestYahooQuoteSource:
    """Tests for the yfinance adapter with a fake ticker factory."""

    def test_fetch_quote_uses_last_row(self) -> None:
        ticker = FakeTicker(
            rows=[
                {"Close": 1490.0, "High": 1495.0, "Low": 1480.0, "Volume": 100.0},
                {"Close": 1502.35, "High": 1510.0, "Low": 1499.5, "Volume": 2500000.0},
            ]
        )
        source, requested = _yahoo(ticker)

        quote = source.fetch_quote("infy")

        assert requested == ["INFY.NS"]
        assert quote.symbol == "INFY"
        assert quote.price == Decimal("1502.35")
        assert quote.day_low == Decimal("1499.5")
        assert quote.volume == 2500000

    def test_missing_fields_become_none(self) -> None:
        ticker = FakeTicker(rows=[{"Close": 100.0, "High": float("nan"), "Low": None}])
        source, _ = _yahoo(ticker)

        quote = source.fetch_quote("TCS")

        assert quote.day_high is None
        assert quote.day_low is None
        assert quote.volume is None

    def test_empty_history_is_not_found(self) -> None:
        source, _ = _yahoo(FakeTicker(rows=[]))

        with pytest.raises(QuoteNotFoundError):
            source.fetch_quote("TCS")

    def test_library_error_is_unavailable(self) -> None:
        source, _ = _yahoo(FakeTicker(error=RuntimeError("rate limited")))

        with pytest.raises(ProviderUnavailableError):
            source.fetch_quote("TCS")

    def test_company_profile_defaults(self) -> None:
        source, _ = _yahoo(FakeTicker(info={"shortName": "Infosys"}))

        profile = source.fetch_company_profile("INFY")

        assert profile.company_name == "Infosys"
        assert profile.sector == "N/A"
        assert profile.industry == "N/A"

    def test_company_profile_without_name(self) -> None:
        source, _ = _yahoo(FakeTicker(info={"sector": "Technology"}))

        with pytest.raises(QuoteNotFoundError):
            source.fetch_company_profile("INFY")


# =====================================================================
# Credentials
# =====================================================================


class TestJwtTokenService:
    """Tests for token issue and verification."""

    def test_round_trip(self) -> None:
        service = JwtTokenService(secret="s3cret")

        assert service.verify(service.issue("user-1")) == "user-1"

    def test_expired_token(self) -> None:
        service = JwtTokenService(secret="s3cret", ttl_hours=-1)

        with pytest.raises(InvalidTokenError) as exc_info:
            service.verify(service.issue("user-1"))

        assert exc_info.value.message == "Token has expired"

    def test_foreign_signature(self) -> None:
        token = JwtTokenService(secret="other").issue("user-1")

        with pytest.raises(InvalidTokenError):
            JwtTokenService(secret="s3cret").verify(token)

    def test_garbage_token(self) -> None:
        with pytest.raises(InvalidTokenError):
            JwtTokenService(secret="s3cret").verify("not-a-token")


class TestBcryptPasswordHasher:
    """Tests for password hashing."""

    def test_hash_and_verify(self, hasher) -> None:
        password_hash = hasher.hash("secret123")

        assert password_hash.startswith("$2")
        assert hasher.verify("secret123", password_hash)
        assert not hasher.verify("secret124", password_hash)

    def test_malformed_hash_never_matches(self, hasher) -> None:
        assert not hasher.verify("secret123", "not-a-bcrypt-hash")

    def test_dummy_hash_is_stable_and_valid(self, hasher) -> None:
        dummy = hasher.dummy_hash()

        assert dummy.startswith("$2")
        assert hasher.dummy_hash() == dummy
        assert not hasher.verify("secret123", dummy)

    def test_long_passwords_are_truncated(self) -> None:
        hasher = BcryptPasswordHasher(rounds=4)
        long_password = "x" * 100

        assert hasher.verify("x" * 80, hasher.hash(long_password))


# =====================================================================
# Mail
# =====================================================================


class FakeSMTP:
    instances: list["FakeSMTP"] = []
    error: Exception | None = None

    def __init__(self, host: str, port: int, timeout: float) -> None:
        self.host = host
        self.port = port
        self.sent = []
        self.logged_in = None
        FakeSMTP.instances.append(self)

    def __enter__(self) -> "FakeSMTP":
        if FakeSMTP.error is not None:
            raise FakeSMTP.error
        return self

    def __exit__(self, *exc) -> None:
        return None

    def starttls(self) -> None:
        pass

    def login(self, username: str, password: str) -> None:
        self.logged_in = username

    def send_message(self, msg) -> None:
        self.sent.append(msg)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.error = None
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


class TestSmtpMailer:
    """Tests for SmtpMailer."""

    def _user(self) -> User:
        return User(email="alice@example.com", password_hash="x", name="Alice")

    def test_unconfigured_mailer_skips_sending(self, fake_smtp) -> None:
        mailer = SmtpMailer("smtp.test", 587, username=None, password=None)

        mailer.send_registration(self._user())

        assert mailer.configured is False
        assert fake_smtp.instances == []

    def test_sends_multipart_message(self, fake_smtp) -> None:
        mailer = SmtpMailer("smtp.test", 587, username="bot@trakvest.test", password="pw")

        mailer.send_login(self._user())

        smtp = fake_smtp.instances[0]
        msg = smtp.sent[0]
        assert smtp.logged_in == "bot@trakvest.test"
        assert msg["To"] == "alice@example.com"
        assert msg["Subject"] == "Login Successful"
        assert msg.is_multipart()

    def test_delivery_failure_raises_notification_error(self, fake_smtp) -> None:
        fake_smtp.error = OSError("connection refused")
        mailer = SmtpMailer("smtp.test", 587, username="bot@trakvest.test", password="pw")

        with pytest.raises(NotificationError):
            mailer.send_registration(self._user())

    def test_html_body_escapes_name(self) -> None:
        user = User(email="a@x.com", password_hash="x", name="<b>Eve</b>")

        subject, text, html = render_message("registration", user)

        assert subject == "Welcome to Trakvest!"
        assert "&lt;b&gt;Eve&lt;/b&gt;" in html
        assert "Hello <b>Eve</b>" in text
