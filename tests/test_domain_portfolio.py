"""
Tests for the portfolio domain layer.

Tests entities, valuation functions, the tradable allowlist and quote
routing in isolation. No IO required.
"""

from datetime import date
from decimal import Decimal

import pytest

from conftest import FakeSource
from trakvest.domain.portfolio.entities import (
    Goal,
    GoalType,
    Holding,
    PriceUpdate,
    TransactionType,
)
from trakvest.domain.portfolio.errors import (
    InsufficientFundsError,
    InvalidQuantityError,
    MissingFieldError,
    NotFoundError,
    ProviderUnavailableError,
    QuoteNotFoundError,
)
from trakvest.domain.portfolio.market_data import (
    TRADABLE_SYMBOLS,
    QuoteService,
    is_tradable,
    normalize_symbol,
)
from trakvest.domain.portfolio.valuation import (
    apply_price_update,
    compute_goal_progress,
    percentage,
    summarize,
    value_holding,
)


def _goal(goal_type: GoalType, target: str) -> Goal:
    return Goal(
        user_id="u1",
        title="Goal",
        target_amount=Decimal(target),
        target_date=date(2030, 1, 1),
        type=goal_type,
    )


class TestHoldingEntity:
    """Tests for the Holding entity."""

    def test_open_records_first_buy(self) -> None:
        holding = Holding.open("u1", "INFY", 5, Decimal("100"))

        assert holding.quantity == 5
        assert holding.average_buy_price == Decimal("100")
        assert len(holding.transactions) == 1
        assert holding.transactions[0].type is TransactionType.BUY
        assert holding.transactions[0].value == Decimal("500")

    def test_buy_recomputes_weighted_average(self) -> None:
        holding = Holding.open("u1", "INFY", 10, Decimal("100"))
        holding.record_buy(10, Decimal("200"))

        assert holding.quantity == 20
        assert holding.average_buy_price == Decimal("150")
        assert holding.investment == Decimal("3000")

    def test_sell_keeps_average_cost(self) -> None:
        holding = Holding.open("u1", "INFY", 10, Decimal("100"))
        holding.record_sell(4, Decimal("300"))

        assert holding.quantity == 6
        assert holding.average_buy_price == Decimal("100")
        assert [t.type for t in holding.transactions] == [
            TransactionType.BUY,
            TransactionType.SELL,
        ]

    def test_quantity_matches_transaction_history(self) -> None:
        holding = Holding.open("u1", "TCS", 8, Decimal("100"))
        holding.record_buy(2, Decimal("110"))
        holding.record_sell(5, Decimal("120"))

        signed = sum(
            t.quantity if t.type is TransactionType.BUY else -t.quantity
            for t in holding.transactions
        )
        assert signed == holding.quantity == 5


class TestValuation:
    """Tests for the pure valuation functions."""

    def test_percentage_rounds_to_two_places(self) -> None:
        assert percentage(Decimal("1"), Decimal("3")) == Decimal("33.33")

    def test_percentage_of_zero_is_none(self) -> None:
        assert percentage(Decimal("10"), Decimal("0")) is None

    def test_value_at_cached_price(self) -> None:
        holding = Holding.open("u1", "INFY", 10, Decimal("100"))

        valuation = value_holding(holding, Decimal("120"))

        assert valuation.current_value == Decimal("1200")
        assert valuation.profit_loss == Decimal("200")
        assert valuation.profit_loss_percentage == Decimal("20.00")

    def test_value_falls_back_to_average_cost(self) -> None:
        holding = Holding.open("u1", "INFY", 10, Decimal("100"))

        valuation = value_holding(holding, None)

        assert valuation.current_price == Decimal("100")
        assert valuation.profit_loss == Decimal("0")

    def test_repeating_average_cost_rounds_totals(self) -> None:
        holding = Holding.open("u1", "INFY", 1, Decimal("100"))
        holding.record_buy(2, Decimal("101"))

        valuation = value_holding(holding, None)

        assert valuation.investment == Decimal("302.0000")
        assert valuation.investment.as_tuple().exponent == -4
        assert valuation.profit_loss == Decimal("0")

    def test_summarize_totals(self) -> None:
        a = value_holding(Holding.open("u1", "INFY", 10, Decimal("100")), Decimal("110"))
        b = value_holding(Holding.open("u1", "TCS", 2, Decimal("500")), Decimal("450"))

        summary = summarize([a, b], balance=Decimal("250"))

        assert summary.total_investment == Decimal("2000")
        assert summary.current_value == Decimal("2000")
        assert summary.profit_loss == Decimal("0")
        assert summary.balance == Decimal("250")

    def test_empty_portfolio_has_no_percentage(self) -> None:
        summary = summarize([])

        assert summary.total_investment == Decimal("0")
        assert summary.profit_loss_percentage is None

    def test_apply_price_update_touches_only_matching_symbol(self) -> None:
        infy = value_holding(Holding.open("u1", "INFY", 10, Decimal("100")), Decimal("100"))
        tcs = value_holding(Holding.open("u1", "TCS", 1, Decimal("300")), Decimal("300"))
        before = [infy, tcs]

        after = apply_price_update(before, PriceUpdate(symbol="infy", current_price=Decimal("150")))

        assert after[0].current_value == Decimal("1500")
        assert after[0].profit_loss == Decimal("500")
        assert after[1] is tcs
        assert before[0].current_value == Decimal("1000")


class TestGoalProgress:
    """Tests for compute_goal_progress."""

    def _summary(self):
        holding = Holding.open("u1", "INFY", 10, Decimal("100"))
        return summarize([value_holding(holding, Decimal("120"))])

    def test_investment_goal_uses_cost_basis(self) -> None:
        goal = _goal(GoalType.INVESTMENT, "4000")
        assert compute_goal_progress(goal, self._summary()) == Decimal("25.00")

    def test_portfolio_value_goal_uses_market_value(self) -> None:
        goal = _goal(GoalType.PORTFOLIO_VALUE, "2400")
        assert compute_goal_progress(goal, self._summary()) == Decimal("50.00")

    def test_profit_goal_uses_unrealised_gain(self) -> None:
        goal = _goal(GoalType.PROFIT, "400")
        assert compute_goal_progress(goal, self._summary()) == Decimal("50.00")

    def test_progress_is_clamped_to_hundred(self) -> None:
        goal = _goal(GoalType.INVESTMENT, "10")
        assert compute_goal_progress(goal, self._summary()) == Decimal("100")

    def test_savings_goal_is_not_tracked(self) -> None:
        goal = _goal(GoalType.SAVINGS, "1000")
        assert compute_goal_progress(goal, self._summary()) == Decimal("0")


class TestTradableAllowlist:
    """Tests for the fixed symbol allowlist."""

    def test_allowlist_size(self) -> None:
        assert len(TRADABLE_SYMBOLS) == 30

    @pytest.mark.parametrize("symbol", ["INFY", "infy", " tcs ", "M&M"])
    def test_allowlisted_symbols_are_case_insensitive(self, symbol: str) -> None:
        assert is_tradable(symbol)

    def test_foreign_symbol_is_not_tradable(self) -> None:
        assert not is_tradable("AAPL")

    def test_normalize_symbol(self) -> None:
        assert normalize_symbol("  reliance ") == "RELIANCE"


class TestQuoteService:
    """Tests for quote routing and fallback."""

    def test_domestic_symbol_served_by_primary(self, quote_service, primary, secondary) -> None:
        quote = quote_service.get_quote("infy")

        assert quote.price == Decimal("1500")
        assert primary.calls == ["INFY"]
        assert secondary.calls == []

    def test_domestic_symbol_falls_back_to_secondary(self) -> None:
        primary = FakeSource("primary", {"INFY": ProviderUnavailableError("primary", "down")})
        secondary = FakeSource("secondary", {"INFY": "1490"})

        quote = QuoteService(primary, secondary).get_quote("INFY")

        assert quote.price == Decimal("1490")
        assert primary.calls == ["INFY"]
        assert secondary.calls == ["INFY"]

    def test_foreign_symbol_goes_to_secondary_only(self, quote_service, primary, secondary) -> None:
        quote = quote_service.get_quote("AAPL")

        assert quote.price == Decimal("190")
        assert primary.calls == []

    def test_last_failure_reaches_caller(self, quote_service) -> None:
        with pytest.raises(QuoteNotFoundError) as exc_info:
            quote_service.get_quote("WIPRO")

        assert exc_info.value.provider == "secondary"

    def test_company_info_uses_same_routing(self, quote_service) -> None:
        profile = quote_service.get_company_info("tcs")

        assert profile.company_name == "TCS Ltd"
        assert profile.description == "TCS from primary"


class TestDomainErrors:
    """Tests for domain error classes."""

    def test_insufficient_funds_message(self) -> None:
        error = InsufficientFundsError(required=Decimal("1000"), available=Decimal("500"))

        assert "1000" in error.message
        assert "500" in error.message

    def test_invalid_quantity_includes_held_amount(self) -> None:
        error = InvalidQuantityError(7, 5)

        assert error.message == "Invalid quantity: 7 (held: 5)"

    def test_missing_field_lists_fields(self) -> None:
        assert MissingFieldError(["title"]).message == "title is required"
        assert MissingFieldError(["title", "target_date"]).message == (
            "title, target_date are required"
        )

    def test_quote_not_found_is_a_not_found_error(self) -> None:
        assert isinstance(QuoteNotFoundError("XYZ", "fake"), NotFoundError)
