"""
Pure valuation functions.

Holdings are valued against the last cached instrument price, falling
back to the average cost when the instrument is unknown. Money totals
are rounded to four places, the storage scale of balances. The same
functions back the REST read path and the client-side reducer that
merges pushed price updates into already valued holdings.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Optional

from trakvest.domain.portfolio.entities import (
    Goal,
    GoalType,
    Holding,
    HoldingValuation,
    PortfolioSummary,
    PriceUpdate,
)

HUNDRED = Decimal("100")
PERCENT_PLACES = Decimal("0.01")
MONEY_PLACES = Decimal("0.0001")


def percentage(part: Decimal, whole: Decimal) -> Optional[Decimal]:
    """Return part/whole as a percentage rounded to two places, or None for a zero whole."""
    if not whole:
        return None
    return (part / whole * HUNDRED).quantize(PERCENT_PLACES)


def value_holding(holding: Holding, current_price: Optional[Decimal]) -> HoldingValuation:
    """Value a holding at the given price (average cost when None)."""
    price = current_price if current_price is not None else holding.average_buy_price
    investment = holding.investment.quantize(MONEY_PLACES)
    current_value = (price * holding.quantity).quantize(MONEY_PLACES)
    profit_loss = current_value - investment
    return HoldingValuation(
        holding=holding,
        current_price=price,
        investment=investment,
        current_value=current_value,
        profit_loss=profit_loss,
        profit_loss_percentage=percentage(profit_loss, investment),
    )


def summarize(
    valuations: Iterable[HoldingValuation], balance: Decimal = Decimal("0")
) -> PortfolioSummary:
    """Fold holding valuations into portfolio totals."""
    items = list(valuations)
    return PortfolioSummary(
        total_investment=sum((v.investment for v in items), Decimal("0")),
        current_value=sum((v.current_value for v in items), Decimal("0")),
        items=items,
        balance=balance,
    )


def compute_goal_progress(goal: Goal, summary: PortfolioSummary) -> Decimal:
    """Return goal progress in percent, clamped to [0, 100].

    investment       -> total cost basis
    portfolio_value  -> current market value
    profit           -> unrealised gain (losses count as zero)
    savings          -> not tracked by holdings, always 0
    """
    if goal.target_amount <= 0:
        return Decimal("0")

    if goal.type is GoalType.INVESTMENT:
        achieved = summary.total_investment
    elif goal.type is GoalType.PORTFOLIO_VALUE:
        achieved = summary.current_value
    elif goal.type is GoalType.PROFIT:
        achieved = max(summary.profit_loss, Decimal("0"))
    else:
        return Decimal("0")

    progress = percentage(achieved, goal.target_amount) or Decimal("0")
    return min(max(progress, Decimal("0")), HUNDRED)


def apply_price_update(
    valuations: list[HoldingValuation], update: PriceUpdate
) -> list[HoldingValuation]:
    """Merge a pushed price update into valued holdings.

    Only holdings in the updated symbol are recomputed; the others are
    returned as-is. The input list is not modified.
    """
    symbol = update.symbol.upper()
    merged = []
    for valuation in valuations:
        if valuation.holding.symbol.upper() != symbol:
            merged.append(valuation)
            continue
        revalued = value_holding(valuation.holding, update.current_price)
        merged.append(replace(valuation, **_price_fields(revalued)))
    return merged


def _price_fields(valuation: HoldingValuation) -> dict:
    return {
        "current_price": valuation.current_price,
        "current_value": valuation.current_value,
        "profit_loss": valuation.profit_loss,
        "profit_loss_percentage": valuation.profit_loss_percentage,
    }
