"""
Position book: holdings per user.

Buys merge into an existing holding using the weighted-average cost;
sells leave the average cost untouched. Every quantity change appends an
immutable transaction. Cash moves through the AccountLedger while the
user's lock is held, so a concurrent request for the same user cannot
interleave between the holding write and the balance write.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from trakvest.domain.portfolio.entities import Holding, HoldingValuation, PortfolioSummary
from trakvest.domain.portfolio.errors import (
    BelowMinimumError,
    HoldingNotFoundError,
    InstrumentNotFoundError,
    InvalidQuantityError,
    InvalidSymbolError,
    NotOwnerError,
)
from trakvest.domain.portfolio.ledger import AccountLedger
from trakvest.domain.portfolio.market_data import is_tradable, normalize_symbol
from trakvest.domain.portfolio.ports import HoldingRepository, InstrumentRepository
from trakvest.domain.portfolio.valuation import MONEY_PLACES, summarize, value_holding
from trakvest.shared.concurrency import UserLockRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TradeOutcome:
    """Result of a trade: the affected holding (None once deleted) and the new balance."""

    holding: Optional[Holding]
    new_balance: Decimal
    value: Decimal


class PositionBook:
    """Holdings per user: valuation, buy, sell-all, partial sell, direct edit."""

    def __init__(
        self,
        holding_repo: HoldingRepository,
        instrument_repo: InstrumentRepository,
        ledger: AccountLedger,
        locks: UserLockRegistry,
    ) -> None:
        self._holding_repo = holding_repo
        self._instrument_repo = instrument_repo
        self._ledger = ledger
        self._locks = locks

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_holdings(self, user_id: str) -> list[HoldingValuation]:
        """Value every holding of the user at the cached instrument price."""
        return [
            value_holding(holding, self._cached_price(holding.symbol))
            for holding in self._holding_repo.list_for_user(user_id)
        ]

    def summary(self, user_id: str) -> PortfolioSummary:
        """Return portfolio totals, the valued holdings and the cash balance."""
        return summarize(self.list_holdings(user_id), self._ledger.balance(user_id))

    def get_owned(self, user_id: str, holding_id: str) -> Holding:
        """Return a holding after checking it belongs to the user.

        Raises:
            HoldingNotFoundError: If the holding does not exist.
            NotOwnerError: If it belongs to another user.
        """
        holding = self._holding_repo.get(holding_id)
        if holding is None:
            raise HoldingNotFoundError(holding_id)
        if holding.user_id != user_id:
            raise NotOwnerError("portfolio item", holding_id)
        return holding

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def buy(self, user_id: str, symbol: str, quantity: int, price: Decimal) -> TradeOutcome:
        """Buy quantity units at price and debit the total.

        Raises:
            InvalidSymbolError: If the symbol is not tradable.
            InvalidQuantityError: If quantity is not positive.
            BelowMinimumError: If quantity * price is below the minimum amount.
            InsufficientFundsError: If the balance cannot cover the total.
        """
        if not is_tradable(symbol):
            raise InvalidSymbolError(symbol)
        if quantity <= 0:
            raise InvalidQuantityError(quantity)

        symbol = normalize_symbol(symbol)
        total = price * quantity
        if total < self._ledger.minimum_amount:
            raise BelowMinimumError(total, self._ledger.minimum_amount)

        with self._locks.hold(user_id):
            self._ledger.ensure_funds(user_id, total)

            holding = self._holding_repo.find_by_symbol(user_id, symbol)
            if holding is None:
                holding = Holding.open(user_id, symbol, quantity, price)
            else:
                holding.record_buy(quantity, price)

            holding = self._holding_repo.save(holding)
            new_balance = self._ledger.debit(user_id, total)

        logger.info(
            "Buy for user=%s: symbol=%s, quantity=%d, price=%s",
            user_id,
            symbol,
            quantity,
            price,
        )
        return TradeOutcome(holding=holding, new_balance=new_balance, value=total)

    def sell_all(self, user_id: str, holding_id: str) -> TradeOutcome:
        """Sell the whole holding at the cached price (average cost if uncached).

        The sell transaction is recorded before the holding is deleted.
        """
        with self._locks.hold(user_id):
            holding = self.get_owned(user_id, holding_id)
            price = self._cached_price(holding.symbol)
            if price is None:
                price = holding.average_buy_price
            sale_value = (price * holding.quantity).quantize(MONEY_PLACES)

            holding.record_sell(holding.quantity, price)
            self._holding_repo.save(holding)
            new_balance = self._ledger.credit(user_id, sale_value)
            self._holding_repo.delete(holding.id)

        logger.info(
            "Sell-all for user=%s: holding=%s, symbol=%s, value=%s",
            user_id,
            holding_id,
            holding.symbol,
            sale_value,
        )
        return TradeOutcome(holding=None, new_balance=new_balance, value=sale_value)

    def sell_partial(self, user_id: str, holding_id: str, quantity: int) -> TradeOutcome:
        """Sell part of a holding at the cached instrument price.

        Raises:
            InstrumentNotFoundError: If the instrument is not cached.
            InvalidQuantityError: If quantity is not in 1..holding.quantity.
        """
        with self._locks.hold(user_id):
            holding = self.get_owned(user_id, holding_id)
            instrument = self._instrument_repo.get(holding.symbol)
            if instrument is None:
                raise InstrumentNotFoundError(holding.symbol)
            if quantity <= 0 or quantity > holding.quantity:
                raise InvalidQuantityError(quantity, holding.quantity)

            sale_value = instrument.current_price * quantity
            holding.record_sell(quantity, instrument.current_price)
            self._holding_repo.save(holding)
            new_balance = self._ledger.credit(user_id, sale_value)

            remaining: Optional[Holding] = holding
            if holding.quantity == 0:
                self._holding_repo.delete(holding.id)
                remaining = None

        logger.info(
            "Partial sell for user=%s: holding=%s, quantity=%d, value=%s",
            user_id,
            holding_id,
            quantity,
            sale_value,
        )
        return TradeOutcome(holding=remaining, new_balance=new_balance, value=sale_value)

    def update_holding(
        self,
        user_id: str,
        holding_id: str,
        quantity: Optional[int] = None,
        average_buy_price: Optional[Decimal] = None,
    ) -> Holding:
        """Overwrite quantity and/or average cost. No transaction, no balance effect."""
        if quantity is not None and quantity <= 0:
            raise InvalidQuantityError(quantity)

        with self._locks.hold(user_id):
            holding = self.get_owned(user_id, holding_id)
            if quantity is not None:
                holding.quantity = quantity
            if average_buy_price is not None:
                holding.average_buy_price = average_buy_price
            holding = self._holding_repo.save(holding)

        logger.info("Direct edit for user=%s: holding=%s", user_id, holding_id)
        return holding

    def _cached_price(self, symbol: str) -> Optional[Decimal]:
        instrument = self._instrument_repo.get(symbol)
        return instrument.current_price if instrument is not None else None
