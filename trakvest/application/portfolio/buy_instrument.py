"""
Use case: Buy units of a tradable instrument.

Input: user ID, BuyCommand (symbol, quantity, price)
Output: TradeResult (merged holding, new balance, total cost)
Side effects: Writes the holding and its buy transaction; debits the balance.
Failure cases: InvalidSymbolError, InvalidQuantityError, BelowMinimumError,
    InsufficientFundsError.
"""

from trakvest.application.portfolio.dtos import BuyCommand, TradeResult
from trakvest.domain.portfolio.position_book import PositionBook


class BuyInstrumentUseCase:
    """Orchestrates a purchase through the position book."""

    def __init__(self, position_book: PositionBook) -> None:
        self._position_book = position_book

    def execute(self, user_id: str, command: BuyCommand) -> TradeResult:
        """Run the buy use case.

        Args:
            user_id: The buyer.
            command: Symbol, quantity and unit price.

        Returns:
            The holding after the merge and the balance after the debit.
        """
        outcome = self._position_book.buy(
            user_id, command.symbol, command.quantity, command.price
        )
        return TradeResult(
            holding=outcome.holding,
            new_balance=outcome.new_balance,
            value=outcome.value,
        )
