"""
Use case: Directly edit a holding's quantity or average cost.

Input: user ID, UpdateHoldingCommand
Output: Holding
Side effects: Overwrites the holding. No transaction, no balance change.
Failure cases: HoldingNotFoundError, NotOwnerError, InvalidQuantityError.
"""

from trakvest.application.portfolio.dtos import UpdateHoldingCommand
from trakvest.domain.portfolio.entities import Holding
from trakvest.domain.portfolio.position_book import PositionBook


class UpdateHoldingUseCase:
    def __init__(self, position_book: PositionBook) -> None:
        self._position_book = position_book

    def execute(self, user_id: str, command: UpdateHoldingCommand) -> Holding:
        return self._position_book.update_holding(
            user_id,
            command.holding_id,
            quantity=command.quantity,
            average_buy_price=command.average_buy_price,
        )
