"""
FastAPI router for the position book.

All routes delegate to use cases. No business logic here.
Every route acts on the caller's own holdings.
"""

from fastapi import APIRouter, Depends, status

from trakvest.application.portfolio.buy_instrument import BuyInstrumentUseCase
from trakvest.application.portfolio.dtos import BuyCommand, UpdateHoldingCommand
from trakvest.application.portfolio.get_portfolio_summary import GetPortfolioSummaryUseCase
from trakvest.application.portfolio.list_holdings import ListHoldingsUseCase
from trakvest.application.portfolio.sell_holding import SellHoldingUseCase
from trakvest.application.portfolio.sell_partial import SellPartialUseCase
from trakvest.application.portfolio.update_holding import UpdateHoldingUseCase
from trakvest.domain.portfolio.entities import User
from trakvest.interfaces.portfolio.dependencies import (
    get_buy_use_case,
    get_current_user,
    get_list_holdings_use_case,
    get_portfolio_summary_use_case,
    get_sell_holding_use_case,
    get_sell_partial_use_case,
    get_update_holding_use_case,
)
from trakvest.interfaces.portfolio.schemas import (
    BuyRequest,
    ErrorResponse,
    HoldingResponse,
    PartialSellRequest,
    PortfolioSummaryResponse,
    TradeResponse,
    UpdateHoldingRequest,
)

router = APIRouter(prefix="/portfolio", tags=["portfolio"])

NOT_FOUND_OR_FORBIDDEN = {403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


@router.get("", response_model=list[HoldingResponse], summary="List holdings with valuation")
def list_holdings(
    user: User = Depends(get_current_user),
    use_case: ListHoldingsUseCase = Depends(get_list_holdings_use_case),
) -> list[HoldingResponse]:
    return [HoldingResponse.from_valuation(v) for v in use_case.execute(user.id)]


@router.get(
    "/summary",
    response_model=PortfolioSummaryResponse,
    summary="Portfolio totals, holdings and cash balance",
)
def portfolio_summary(
    user: User = Depends(get_current_user),
    use_case: GetPortfolioSummaryUseCase = Depends(get_portfolio_summary_use_case),
) -> PortfolioSummaryResponse:
    return PortfolioSummaryResponse.from_summary(use_case.execute(user.id))


@router.post(
    "",
    response_model=TradeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Buy an instrument",
)
def buy(
    body: BuyRequest,
    user: User = Depends(get_current_user),
    use_case: BuyInstrumentUseCase = Depends(get_buy_use_case),
) -> TradeResponse:
    result = use_case.execute(
        user.id, BuyCommand(symbol=body.symbol, quantity=body.quantity, price=body.price)
    )
    return TradeResponse(
        message="Stock purchased successfully",
        holding=HoldingResponse.from_holding(result.holding),
        new_balance=result.new_balance,
        value=result.value,
    )


@router.patch(
    "/{holding_id}",
    response_model=HoldingResponse,
    responses=NOT_FOUND_OR_FORBIDDEN,
    summary="Edit a holding directly",
)
def update_holding(
    holding_id: str,
    body: UpdateHoldingRequest,
    user: User = Depends(get_current_user),
    use_case: UpdateHoldingUseCase = Depends(get_update_holding_use_case),
) -> HoldingResponse:
    holding = use_case.execute(
        user.id,
        UpdateHoldingCommand(
            holding_id=holding_id,
            quantity=body.quantity,
            average_buy_price=body.average_buy_price,
        ),
    )
    return HoldingResponse.from_holding(holding)


@router.delete(
    "/{holding_id}",
    response_model=TradeResponse,
    responses=NOT_FOUND_OR_FORBIDDEN,
    summary="Sell a whole holding",
)
def sell_all(
    holding_id: str,
    user: User = Depends(get_current_user),
    use_case: SellHoldingUseCase = Depends(get_sell_holding_use_case),
) -> TradeResponse:
    result = use_case.execute(user.id, holding_id)
    return TradeResponse(
        message="Stock sold successfully",
        new_balance=result.new_balance,
        value=result.value,
    )


@router.post(
    "/{holding_id}/partial-sell",
    response_model=TradeResponse,
    responses={400: {"model": ErrorResponse}, **NOT_FOUND_OR_FORBIDDEN},
    summary="Sell part of a holding",
)
def sell_partial(
    holding_id: str,
    body: PartialSellRequest,
    user: User = Depends(get_current_user),
    use_case: SellPartialUseCase = Depends(get_sell_partial_use_case),
) -> TradeResponse:
    result = use_case.execute(user.id, holding_id, body.quantity)
    return TradeResponse(
        message="Partial sale successful",
        holding=HoldingResponse.from_holding(result.holding) if result.holding else None,
        new_balance=result.new_balance,
        value=result.value,
    )
