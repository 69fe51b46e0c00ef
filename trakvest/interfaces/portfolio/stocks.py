"""
FastAPI router for the instrument cache.

All routes delegate to use cases. No business logic here.
Reads are open to any signed-in user; writes require an admin.
"""

from fastapi import APIRouter, Depends, status

from trakvest.application.portfolio.delete_instrument import DeleteInstrumentUseCase
from trakvest.application.portfolio.dtos import UpsertInstrumentCommand
from trakvest.application.portfolio.get_instrument import GetInstrumentUseCase
from trakvest.application.portfolio.list_instruments import ListInstrumentsUseCase
from trakvest.application.portfolio.refresh_instrument_price import (
    RefreshInstrumentPriceUseCase,
)
from trakvest.application.portfolio.upsert_instrument import UpsertInstrumentUseCase
from trakvest.domain.portfolio.entities import User
from trakvest.interfaces.portfolio.dependencies import (
    get_current_admin,
    get_current_user,
    get_delete_instrument_use_case,
    get_instrument_use_case,
    get_list_instruments_use_case,
    get_refresh_price_use_case,
    get_upsert_instrument_use_case,
)
from trakvest.interfaces.portfolio.schemas import (
    ErrorResponse,
    InstrumentResponse,
    InstrumentUpsertRequest,
    MessageResponse,
)

router = APIRouter(prefix="/stocks", tags=["stocks"])

MARKET_DATA_ERRORS = {
    404: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.get("", response_model=list[InstrumentResponse], summary="List cached instruments")
def list_instruments(
    _user: User = Depends(get_current_user),
    use_case: ListInstrumentsUseCase = Depends(get_list_instruments_use_case),
) -> list[InstrumentResponse]:
    return [InstrumentResponse.from_entity(i) for i in use_case.execute()]


@router.get(
    "/{symbol}",
    response_model=InstrumentResponse,
    responses=MARKET_DATA_ERRORS,
    summary="Live quote and company data, cached on success",
)
def get_instrument(
    symbol: str,
    _user: User = Depends(get_current_user),
    use_case: GetInstrumentUseCase = Depends(get_instrument_use_case),
) -> InstrumentResponse:
    return InstrumentResponse.from_entity(use_case.execute(symbol))


@router.patch(
    "/{symbol}/price",
    response_model=InstrumentResponse,
    responses=MARKET_DATA_ERRORS,
    summary="Refresh the cached price of one instrument",
)
def refresh_price(
    symbol: str,
    _user: User = Depends(get_current_user),
    use_case: RefreshInstrumentPriceUseCase = Depends(get_refresh_price_use_case),
) -> InstrumentResponse:
    return InstrumentResponse.from_entity(use_case.execute(symbol))


@router.post(
    "",
    response_model=InstrumentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}},
    summary="Create or overwrite a cached instrument (admin)",
)
def upsert_instrument(
    body: InstrumentUpsertRequest,
    _admin: User = Depends(get_current_admin),
    use_case: UpsertInstrumentUseCase = Depends(get_upsert_instrument_use_case),
) -> InstrumentResponse:
    instrument = use_case.execute(UpsertInstrumentCommand(**body.model_dump()))
    return InstrumentResponse.from_entity(instrument)


@router.delete(
    "/{symbol}",
    response_model=MessageResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Remove an instrument from the cache (admin)",
)
def delete_instrument(
    symbol: str,
    _admin: User = Depends(get_current_admin),
    use_case: DeleteInstrumentUseCase = Depends(get_delete_instrument_use_case),
) -> MessageResponse:
    use_case.execute(symbol)
    return MessageResponse(message="Stock removed")
