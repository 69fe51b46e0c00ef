"""
FastAPI router for administrative reporting and account management.

All routes require an admin account and delegate to use cases.
"""

from fastapi import APIRouter, Depends, Query

from trakvest.application.portfolio.admin_accounts import (
    DeleteUserHoldingUseCase,
    DisableUserUseCase,
    UpdateUserUseCase,
)
from trakvest.application.portfolio.admin_reporting import (
    GetAdminStatsUseCase,
    GetUserDetailUseCase,
    ListUsersUseCase,
)
from trakvest.application.portfolio.dtos import UpdateUserCommand, UserOverview
from trakvest.domain.portfolio.entities import User
from trakvest.interfaces.portfolio.dependencies import (
    get_admin_stats_use_case,
    get_current_admin,
    get_delete_user_holding_use_case,
    get_disable_user_use_case,
    get_list_users_use_case,
    get_update_user_use_case,
    get_user_detail_use_case,
)
from trakvest.interfaces.portfolio.schemas import (
    AdminStatsResponse,
    AdminUserResponse,
    AdminUserUpdateRequest,
    ErrorResponse,
    HoldingResponse,
    MessageResponse,
    UserResponse,
)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


def _to_admin_user(overview: UserOverview) -> AdminUserResponse:
    return AdminUserResponse(
        **UserResponse.from_entity(overview.user).model_dump(),
        holdings=[HoldingResponse.from_valuation(v) for v in overview.holdings],
    )


@router.get("/stats", response_model=AdminStatsResponse, summary="Platform counts")
def stats(
    use_case: GetAdminStatsUseCase = Depends(get_admin_stats_use_case),
) -> AdminStatsResponse:
    result = use_case.execute()
    return AdminStatsResponse(
        total_users=result.total_users,
        total_holdings=result.total_holdings,
        total_instruments=result.total_instruments,
        last_updated=result.last_updated,
    )


@router.get(
    "/users",
    response_model=list[AdminUserResponse],
    summary="Users with their holdings",
)
def list_users(
    show_disabled: bool = Query(False, description="Include soft-deleted accounts"),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
) -> list[AdminUserResponse]:
    return [_to_admin_user(o) for o in use_case.execute(show_disabled=show_disabled)]


@router.get(
    "/users/{user_id}",
    response_model=AdminUserResponse,
    responses={404: {"model": ErrorResponse}},
    summary="One user with holdings",
)
def get_user(
    user_id: str,
    use_case: GetUserDetailUseCase = Depends(get_user_detail_use_case),
) -> AdminUserResponse:
    return _to_admin_user(use_case.execute(user_id))


@router.put(
    "/users/{user_id}",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Update account flags and profile",
)
def update_user(
    user_id: str,
    body: AdminUserUpdateRequest,
    use_case: UpdateUserUseCase = Depends(get_update_user_use_case),
) -> UserResponse:
    user = use_case.execute(
        UpdateUserCommand(
            user_id=user_id,
            name=body.name,
            phone=body.phone,
            is_admin=body.is_admin,
            is_active=body.is_active,
        )
    )
    return UserResponse.from_entity(user)


@router.delete(
    "/users/{user_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Disable (soft-delete) an account",
)
def disable_user(
    user_id: str,
    use_case: DisableUserUseCase = Depends(get_disable_user_use_case),
) -> MessageResponse:
    use_case.execute(user_id)
    return MessageResponse(message="User disabled successfully")


@router.delete(
    "/users/{user_id}/portfolios/{holding_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete one holding of a user",
)
def delete_user_holding(
    user_id: str,
    holding_id: str,
    use_case: DeleteUserHoldingUseCase = Depends(get_delete_user_holding_use_case),
) -> MessageResponse:
    use_case.execute(user_id, holding_id)
    return MessageResponse(message="Portfolio item deleted successfully")
