"""
FastAPI router for the access gateway and the account ledger.

All routes delegate to use cases. No business logic here.
Credential endpoints are rate limited per client address.
"""

from fastapi import APIRouter, Depends, Request, status

from trakvest.application.portfolio.dtos import (
    LoginCommand,
    RegisterCommand,
    UpdateProfileCommand,
)
from trakvest.application.portfolio.login_user import LoginUserUseCase
from trakvest.application.portfolio.register_user import RegisterUserUseCase
from trakvest.application.portfolio.top_up_balance import TopUpBalanceUseCase
from trakvest.application.portfolio.update_profile import UpdateProfileUseCase
from trakvest.application.portfolio.withdraw_balance import WithdrawBalanceUseCase
from trakvest.domain.portfolio.entities import User
from trakvest.interfaces.portfolio.dependencies import (
    get_current_user,
    get_login_user_use_case,
    get_register_user_use_case,
    get_top_up_use_case,
    get_update_profile_use_case,
    get_withdraw_use_case,
)
from trakvest.interfaces.portfolio.schemas import (
    AmountRequest,
    AuthResponse,
    BalanceResponse,
    ErrorResponse,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserResponse,
)
from trakvest.shared.security.rate_limiting import AUTH_RATE_LIMIT, limiter

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Register a new account",
)
@limiter.limit(AUTH_RATE_LIMIT)
def register(
    request: Request,
    body: RegisterRequest,
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
) -> AuthResponse:
    result = use_case.execute(
        RegisterCommand(email=body.email, password=body.password, name=body.name)
    )
    return AuthResponse(token=result.token, user=UserResponse.from_entity(result.user))


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Sign in with email and password",
)
@limiter.limit(AUTH_RATE_LIMIT)
def login(
    request: Request,
    body: LoginRequest,
    use_case: LoginUserUseCase = Depends(get_login_user_use_case),
) -> AuthResponse:
    result = use_case.execute(LoginCommand(email=body.email, password=body.password))
    return AuthResponse(token=result.token, user=UserResponse.from_entity(result.user))


@router.get("/profile", response_model=UserResponse, summary="Current account")
def get_profile(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.from_entity(user)


@router.patch(
    "/profile",
    response_model=UserResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Edit name, phone or profile image",
)
def update_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case),
) -> UserResponse:
    updated = use_case.execute(
        user.id,
        UpdateProfileCommand(
            name=body.name, phone=body.phone, profile_image=body.profile_image
        ),
    )
    return UserResponse.from_entity(updated)


@router.post(
    "/topup",
    response_model=BalanceResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Add funds to the cash balance",
)
def top_up(
    body: AmountRequest,
    user: User = Depends(get_current_user),
    use_case: TopUpBalanceUseCase = Depends(get_top_up_use_case),
) -> BalanceResponse:
    balance = use_case.execute(user.id, body.amount)
    return BalanceResponse(message="Balance updated successfully", balance=balance)


@router.post(
    "/withdraw",
    response_model=BalanceResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Withdraw funds from the cash balance",
)
def withdraw(
    body: AmountRequest,
    user: User = Depends(get_current_user),
    use_case: WithdrawBalanceUseCase = Depends(get_withdraw_use_case),
) -> BalanceResponse:
    balance = use_case.execute(user.id, body.amount)
    return BalanceResponse(message="Withdrawal successful", balance=balance)
