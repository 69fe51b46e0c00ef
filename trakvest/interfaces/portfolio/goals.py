"""
FastAPI router for the goal tracker.

All routes delegate to use cases. No business logic here.
"""

from fastapi import APIRouter, Depends, status

from trakvest.application.portfolio.create_goal import CreateGoalUseCase
from trakvest.application.portfolio.delete_goal import DeleteGoalUseCase
from trakvest.application.portfolio.dtos import CreateGoalCommand, GoalResult
from trakvest.application.portfolio.list_goals import ListGoalsUseCase
from trakvest.domain.portfolio.entities import User
from trakvest.interfaces.portfolio.dependencies import (
    get_create_goal_use_case,
    get_current_user,
    get_delete_goal_use_case,
    get_list_goals_use_case,
)
from trakvest.interfaces.portfolio.schemas import (
    ErrorResponse,
    GoalCreateRequest,
    GoalResponse,
    MessageResponse,
)

router = APIRouter(prefix="/goals", tags=["goals"])


def _to_response(result: GoalResult) -> GoalResponse:
    goal = result.goal
    return GoalResponse(
        id=goal.id,
        title=goal.title,
        description=goal.description,
        target_amount=goal.target_amount,
        target_date=goal.target_date,
        type=goal.type.value,
        progress=result.progress,
        created_at=goal.created_at,
    )


@router.get("", response_model=list[GoalResponse], summary="List goals, newest first")
def list_goals(
    user: User = Depends(get_current_user),
    use_case: ListGoalsUseCase = Depends(get_list_goals_use_case),
) -> list[GoalResponse]:
    return [_to_response(r) for r in use_case.execute(user.id)]


@router.post(
    "",
    response_model=GoalResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create a goal",
)
def create_goal(
    body: GoalCreateRequest,
    user: User = Depends(get_current_user),
    use_case: CreateGoalUseCase = Depends(get_create_goal_use_case),
) -> GoalResponse:
    result = use_case.execute(
        user.id,
        CreateGoalCommand(
            title=body.title,
            target_amount=body.target_amount,
            target_date=body.target_date,
            type=body.type,
            description=body.description,
        ),
    )
    return _to_response(result)


@router.delete(
    "/{goal_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a goal",
)
def delete_goal(
    goal_id: str,
    user: User = Depends(get_current_user),
    use_case: DeleteGoalUseCase = Depends(get_delete_goal_use_case),
) -> MessageResponse:
    use_case.execute(user.id, goal_id)
    return MessageResponse(message="Goal removed")
