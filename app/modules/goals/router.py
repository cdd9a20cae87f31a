"""Goals API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.modules.goals.schemas import GoalCreate, GoalRead, GoalStatusRead, GoalTransitionRequest
from app.modules.goals.service import GoalsService, get_goals_service
from app.modules.identity.service import get_current_user

router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
async def create_goal(
    payload: GoalCreate,
    service: GoalsService = Depends(get_goals_service),
    current_user=Depends(get_current_user),
) -> GoalRead:
    """Set a learning goal for a lesson (assigned teacher only)."""
    goal = await service.create_goal(payload, current_user)
    return GoalRead.model_validate(goal)


@router.get("", response_model=list[GoalRead])
async def list_lesson_goals(
    lesson_id: UUID,
    service: GoalsService = Depends(get_goals_service),
    current_user=Depends(get_current_user),
) -> list[GoalRead]:
    """Goals of a lesson, oldest first."""
    goals = await service.list_goals_for_lesson(lesson_id, current_user)
    return [GoalRead.model_validate(goal) for goal in goals]


@router.get("/{goal_id}", response_model=GoalRead)
async def get_goal(
    goal_id: UUID,
    service: GoalsService = Depends(get_goals_service),
    current_user=Depends(get_current_user),
) -> GoalRead:
    """Get goal by id."""
    goal = await service.get_goal(goal_id, current_user)
    return GoalRead.model_validate(goal)


@router.get("/{goal_id}/statuses", response_model=list[GoalStatusRead])
async def list_goal_statuses(
    goal_id: UUID,
    service: GoalsService = Depends(get_goals_service),
    current_user=Depends(get_current_user),
) -> list[GoalStatusRead]:
    """Goal status history."""
    records = await service.get_goal_history(goal_id, current_user)
    return [GoalStatusRead.model_validate(record) for record in records]


@router.post("/{goal_id}/transitions", response_model=GoalRead)
async def apply_goal_transition(
    goal_id: UUID,
    payload: GoalTransitionRequest,
    service: GoalsService = Depends(get_goals_service),
    current_user=Depends(get_current_user),
) -> GoalRead:
    """Start, complete or abandon a goal."""
    goal = await service.update_status(goal_id, payload.transition, payload.context, current_user)
    return GoalRead.model_validate(goal)
