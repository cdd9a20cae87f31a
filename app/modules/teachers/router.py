"""Teachers API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.modules.identity.service import get_current_user
from app.modules.teachers.schemas import (
    HourlyRateCreate,
    HourlyRateRead,
    HourlyRateTransitionRequest,
    TeacherProfileRead,
    TeacherProfileUpsert,
)
from app.modules.teachers.service import TeachersService, get_teachers_service

router = APIRouter(prefix="/teachers", tags=["teachers"])


@router.put("/profile", response_model=TeacherProfileRead)
async def upsert_profile(
    payload: TeacherProfileUpsert,
    service: TeachersService = Depends(get_teachers_service),
    current_user=Depends(get_current_user),
) -> TeacherProfileRead:
    """Create or update own teacher profile."""
    profile = await service.upsert_profile(payload, current_user)
    return TeacherProfileRead.model_validate(profile)


@router.post("/rates", response_model=HourlyRateRead, status_code=status.HTTP_201_CREATED)
async def create_rate(
    payload: HourlyRateCreate,
    service: TeachersService = Depends(get_teachers_service),
    current_user=Depends(get_current_user),
) -> HourlyRateRead:
    """Create an hourly rate for a lesson type."""
    rate = await service.create_rate(payload, current_user)
    return HourlyRateRead.model_validate(rate)


@router.get("/rates/my", response_model=list[HourlyRateRead])
async def list_my_rates(
    service: TeachersService = Depends(get_teachers_service),
    current_user=Depends(get_current_user),
) -> list[HourlyRateRead]:
    """List own hourly rates."""
    rates = await service.list_my_rates(current_user)
    return [HourlyRateRead.model_validate(rate) for rate in rates]


@router.post("/rates/{rate_id}/transitions", response_model=HourlyRateRead)
async def transition_rate(
    rate_id: UUID,
    payload: HourlyRateTransitionRequest,
    service: TeachersService = Depends(get_teachers_service),
    current_user=Depends(get_current_user),
) -> HourlyRateRead:
    """Activate or deactivate an hourly rate."""
    rate = await service.transition_rate(rate_id, payload, current_user)
    return HourlyRateRead.model_validate(rate)
