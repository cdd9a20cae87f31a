"""Lifecycle status API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from app.core.enums import EntityKindEnum
from app.modules.identity.service import get_current_user
from app.modules.lifecycle.schemas import CurrentStatusRead
from app.modules.lifecycle.service import LifecycleService, get_lifecycle_service

router = APIRouter(prefix="/status", tags=["lifecycle"])


@router.get("/{entity_kind}/{entity_id}", response_model=CurrentStatusRead)
async def get_current_status(
    entity_kind: EntityKindEnum,
    entity_id: UUID,
    service: LifecycleService = Depends(get_lifecycle_service),
    current_user=Depends(get_current_user),
) -> CurrentStatusRead:
    """Current status of a lesson, lesson quote or goal."""
    return await service.get_current_status(entity_id, entity_kind, current_user)
