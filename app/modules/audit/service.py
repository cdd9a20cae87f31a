"""Audit business logic layer."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import RoleEnum
from app.modules.audit.models import AuditLog
from app.modules.audit.repository import AuditRepository
from app.modules.identity.models import User
from app.shared.exceptions import ForbiddenException


class AuditService:
    """Read access to the lifecycle audit trail."""

    def __init__(self, repository: AuditRepository) -> None:
        self.repository = repository

    async def list_logs(
        self,
        actor: User,
        limit: int,
        offset: int,
        entity_id: str | None = None,
    ) -> tuple[list[AuditLog], int]:
        """List audit logs (admin only)."""
        if actor.role.name != RoleEnum.ADMIN:
            raise ForbiddenException("Only admin can view audit logs")
        return await self.repository.list_audit_logs(limit=limit, offset=offset, entity_id=entity_id)


async def get_audit_service(session: AsyncSession = Depends(get_db_session)) -> AuditService:
    """Dependency provider for audit service."""
    return AuditService(AuditRepository(session))
