"""Identity business logic layer.

Credentials are issued elsewhere; this module only resolves the acting principal.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import RoleEnum
from app.core.security import bearer_scheme, decode_token
from app.modules.identity.models import User
from app.modules.identity.repository import IdentityRepository
from app.shared.exceptions import ForbiddenException


class IdentityService:
    """Identity domain service."""

    def __init__(self, repository: IdentityRepository) -> None:
        self.repository = repository

    async def ensure_default_roles(self) -> None:
        """Ensure all default roles exist."""
        for role_name in (RoleEnum.STUDENT, RoleEnum.TEACHER, RoleEnum.ADMIN):
            role = await self.repository.get_role_by_name(role_name)
            if role is None:
                await self.repository.create_role(role_name)

    async def get_user_from_access_token(self, token: str) -> User:
        """Resolve user from access token."""
        payload = decode_token(token)
        if payload.get("type") != "access":
            raise ForbiddenException("Invalid access token")

        subject = payload.get("sub")
        if not subject:
            raise ForbiddenException("Token subject is missing")

        try:
            user_id = UUID(subject)
        except ValueError as exc:
            raise ForbiddenException("Token subject is malformed") from exc

        user = await self.repository.get_user_by_id(user_id)
        if user is None:
            raise ForbiddenException("User not found")
        if not user.is_active:
            raise ForbiddenException("User is inactive")

        return user


async def get_identity_service(session: AsyncSession = Depends(get_db_session)) -> IdentityService:
    """Dependency to provide identity service."""
    return IdentityService(IdentityRepository(session))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    service: IdentityService = Depends(get_identity_service),
) -> User:
    """Resolve currently authenticated user from bearer token."""
    return await service.get_user_from_access_token(credentials.credentials)
