from __future__ import annotations

from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest
from fastapi import HTTPException

from app.core.enums import RoleEnum
from app.core.security import create_access_token, decode_token
from app.modules.identity.service import IdentityService
from app.shared.exceptions import ForbiddenException


class FakeIdentityRepository:
    def __init__(self, users: dict[UUID, SimpleNamespace] | None = None) -> None:
        self.users = users or {}
        self.roles: list[RoleEnum] = []

    async def get_user_by_id(self, user_id: UUID):
        return self.users.get(user_id)

    async def get_role_by_name(self, role_name: RoleEnum):
        return role_name if role_name in self.roles else None

    async def create_role(self, role_name: RoleEnum):
        self.roles.append(role_name)
        return role_name


def _user(is_active: bool = True) -> SimpleNamespace:
    return SimpleNamespace(id=uuid4(), is_active=is_active, role=SimpleNamespace(name=RoleEnum.STUDENT))


def test_access_token_carries_subject_and_type() -> None:
    user_id = uuid4()

    payload = decode_token(create_access_token(str(user_id)))

    assert payload["sub"] == str(user_id)
    assert payload["type"] == "access"


def test_decode_rejects_tampered_token() -> None:
    with pytest.raises(HTTPException) as exc:
        decode_token(create_access_token(str(uuid4())) + "x")
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_resolves_active_user_from_token() -> None:
    user = _user()
    service = IdentityService(FakeIdentityRepository({user.id: user}))

    resolved = await service.get_user_from_access_token(create_access_token(str(user.id)))

    assert resolved is user


@pytest.mark.asyncio
@pytest.mark.parametrize("subject", ["not-a-uuid", str(uuid4())])
async def test_rejects_malformed_or_unknown_subject(subject: str) -> None:
    service = IdentityService(FakeIdentityRepository())

    with pytest.raises(ForbiddenException):
        await service.get_user_from_access_token(create_access_token(subject))


@pytest.mark.asyncio
async def test_rejects_inactive_user() -> None:
    user = _user(is_active=False)
    service = IdentityService(FakeIdentityRepository({user.id: user}))

    with pytest.raises(ForbiddenException):
        await service.get_user_from_access_token(create_access_token(str(user.id)))


@pytest.mark.asyncio
async def test_ensure_default_roles_is_idempotent() -> None:
    repository = FakeIdentityRepository()
    service = IdentityService(repository)

    await service.ensure_default_roles()
    await service.ensure_default_roles()

    assert repository.roles == [RoleEnum.STUDENT, RoleEnum.TEACHER, RoleEnum.ADMIN]
