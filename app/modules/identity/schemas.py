"""Identity schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr

from app.core.enums import RoleEnum


class RoleRead(BaseModel):
    """Role response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: RoleEnum


class UserRead(BaseModel):
    """User output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: EmailStr
    first_name: str
    last_name: str
    timezone: str
    is_active: bool
    role: RoleRead
    created_at: datetime
    updated_at: datetime
