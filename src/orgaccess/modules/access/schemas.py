"""Pydantic schemas for the permission catalog."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from orgaccess.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_PERMISSION_ACTION_LENGTH,
    MAX_PERMISSION_MODULE_LENGTH,
)


class PermissionCreate(BaseModel):
    """Schema for defining a new permission."""

    module: str = Field(..., min_length=1, max_length=MAX_PERMISSION_MODULE_LENGTH)
    action: str = Field(..., min_length=1, max_length=MAX_PERMISSION_ACTION_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


class PermissionResponse(BaseModel):
    """A permission definition."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    module: str
    action: str
    description: str | None
    name: str


class RoleResponse(BaseModel):
    """A role definition."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    is_system_role: bool


class RolePermissionResponse(BaseModel):
    """A permission granted to a role."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    role_id: UUID
    permission_id: UUID
