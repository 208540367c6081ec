from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from carestaff.models.organization import LegacyOrganizationType, OrganizationCategory


class OrganizationCreate(BaseModel):
    name: str = Field(min_length=1)
    # derived from legacy_type when omitted
    category: OrganizationCategory | None = None
    legacy_type: LegacyOrganizationType | None = None
    timezone: str = "Europe/London"
    settings: dict = Field(default_factory=dict)


class OrganizationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    category: OrganizationCategory | None = None
    timezone: str | None = None
    settings: dict | None = None


class OrganizationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    organization_id: UUID
    name: str
    category: OrganizationCategory
    legacy_type: LegacyOrganizationType | None = None
    timezone: str
    settings: dict
    is_active: bool
    created_at: datetime | None = None


class UserCreate(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = ""
    email: EmailStr
    phone: str | None = None
    password: str | None = Field(default=None, min_length=8)
    timezone: str | None = None
    role_ids: list[UUID] = Field(default_factory=list)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    organization_id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    timezone: str
    is_active: bool
    roles: list[str] = Field(default_factory=list)


class UserRoleAssign(BaseModel):
    role_ids: list[UUID]


class RoleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=80)
    description: str | None = None
    permissions: list[str] = Field(default_factory=list)


class RoleOut(BaseModel):
    role_id: UUID
    organization_id: UUID | None = None
    key: str
    name: str
    description: str | None = None
    is_system_role: bool
    permissions: list[str]


class PermissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    permission_id: UUID
    action: str
    subject: str
    key: str
    description: str | None = None
