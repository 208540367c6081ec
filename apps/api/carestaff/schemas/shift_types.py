from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from carestaff.models.lifecycle import RecordStatus
from carestaff.models.organization import OrganizationCategory
from carestaff.schemas.common import HEX_COLOR_PATTERN, HHMM_PATTERN

WeekDay = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class ShiftTiming(BaseModel):
    start_time: str = Field(pattern=HHMM_PATTERN)
    end_time: str = Field(pattern=HHMM_PATTERN)
    duration_minutes: int | None = None
    is_overnight: bool = False
    original_timezone: str | None = None


class ShiftTypeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None
    category: OrganizationCategory | None = None
    default_timing: ShiftTiming | None = None
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)
    icon: str | None = None
    applicable_days: list[WeekDay] = Field(default_factory=list)
    metadata: dict | None = None


class ShiftTypeUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = None
    category: OrganizationCategory | None = None
    default_timing: ShiftTiming | None = None
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)
    icon: str | None = None
    applicable_days: list[WeekDay] | None = None
    metadata: dict | None = None
    is_active: bool | None = None


class ApplyTemplateRequest(BaseModel):
    template_id: UUID
    customizations: ShiftTypeUpdate | None = None


class ShiftTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    shift_type_id: UUID
    organization_id: UUID
    name: str
    description: str | None = None
    category: OrganizationCategory
    default_timing: ShiftTiming | None = None
    color: str | None = None
    icon: str | None = None
    applicable_days: list[str] = Field(default_factory=list)
    metadata: dict | None = Field(default=None, validation_alias="meta")
    status: RecordStatus
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ShiftTemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    shift_template_id: UUID
    name: str
    description: str | None = None
    category: OrganizationCategory
    sub_category: str | None = None
    default_timing: ShiftTiming
    applicable_days: list[str] = Field(default_factory=list)
    color: str
    icon: str
    qualification_requirements: list[dict] | None = None
    default_payment_method: str
    default_payment_config: dict | None = None
    metadata: dict | None = Field(default=None, validation_alias="meta")
