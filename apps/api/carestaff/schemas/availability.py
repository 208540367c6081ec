from datetime import date
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from carestaff.models.availability import AvailabilityPeriod as StoredPeriod
from carestaff.models.lifecycle import RecordStatus
from carestaff.schemas.common import CalendarDate
from carestaff.services.validators import validate_date_range

AvailabilityPeriod = Literal["day", "night", "both"]


class AvailabilityEntryIn(BaseModel):
    date: CalendarDate
    period: AvailabilityPeriod


class AvailabilityCreate(BaseModel):
    # defaults to the caller
    user_id: UUID | None = None
    entries: list[AvailabilityEntryIn] = Field(default_factory=list)
    effective_from: CalendarDate
    effective_to: CalendarDate | None = None
    is_recurring: bool = False

    @model_validator(mode="after")
    def _check_dates(self):
        validate_date_range(self.effective_from, self.effective_to)
        return self


class AvailabilityUpdate(BaseModel):
    user_id: UUID | None = None
    entries: list[AvailabilityEntryIn] = Field(default_factory=list)
    effective_from: CalendarDate | None = None
    effective_to: CalendarDate | None = None
    is_recurring: bool | None = None


class SingleDateAvailability(BaseModel):
    user_id: UUID | None = None
    date: CalendarDate
    # null clears the date
    period: AvailabilityPeriod | None = None


class AvailabilityEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    period: StoredPeriod


class AvailabilityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    availability_id: UUID | None = None
    user_id: UUID
    organization_id: UUID
    entries: list[AvailabilityEntryOut] = Field(default_factory=list)
    effective_from: date
    effective_to: date | None = None
    is_recurring: bool
    status: RecordStatus | None = None
    is_active: bool
    created_by: UUID | None = None
    updated_by: UUID | None = None


class AvailableEmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
