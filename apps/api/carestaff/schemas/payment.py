from datetime import date, datetime
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from carestaff.models.lifecycle import RecordStatus
from carestaff.services.validators import validate_date_range

PaymentMethod = Literal["hourly", "per_shift", "daily", "weekly", "monthly", "performance", "commission", "custom"]


class _Variant(BaseModel):
    # a parameter from another variant is a mismatch, not something to ignore
    model_config = ConfigDict(extra="forbid")


class HourlyPayment(_Variant):
    payment_method: Literal["hourly"]
    base_rate: float = Field(ge=0)
    overtime_multiplier: float | None = Field(default=None, ge=0)
    weekend_rate: float | None = Field(default=None, ge=0)
    holiday_rate: float | None = Field(default=None, ge=0)
    night_differential: float | None = Field(default=None, ge=0)


class PerShiftPayment(_Variant):
    payment_method: Literal["per_shift"]
    base_amount: float = Field(ge=0)
    weekend_bonus: float | None = Field(default=None, ge=0)
    holiday_bonus: float | None = Field(default=None, ge=0)


class RecurringPayment(_Variant):
    payment_method: Literal["daily", "weekly", "monthly"]
    base_amount: float = Field(ge=0)
    working_days_per_period: int | None = Field(default=None, ge=1)
    working_hours_per_period: float | None = Field(default=None, gt=0)


class PerformancePayment(_Variant):
    payment_method: Literal["performance"]
    base_amount: float = Field(default=0, ge=0)
    metric: str | None = None
    bonus_rate: float | None = Field(default=None, ge=0)


class CommissionPayment(_Variant):
    payment_method: Literal["commission"]
    base_amount: float = Field(default=0, ge=0)
    commission_rate: float = Field(ge=0)
    commission_type: Literal["percentage", "fixed", "tiered"] = "percentage"


class CustomPayment(_Variant):
    payment_method: Literal["custom"]
    formula: str | None = None
    parameters: dict = Field(default_factory=dict)


PaymentMethodConfig = Annotated[
    Union[HourlyPayment, PerShiftPayment, RecurringPayment, PerformancePayment, CommissionPayment, CustomPayment],
    Field(discriminator="payment_method"),
]

payment_method_config = TypeAdapter(PaymentMethodConfig)


def primary_amount(config) -> float | None:
    """The headline figure of a variant: hourly rate or base amount."""
    if isinstance(config, HourlyPayment):
        return config.base_rate
    return getattr(config, "base_amount", None)


def split_config(config) -> tuple[str, dict]:
    """(payment_method, parameters without the tag) for storage."""
    data = config.model_dump(mode="json")
    return data.pop("payment_method"), data


class PaymentConfigCreate(BaseModel):
    shift_type_id: UUID
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None
    config: PaymentMethodConfig
    currency: str | None = Field(default=None, min_length=1, max_length=8)
    effective_from: date = Field(default_factory=date.today)
    effective_to: date | None = None

    @model_validator(mode="after")
    def _check_dates(self):
        validate_date_range(self.effective_from, self.effective_to)
        return self


class PaymentConfigUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = None
    config: PaymentMethodConfig | None = None
    currency: str | None = Field(default=None, min_length=1, max_length=8)
    effective_from: date | None = None
    effective_to: date | None = None


class PaymentConfigOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_config_id: UUID
    organization_id: UUID
    shift_type_id: UUID
    name: str
    description: str | None = None
    payment_method: PaymentMethod
    config: PaymentMethodConfig
    currency: str
    effective_from: date
    effective_to: date | None = None
    status: RecordStatus
    is_active: bool
    created_at: datetime | None = None


class StaffRateCreate(BaseModel):
    user_id: UUID
    shift_type_id: UUID | None = None
    payment_config_id: UUID | None = None
    payment_method: PaymentMethod | None = None
    override_rate: float | None = Field(default=None, ge=0)
    bonus_rate: float | None = Field(default=None, ge=0)
    custom_rate_params: dict | None = None
    effective_from: date = Field(default_factory=date.today)
    effective_to: date | None = None

    @model_validator(mode="after")
    def _check_dates(self):
        validate_date_range(self.effective_from, self.effective_to)
        return self


class StaffRateUpdate(BaseModel):
    payment_config_id: UUID | None = None
    payment_method: PaymentMethod | None = None
    override_rate: float | None = Field(default=None, ge=0)
    bonus_rate: float | None = Field(default=None, ge=0)
    custom_rate_params: dict | None = None
    effective_from: date | None = None
    effective_to: date | None = None


class StaffRateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    staff_rate_id: UUID
    organization_id: UUID
    user_id: UUID
    shift_type_id: UUID | None = None
    payment_config_id: UUID | None = None
    payment_method: PaymentMethod | None = None
    override_rate: float | None = None
    bonus_rate: float | None = None
    custom_rate_params: dict | None = None
    effective_from: date
    effective_to: date | None = None
    status: RecordStatus
    is_active: bool


class EffectiveRateOut(BaseModel):
    user_id: UUID
    shift_type_id: UUID
    source: Literal["staff_rate", "payment_config"]
    payment_method: PaymentMethod | None = None
    rate: float | None = None
    bonus_rate: float | None = None
    currency: str | None = None
    staff_rate_id: UUID | None = None
    payment_config_id: UUID | None = None
