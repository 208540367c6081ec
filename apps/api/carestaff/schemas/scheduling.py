from datetime import date, datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from carestaff.models.lifecycle import RecordStatus
from carestaff.models.organization import OrganizationCategory
from carestaff.models.scheduling_rule import RuleScope, RuleSeverity, RuleType
from carestaff.services.validators import validate_date_range


class RuleCondition(BaseModel):
    field: str = Field(min_length=1)
    operator: Literal["eq", "ne", "gt", "gte", "lt", "lte", "in", "contains"]
    value: Any = None
    logical_operator: Literal["AND", "OR"] = "AND"


class SchedulingRuleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None
    rule_type: RuleType
    severity: RuleSeverity = RuleSeverity.warning
    scope: RuleScope = RuleScope.organization
    scope_entity_id: UUID | None = None
    category: OrganizationCategory | None = None
    parameters: dict = Field(default_factory=dict)
    conditions: list[RuleCondition] = Field(default_factory=list)
    error_message: str | None = None
    effective_from: date | None = None
    effective_to: date | None = None
    metadata: dict | None = None

    @model_validator(mode="after")
    def _check(self):
        validate_date_range(self.effective_from, self.effective_to)
        if self.scope != RuleScope.organization and self.scope_entity_id is None:
            raise ValueError(f"scope_entity_id is required for {self.scope.value} scope")
        return self


class SchedulingRuleUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = None
    rule_type: RuleType | None = None
    severity: RuleSeverity | None = None
    scope: RuleScope | None = None
    scope_entity_id: UUID | None = None
    category: OrganizationCategory | None = None
    parameters: dict | None = None
    conditions: list[RuleCondition] | None = None
    error_message: str | None = None
    effective_from: date | None = None
    effective_to: date | None = None
    metadata: dict | None = None
    is_active: bool | None = None


class SchedulingRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rule_id: UUID
    organization_id: UUID | None = None
    name: str
    description: str | None = None
    rule_type: RuleType
    severity: RuleSeverity
    scope: RuleScope
    scope_entity_id: UUID | None = None
    category: OrganizationCategory | None = None
    parameters: dict
    conditions: list[RuleCondition]
    error_message: str | None = None
    is_system: bool
    effective_from: date | None = None
    effective_to: date | None = None
    metadata: dict | None = Field(default=None, validation_alias="meta")
    status: RecordStatus
    is_active: bool
    created_at: datetime | None = None


class ApplySystemRulesRequest(BaseModel):
    category: OrganizationCategory | None = None


class RotationStep(BaseModel):
    shift_type_id: UUID
    consecutive_days: int = Field(ge=1)
    is_flexible: bool = False
    metadata: dict | None = None


class RotationBreak(BaseModel):
    duration_days: int = Field(ge=1)
    description: str | None = None
    is_paid: bool = False


class RotationPatternCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None
    category: OrganizationCategory | None = None
    department_id: UUID | None = None
    sequence: list[RotationStep] = Field(min_length=1)
    breaks: list[RotationBreak] = Field(default_factory=list)
    cycle_length: int = Field(ge=1)
    repeat_indefinitely: bool = True
    max_repetitions: int | None = Field(default=None, ge=1)
    applicable_staff: list[UUID] = Field(default_factory=list)
    applicable_roles: list[str] = Field(default_factory=list)
    effective_from: date | None = None
    effective_to: date | None = None

    @model_validator(mode="after")
    def _check(self):
        validate_date_range(self.effective_from, self.effective_to)
        if not self.repeat_indefinitely and self.max_repetitions is None:
            raise ValueError("max_repetitions is required when repeat_indefinitely is false")
        return self


class RotationPatternUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = None
    category: OrganizationCategory | None = None
    department_id: UUID | None = None
    sequence: list[RotationStep] | None = Field(default=None, min_length=1)
    breaks: list[RotationBreak] | None = None
    cycle_length: int | None = Field(default=None, ge=1)
    repeat_indefinitely: bool | None = None
    max_repetitions: int | None = Field(default=None, ge=1)
    applicable_staff: list[UUID] | None = None
    applicable_roles: list[str] | None = None
    effective_from: date | None = None
    effective_to: date | None = None
    is_active: bool | None = None


class RotationPatternOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pattern_id: UUID
    organization_id: UUID
    name: str
    description: str | None = None
    category: OrganizationCategory
    department_id: UUID | None = None
    sequence: list[RotationStep]
    breaks: list[RotationBreak]
    cycle_length: int
    computed_cycle_length: int
    cycle_length_consistent: bool
    repeat_indefinitely: bool
    max_repetitions: int | None = None
    applicable_staff: list[UUID]
    applicable_roles: list[str]
    effective_from: date | None = None
    effective_to: date | None = None
    status: RecordStatus
    is_active: bool


class RotationTemplateOut(BaseModel):
    name: str
    description: str
    category: OrganizationCategory
    cycle_length: int
    sequence: list[dict]
    breaks: list[RotationBreak]
