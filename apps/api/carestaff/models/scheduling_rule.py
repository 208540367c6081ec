import enum
import uuid
from sqlalchemy import Column, String, Text, Boolean, Date, DateTime, ForeignKey, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from carestaff.core.database import Base, JSONType
from carestaff.models.lifecycle import LifecycleMixin
from carestaff.models.organization import OrganizationCategory


class RuleType(str, enum.Enum):
    rest_period = "rest_period"
    max_consecutive_shifts = "max_consecutive_shifts"
    max_hours_period = "max_hours_period"
    min_hours_period = "min_hours_period"
    qualification_requirement = "qualification_requirement"
    staffing_level = "staffing_level"
    time_between_shifts = "time_between_shifts"
    overtime_threshold = "overtime_threshold"
    custom = "custom"


class RuleSeverity(str, enum.Enum):
    warning = "warning"
    error = "error"
    info = "info"


class RuleScope(str, enum.Enum):
    organization = "organization"
    department = "department"
    role = "role"
    staff = "staff"
    shift_type = "shift_type"


class SchedulingRule(LifecycleMixin, Base):
    __tablename__ = "scheduling_rules"

    rule_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # NULL for system rule templates
    organization_id = Column(
        UUID(as_uuid=True),
        ForeignKey("organizations.organization_id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    rule_type = Column(Enum(RuleType, name="rule_type"), nullable=False)
    severity = Column(Enum(RuleSeverity, name="rule_severity"), nullable=False, default=RuleSeverity.warning)
    scope = Column(Enum(RuleScope, name="rule_scope"), nullable=False, default=RuleScope.organization)
    scope_entity_id = Column(UUID(as_uuid=True), nullable=True)
    category = Column(Enum(OrganizationCategory, name="organization_category"), nullable=True)

    parameters = Column(JSONType, nullable=False, default=dict)
    # ordered [{"field", "operator", "value", "logical_operator"}]
    conditions = Column(JSONType, nullable=False, default=list)
    error_message = Column(Text, nullable=True)

    is_system = Column(Boolean, nullable=False, default=False)
    effective_from = Column(Date, nullable=True)
    effective_to = Column(Date, nullable=True)
    meta = Column("metadata", JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
