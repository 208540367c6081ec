import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, Enum, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from carestaff.core.database import Base, JSONType
from carestaff.models.lifecycle import LifecycleMixin
from carestaff.models.organization import OrganizationCategory

class ShiftTemplate(LifecycleMixin, Base):
    __tablename__ = "shift_templates"

    shift_template_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(Enum(OrganizationCategory, name="organization_category"), nullable=False, index=True)
    sub_category = Column(String, nullable=True)

    default_timing = Column(JSONType, nullable=False)
    applicable_days = Column(JSONType, nullable=False, default=list)
    color = Column(String, nullable=False, default="#3B82F6")
    icon = Column(String, nullable=False, default="clock")

    qualification_requirements = Column(JSONType, nullable=True)
    default_payment_method = Column(String, nullable=False, default="hourly")
    default_payment_config = Column(JSONType, nullable=True)
    meta = Column("metadata", JSONType, nullable=True)

    is_system = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("name", "category", name="uq_shift_templates_name_category"),
    )
