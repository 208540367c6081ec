import uuid
from sqlalchemy import Column, String, Text, Integer, Boolean, Date, DateTime, ForeignKey, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from carestaff.core.database import Base, JSONType
from carestaff.models.lifecycle import LifecycleMixin
from carestaff.models.organization import OrganizationCategory


class ShiftRotationPattern(LifecycleMixin, Base):
    __tablename__ = "shift_rotation_patterns"

    pattern_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    organization_id = Column(
        UUID(as_uuid=True),
        ForeignKey("organizations.organization_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(Enum(OrganizationCategory, name="organization_category"), nullable=False)
    department_id = Column(UUID(as_uuid=True), nullable=True)

    # [{"shift_type_id", "consecutive_days", "is_flexible", "metadata"}]
    sequence = Column(JSONType, nullable=False, default=list)
    # [{"duration_days", "description", "is_paid"}]
    breaks = Column(JSONType, nullable=False, default=list)
    cycle_length = Column(Integer, nullable=False)

    repeat_indefinitely = Column(Boolean, nullable=False, default=True)
    max_repetitions = Column(Integer, nullable=True)
    applicable_staff = Column(JSONType, nullable=False, default=list)
    applicable_roles = Column(JSONType, nullable=False, default=list)

    effective_from = Column(Date, nullable=True)
    effective_to = Column(Date, nullable=True)
    is_system = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def computed_cycle_length(self) -> int:
        worked = sum(int(step.get("consecutive_days", 0)) for step in self.sequence or [])
        rest = sum(int(b.get("duration_days", 0)) for b in self.breaks or [])
        return worked + rest

    @property
    def cycle_length_consistent(self) -> bool:
        return self.computed_cycle_length == self.cycle_length
