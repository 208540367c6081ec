import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from carestaff.core.database import Base, JSONType
from carestaff.models.lifecycle import LifecycleMixin
from carestaff.models.organization import OrganizationCategory


class ShiftType(LifecycleMixin, Base):
    __tablename__ = "shift_types"

    shift_type_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    organization_id = Column(
        UUID(as_uuid=True),
        ForeignKey("organizations.organization_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(Enum(OrganizationCategory, name="organization_category"), nullable=False)

    # {"start_time": "07:00", "end_time": "19:00", "duration_minutes": 720,
    #  "is_overnight": false, "original_timezone": "Europe/London"}
    # Times are stored in the server timezone.
    default_timing = Column(JSONType, nullable=True)

    color = Column(String, nullable=True)
    icon = Column(String, nullable=True)
    applicable_days = Column(JSONType, nullable=False, default=list)
    meta = Column("metadata", JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_shift_types_organization_name"),
    )
