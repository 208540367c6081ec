import uuid
from sqlalchemy import Column, Date, Boolean, DateTime, Integer, Enum, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.sql import func
import enum

from carestaff.core.database import Base
from carestaff.models.lifecycle import LifecycleMixin

class AvailabilityPeriod(str, enum.Enum):
    day = "day"
    night = "night"
    both = "both"

class EmployeeAvailability(LifecycleMixin, Base):
    __tablename__ = "employee_availability"

    availability_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    organization_id = Column(
        UUID(as_uuid=True),
        ForeignKey("organizations.organization_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)
    is_recurring = Column(Boolean, nullable=False, default=False)

    created_by = Column(UUID(as_uuid=True), nullable=True)
    updated_by = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    entries = relationship(
        "AvailabilityEntry",
        order_by="AvailabilityEntry.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    user = relationship("User")


class AvailabilityEntry(Base):
    __tablename__ = "availability_entries"

    entry_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    availability_id = Column(
        UUID(as_uuid=True),
        ForeignKey("employee_availability.availability_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    position = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    period = Column(Enum(AvailabilityPeriod, name="availability_period"), nullable=False)
