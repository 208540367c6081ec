import uuid
from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from carestaff.core.database import Base, JSONType
from carestaff.models.lifecycle import LifecycleMixin


class StaffRate(LifecycleMixin, Base):
    __tablename__ = "staff_rates"

    staff_rate_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    organization_id = Column(
        UUID(as_uuid=True),
        ForeignKey("organizations.organization_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    shift_type_id = Column(
        UUID(as_uuid=True),
        ForeignKey("shift_types.shift_type_id", ondelete="SET NULL"),
        nullable=True,
    )
    payment_config_id = Column(
        UUID(as_uuid=True),
        ForeignKey("shift_payment_configs.payment_config_id", ondelete="SET NULL"),
        nullable=True,
    )

    payment_method = Column(String, nullable=True)
    override_rate = Column(Numeric(12, 2), nullable=True)
    bonus_rate = Column(Numeric(12, 2), nullable=True)
    custom_rate_params = Column(JSONType, nullable=True)

    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
