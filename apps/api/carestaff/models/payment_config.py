import uuid
from sqlalchemy import Column, String, Text, Date, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func, text

from carestaff.core.database import Base, JSONType
from carestaff.models.lifecycle import LifecycleMixin


class ShiftPaymentConfig(LifecycleMixin, Base):
    __tablename__ = "shift_payment_configs"

    payment_config_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    organization_id = Column(
        UUID(as_uuid=True),
        ForeignKey("organizations.organization_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    shift_type_id = Column(
        UUID(as_uuid=True),
        ForeignKey("shift_types.shift_type_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    # hourly | per_shift | daily | weekly | monthly | performance | commission | custom
    payment_method = Column(String, nullable=False)
    # parameters of the variant named by payment_method, without the tag
    parameters = Column(JSONType, nullable=False, default=dict)

    currency = Column(String, nullable=False)
    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        # one active config per shift type
        Index(
            "uq_shift_payment_configs_active",
            "organization_id",
            "shift_type_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    @property
    def config(self) -> dict:
        return {"payment_method": self.payment_method, **(self.parameters or {})}
