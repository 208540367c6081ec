import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from carestaff.core.database import Base
from carestaff.models.lifecycle import LifecycleMixin

class DeviceToken(LifecycleMixin, Base):
    __tablename__ = "device_tokens"

    device_token_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    token = Column(String, nullable=False, unique=True)
    platform = Column(String, nullable=True)  # ios | android | web
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
