import re
import uuid
from sqlalchemy import Column, String, DateTime, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from carestaff.core.database import Base

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def permission_key(action: str, subject: str) -> str:
    """(invite, Staff) -> "invite_staff", (view, LeaveRequests) -> "view_leave_requests"."""
    return f"{action}_{_CAMEL_BOUNDARY.sub('_', subject).lower()}"


class Permission(Base):
    __tablename__ = "permissions"

    permission_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    action = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("action", "subject", name="uq_permissions_action_subject"),
    )

    @property
    def key(self) -> str:
        return permission_key(self.action, self.subject)
