import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.ext.hybrid import hybrid_property


class RecordStatus(str, enum.Enum):
    active = "active"
    superseded = "superseded"
    deleted = "deleted"


class LifecycleMixin:
    """Explicit lifecycle state shared by every soft-deletable record.

    Rows are never hard-deleted: a delete moves them to ``deleted`` and a
    newer row taking their place moves them to ``superseded``.
    """

    status = Column(
        Enum(RecordStatus, name="record_status"),
        nullable=False,
        default=RecordStatus.active,
        index=True,
    )
    status_changed_at = Column(DateTime(timezone=True), nullable=True)
    status_changed_by = Column(UUID(as_uuid=True), nullable=True)

    @hybrid_property
    def is_active(self):
        return self.status == RecordStatus.active

    def transition(self, status: RecordStatus, actor_id=None) -> None:
        self.status = status
        self.status_changed_at = datetime.now(timezone.utc)
        self.status_changed_by = actor_id
