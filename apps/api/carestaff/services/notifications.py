"""
Outbound notifications.

Email goes out over SMTP and raises EmailDeliveryError on failure; callers
that treat email as best-effort catch it. Push delivery is best-effort by
contract: failures are logged and never reach the caller. Push needs a
transport (e.g. an FCM client) registered with configure_push_transport().
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Iterable, Optional, Protocol, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from carestaff.access.catalog import SystemRole
from carestaff.core.config import settings
from carestaff.models.device_token import DeviceToken
from carestaff.models.lifecycle import RecordStatus
from carestaff.models.role import Role
from carestaff.models.user import User
from carestaff.models.user_role import UserRole

logger = logging.getLogger(__name__)

PUSH_BATCH_SIZE = 500
TOPIC_BATCH_SIZE = 1000

ADMIN_ROLE_KEYS = (SystemRole.owner.value, SystemRole.admin.value, SystemRole.organization_admin.value)


class EmailDeliveryError(Exception):
    pass


class EmailService:
    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_tls = use_tls

    @classmethod
    def from_settings(cls, s=settings) -> "EmailService":
        return cls(s.smtp_host, s.smtp_port, s.smtp_username, s.smtp_password, s.smtp_from, s.smtp_use_tls)

    @property
    def enabled(self) -> bool:
        return bool(self.host and self.sender)

    def send(self, to: str, subject: str, body: str) -> None:
        if not self.enabled:
            raise EmailDeliveryError("Email delivery is not configured")

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(f"Failed to send email to {to}: {exc}") from exc


class PushTransport(Protocol):
    def send_multicast(self, tokens: Sequence[str], title: str, body: str, data: dict) -> Sequence[bool]:
        ...

    def subscribe_to_topic(self, tokens: Sequence[str], topic: str) -> None:
        ...


def _chunks(items: Sequence[str], size: int) -> Iterable[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class PushService:
    def __init__(self, transport: Optional[PushTransport] = None):
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return self.transport is not None

    def send(self, tokens: Sequence[str], title: str, body: str, data: Optional[dict] = None) -> int:
        """Send in batches of PUSH_BATCH_SIZE; returns how many recipients accepted the message."""
        tokens = list(tokens)
        if not self.enabled or not tokens:
            return 0

        delivered = 0
        for batch in _chunks(tokens, PUSH_BATCH_SIZE):
            try:
                results = self.transport.send_multicast(batch, title, body, data or {})
            except Exception:
                logger.exception("Push batch of %d recipients failed", len(batch))
                continue
            failed = [token for token, ok in zip(batch, results) if not ok]
            delivered += len(batch) - len(failed)
            if failed:
                logger.warning("Push delivery failed for %d of %d recipients", len(failed), len(batch))
        return delivered

    def subscribe_to_topic(self, tokens: Sequence[str], topic: str) -> None:
        tokens = list(tokens)
        if not self.enabled or not tokens:
            return
        for batch in _chunks(tokens, TOPIC_BATCH_SIZE):
            try:
                self.transport.subscribe_to_topic(batch, topic)
            except Exception:
                logger.exception("Topic subscription to %s failed for %d tokens", topic, len(batch))


email_service = EmailService.from_settings()
push_service = PushService()


def configure_push_transport(transport: Optional[PushTransport]) -> None:
    push_service.transport = transport


def check_notification_configuration() -> None:
    """Warn at startup about disabled channels instead of failing."""
    if not email_service.enabled:
        logger.warning("SMTP is not configured; email notifications are disabled")
    if settings.push_enabled and not push_service.enabled:
        logger.warning("Push is enabled but no push transport is registered; push notifications are disabled")


def organization_admin_emails(db: Session, organization_id: UUID) -> list[str]:
    stmt = (
        select(User.email)
        .join(UserRole, UserRole.user_id == User.user_id)
        .join(Role, Role.role_id == UserRole.role_id)
        .where(
            User.organization_id == organization_id,
            User.is_active.is_(True),
            Role.key.in_(ADMIN_ROLE_KEYS),
        )
        .distinct()
        .order_by(User.email)
    )
    return list(db.execute(stmt).scalars().all())


def organization_device_tokens(db: Session, organization_id: UUID) -> list[str]:
    stmt = (
        select(DeviceToken.token)
        .join(User, User.user_id == DeviceToken.user_id)
        .where(User.organization_id == organization_id, DeviceToken.status == RecordStatus.active)
        .order_by(DeviceToken.created_at)
    )
    return list(db.execute(stmt).scalars().all())


def notify_shift_type_updated(db: Session, shift_type) -> None:
    """Tell admins (email) and staff (push). Never raises."""
    subject = f"Shift type updated: {shift_type.name}"
    body = f"The shift type '{shift_type.name}' was updated. Review upcoming rotas that use it."

    try:
        if email_service.enabled:
            for address in organization_admin_emails(db, shift_type.organization_id):
                try:
                    email_service.send(address, subject, body)
                except EmailDeliveryError:
                    logger.warning("Could not email %s about shift type %s", address, shift_type.shift_type_id, exc_info=True)

        if push_service.enabled:
            tokens = organization_device_tokens(db, shift_type.organization_id)
            push_service.send(tokens, subject, body, {"shift_type_id": str(shift_type.shift_type_id)})
    except Exception:
        # the shift type change is already committed
        logger.exception("Notifying about shift type %s failed", shift_type.shift_type_id)


def register_device_token(db: Session, user_id: UUID, token: str, platform: Optional[str]) -> DeviceToken:
    device = db.execute(select(DeviceToken).where(DeviceToken.token == token)).scalar_one_or_none()
    if device is None:
        device = DeviceToken(user_id=user_id, token=token, platform=platform)
        db.add(device)
    else:
        # token moved to another account or came back after logout
        device.user_id = user_id
        device.platform = platform or device.platform
        if device.status != RecordStatus.active:
            device.transition(RecordStatus.active, user_id)
    db.commit()
    db.refresh(device)
    return device


def unregister_device_token(db: Session, user_id: UUID, token: str) -> None:
    device = db.execute(
        select(DeviceToken).where(DeviceToken.token == token, DeviceToken.user_id == user_id)
    ).scalar_one_or_none()
    if device and device.status == RecordStatus.active:
        device.transition(RecordStatus.deleted, user_id)
        db.commit()
