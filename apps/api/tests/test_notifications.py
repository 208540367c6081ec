"""
Tests for email/push notification delivery and device token registration.
"""

import logging
import smtplib

import pytest

from carestaff.access.catalog import SystemRole
from carestaff.models.lifecycle import RecordStatus
from carestaff.services import notifications
from carestaff.services.notifications import EmailDeliveryError, EmailService, PushService


class FakeTransport:
    def __init__(self, fail_batches=(), rejected=()):
        self.batches = []
        self.topics = []
        self.fail_batches = set(fail_batches)
        self.rejected = set(rejected)

    def send_multicast(self, tokens, title, body, data):
        index = len(self.batches)
        self.batches.append(list(tokens))
        if index in self.fail_batches:
            raise ConnectionError("push backend unavailable")
        return [token not in self.rejected for token in tokens]

    def subscribe_to_topic(self, tokens, topic):
        self.topics.append((topic, len(tokens)))


class TestPushService:
    def test_batches_of_500(self):
        transport = FakeTransport()
        tokens = [f"token-{i}" for i in range(1200)]
        delivered = PushService(transport).send(tokens, "Title", "Body")
        assert [len(b) for b in transport.batches] == [500, 500, 200]
        assert delivered == 1200

    def test_failed_batch_is_logged_and_skipped(self):
        transport = FakeTransport(fail_batches={0})
        delivered = PushService(transport).send([f"t{i}" for i in range(600)], "Title", "Body")
        assert delivered == 100

    def test_rejected_tokens_not_counted(self):
        transport = FakeTransport(rejected={"t1"})
        assert PushService(transport).send(["t0", "t1", "t2"], "Title", "Body") == 2

    def test_disabled_without_transport(self):
        assert PushService().send(["t0"], "Title", "Body") == 0

    def test_topic_subscriptions_batch_by_1000(self):
        transport = FakeTransport()
        PushService(transport).subscribe_to_topic([f"t{i}" for i in range(2500)], "rota")
        assert transport.topics == [("rota", 1000), ("rota", 1000), ("rota", 500)]


class TestEmailService:
    def test_unconfigured_raises(self):
        with pytest.raises(EmailDeliveryError):
            EmailService(host=None).send("a@example.com", "Subject", "Body")

    def test_smtp_failure_becomes_delivery_error(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise smtplib.SMTPConnectError(421, "busy")

        monkeypatch.setattr(notifications.smtplib, "SMTP", refuse)
        service = EmailService(host="smtp.example.com", sender="rota@example.com")
        with pytest.raises(EmailDeliveryError):
            service.send("a@example.com", "Subject", "Body")


class TestShiftTypeNotifications:
    def test_admins_emailed_and_staff_pushed(self, db, organization, admin, make_user, monkeypatch):
        carer = make_user(organization, SystemRole.carer)
        notifications.register_device_token(db, carer.user_id, "carer-phone", "ios")

        emailed = []
        transport = FakeTransport()
        monkeypatch.setattr(notifications.email_service, "host", "smtp.example.com")
        monkeypatch.setattr(notifications.email_service, "sender", "rota@example.com")
        monkeypatch.setattr(notifications.email_service, "send", lambda to, subject, body: emailed.append(to))
        monkeypatch.setattr(notifications.push_service, "transport", transport)

        class ShiftTypeStub:
            shift_type_id = "st-1"
            organization_id = organization.organization_id
            name = "Night"

        notifications.notify_shift_type_updated(db, ShiftTypeStub())
        assert emailed == [admin.email]
        assert transport.batches == [["carer-phone"]]

    def test_push_failure_never_raises(self, db, organization, admin, monkeypatch):
        notifications.register_device_token(db, admin.user_id, "admin-phone", None)
        monkeypatch.setattr(notifications.push_service, "transport", FakeTransport(fail_batches={0}))

        class ShiftTypeStub:
            shift_type_id = "st-1"
            organization_id = organization.organization_id
            name = "Night"

        notifications.notify_shift_type_updated(db, ShiftTypeStub())

    def test_lookup_or_unexpected_send_errors_never_raise(self, db, organization, monkeypatch, caplog):
        def broken_lookup(db, organization_id):
            raise RuntimeError("database went away")

        monkeypatch.setattr(notifications.email_service, "host", "smtp.example.com")
        monkeypatch.setattr(notifications.email_service, "sender", "rota@example.com")
        monkeypatch.setattr(notifications, "organization_admin_emails", broken_lookup)

        class ShiftTypeStub:
            shift_type_id = "st-1"
            organization_id = organization.organization_id
            name = "Night"

        with caplog.at_level(logging.ERROR, logger="carestaff.services.notifications"):
            notifications.notify_shift_type_updated(db, ShiftTypeStub())
        assert "st-1" in caplog.text

    def test_update_route_succeeds_when_notification_breaks(self, client, admin_headers, monkeypatch):
        def unexpected(to, subject, body):
            raise ValueError("bad header")

        monkeypatch.setattr(notifications.email_service, "host", "smtp.example.com")
        monkeypatch.setattr(notifications.email_service, "sender", "rota@example.com")
        monkeypatch.setattr(notifications.email_service, "send", unexpected)

        created = client.post("/shift-types", json={"name": "Late"}, headers=admin_headers)
        shift_type_id = created.json()["shift_type_id"]
        response = client.patch(f"/shift-types/{shift_type_id}", json={"name": "Late Cover"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Late Cover"


class TestDeviceTokens:
    def test_register_moves_token_between_users(self, db, organization, admin, make_user):
        other = make_user(organization, SystemRole.carer)
        first = notifications.register_device_token(db, admin.user_id, "shared-tablet", "android")
        second = notifications.register_device_token(db, other.user_id, "shared-tablet", None)
        assert second.device_token_id == first.device_token_id
        assert second.user_id == other.user_id
        assert second.platform == "android"

    def test_unregister_then_register_reactivates(self, db, admin):
        notifications.register_device_token(db, admin.user_id, "phone", "ios")
        notifications.unregister_device_token(db, admin.user_id, "phone")
        assert notifications.organization_device_tokens(db, admin.organization_id) == []

        device = notifications.register_device_token(db, admin.user_id, "phone", None)
        assert device.status == RecordStatus.active
        assert notifications.organization_device_tokens(db, admin.organization_id) == ["phone"]

    def test_routes(self, client, admin_headers):
        created = client.post("/notifications/device-tokens", json={"token": "abc", "platform": "web"}, headers=admin_headers)
        assert created.status_code == 200
        assert created.json()["is_active"] is True
        assert client.delete("/notifications/device-tokens/abc", headers=admin_headers).status_code == 204
