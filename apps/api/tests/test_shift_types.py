"""
Tests for shift types: durations, templates, CRUD and timezone handling.
"""

import uuid

import pytest
from fastapi import HTTPException

from carestaff.access.catalog import SystemRole
from carestaff.models.lifecycle import RecordStatus
from carestaff.models.shift_type import ShiftType
from carestaff.scheduling.shift_templates import SHIFT_TEMPLATES
from carestaff.schemas.shift_types import ShiftTiming, ShiftTypeCreate, ShiftTypeUpdate
from carestaff.services import notifications
from carestaff.services import shift_types as service
from carestaff.services.validators import calculate_duration_minutes


def _create(db, organization, name="Early", **kwargs):
    payload = ShiftTypeCreate(
        name=name,
        default_timing=ShiftTiming(start_time="07:00", end_time="15:00"),
        applicable_days=["monday", "tuesday"],
        **kwargs,
    )
    return service.create_shift_type(db, organization.organization_id, payload)


class TestDuration:
    def test_day_shift(self):
        assert calculate_duration_minutes("09:00", "17:00", False) == 480

    def test_overnight_shift_wraps_midnight(self):
        assert calculate_duration_minutes("22:00", "06:00", True) == 480
        assert calculate_duration_minutes("19:00", "07:00", True) == 720

    def test_inverted_range_without_overnight_is_negative(self):
        assert calculate_duration_minutes("22:00", "06:00", False) < 0

    def test_invalid_clock_time(self):
        with pytest.raises(ValueError):
            calculate_duration_minutes("25:99x", "06:00", False)

    def test_missing_duration_is_filled(self):
        timing = service.with_duration({"start_time": "08:00", "end_time": "12:30", "is_overnight": False})
        assert timing["duration_minutes"] == 270

    def test_recompute_overrides_stale_duration(self):
        timing = {"start_time": "08:00", "end_time": "10:00", "duration_minutes": 999, "is_overnight": False}
        assert service.with_duration(timing)["duration_minutes"] == 999
        assert service.with_duration(timing, recompute=True)["duration_minutes"] == 120


class TestShiftTypeService:
    def test_create_defaults_category_and_duration(self, db, organization):
        shift_type = _create(db, organization)
        assert shift_type.category == organization.category
        assert shift_type.default_timing["duration_minutes"] == 480
        assert shift_type.is_active

    def test_duplicate_name_conflicts(self, db, organization):
        _create(db, organization)
        with pytest.raises(HTTPException) as exc:
            _create(db, organization)
        assert exc.value.status_code == 409

    def test_same_name_in_other_organization(self, db, organization, make_organization):
        _create(db, organization)
        other = make_organization(name="Other")
        assert _create(db, other).name == "Early"

    def test_other_organization_cannot_read(self, db, organization, make_organization):
        shift_type = _create(db, organization)
        other = make_organization(name="Other")
        with pytest.raises(HTTPException) as exc:
            service.get_shift_type(db, other.organization_id, shift_type.shift_type_id)
        assert exc.value.status_code == 404

    def test_update_recomputes_duration_and_keeps_required_fields(self, db, organization):
        shift_type = _create(db, organization)
        updated = service.update_shift_type(
            db,
            organization.organization_id,
            shift_type.shift_type_id,
            ShiftTypeUpdate(
                default_timing=ShiftTiming(start_time="20:00", end_time="08:00", duration_minutes=5, is_overnight=True),
                applicable_days=None,
            ),
        )
        assert updated.default_timing["duration_minutes"] == 720
        assert updated.applicable_days == ["monday", "tuesday"]

    def test_deactivate_through_update(self, db, organization):
        shift_type = _create(db, organization)
        updated = service.update_shift_type(
            db, organization.organization_id, shift_type.shift_type_id, ShiftTypeUpdate(is_active=False)
        )
        assert updated.status == RecordStatus.deleted

    def test_delete_is_soft(self, db, organization):
        shift_type = _create(db, organization)
        service.remove_shift_type(db, organization.organization_id, shift_type.shift_type_id)

        db.expire_all()
        row = db.get(ShiftType, shift_type.shift_type_id)
        assert row is not None
        assert row.status == RecordStatus.deleted
        assert service.list_shift_types(db, organization.organization_id, is_active=True) == []
        assert len(service.list_shift_types(db, organization.organization_id)) == 1

    def test_search_matches_name_or_description(self, db, organization):
        _create(db, organization, name="Early", description="ward cover")
        _create(db, organization, name="Late")
        assert [st.name for st in service.list_shift_types(db, organization.organization_id, search="ward")] == ["Early"]

    def test_update_survives_email_failure(self, db, organization, admin, monkeypatch):
        sent = []

        def failing_send(to, subject, body):
            sent.append(to)
            raise notifications.EmailDeliveryError("smtp down")

        monkeypatch.setattr(notifications.email_service, "host", "smtp.example.com")
        monkeypatch.setattr(notifications.email_service, "sender", "rota@example.com")
        monkeypatch.setattr(notifications.email_service, "send", failing_send)

        shift_type = _create(db, organization)
        updated = service.update_shift_type(
            db, organization.organization_id, shift_type.shift_type_id, ShiftTypeUpdate(name="Early Cover")
        )
        assert updated.name == "Early Cover"
        assert sent == [admin.email]


class TestTemplates:
    def test_seeding_is_idempotent(self, db):
        assert service.ensure_system_templates_exist(db) == len(SHIFT_TEMPLATES)
        assert service.ensure_system_templates_exist(db) == 0
        assert len(service.get_shift_templates(db)) == len(SHIFT_TEMPLATES)

    def test_filter_by_category(self, db):
        service.ensure_system_templates_exist(db)
        names = {t.name for t in service.get_shift_templates(db, "manufacturing")}
        assert names == {"First Shift", "Second Shift", "Third Shift"}

    def test_apply_template_with_customizations(self, db, organization):
        service.ensure_system_templates_exist(db)
        template = next(t for t in service.get_shift_templates(db, "healthcare") if t.name == "Night Shift")

        shift_type = service.apply_template(
            db,
            template.shift_template_id,
            organization.organization_id,
            {"name": "Ward Nights", "color": "#000000", "applicable_days": None},
        )
        assert shift_type.name == "Ward Nights"
        assert shift_type.color == "#000000"
        assert shift_type.icon == "moon"
        assert shift_type.default_timing["is_overnight"] is True
        assert shift_type.default_timing["duration_minutes"] == 720
        assert len(shift_type.applicable_days) == 7

    def test_unknown_template(self, db, organization):
        with pytest.raises(HTTPException) as exc:
            service.apply_template(db, uuid.uuid4(), organization.organization_id)
        assert exc.value.status_code == 404


class TestShiftTypeRoutes:
    def test_times_round_trip_through_caller_timezone(self, client, db, organization, make_user, headers_for):
        manager = make_user(organization, SystemRole.admin, timezone="America/New_York")
        headers = headers_for(manager)
        response = client.post(
            "/shift-types",
            json={
                "name": "Early",
                "default_timing": {"start_time": "09:00", "end_time": "17:00"},
                "applicable_days": ["monday"],
            },
            headers=headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["default_timing"]["start_time"] == "09:00"
        assert body["default_timing"]["end_time"] == "17:00"
        assert body["default_timing"]["duration_minutes"] == 480

        stored = db.get(ShiftType, uuid.UUID(body["shift_type_id"]))
        assert stored.default_timing["start_time"] != "09:00"
        assert stored.default_timing["original_timezone"] == "America/New_York"

    def test_crud_flow(self, client, admin_headers):
        created = client.post("/shift-types", json={"name": "Late", "color": "#FF0000"}, headers=admin_headers)
        assert created.status_code == 200
        shift_type_id = created.json()["shift_type_id"]

        patched = client.patch(f"/shift-types/{shift_type_id}", json={"description": "Evening cover"}, headers=admin_headers)
        assert patched.json()["description"] == "Evening cover"

        assert client.delete(f"/shift-types/{shift_type_id}", headers=admin_headers).status_code == 204
        listed = client.get("/shift-types", params={"is_active": True}, headers=admin_headers)
        assert listed.json() == []

    def test_invalid_color_rejected(self, client, admin_headers):
        response = client.post("/shift-types", json={"name": "Late", "color": "red"}, headers=admin_headers)
        assert response.status_code == 422

    def test_templates_route(self, client, db, admin_headers):
        service.ensure_system_templates_exist(db)
        response = client.get("/shift-types/templates", params={"category": "education"}, headers=admin_headers)
        assert response.status_code == 200
        assert {t["name"] for t in response.json()} == {"School Hours", "After School Program"}

    def test_apply_template_route_stores_full_timing(self, client, db, admin_headers):
        service.ensure_system_templates_exist(db)
        template = next(t for t in service.get_shift_templates(db, "healthcare") if t.name == "Night Shift")
        response = client.post(
            "/shift-types/apply-template",
            json={
                "template_id": str(template.shift_template_id),
                "customizations": {"name": "Ward Days", "default_timing": {"start_time": "08:00", "end_time": "16:00"}},
            },
            headers=admin_headers,
        )
        assert response.status_code == 200

        stored = db.get(ShiftType, uuid.UUID(response.json()["shift_type_id"]))
        assert stored.default_timing["is_overnight"] is False
        assert stored.default_timing["duration_minutes"] == 480
