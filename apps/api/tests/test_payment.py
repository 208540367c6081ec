"""
Tests for shift payment configurations and staff rates.
"""

from datetime import date

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from carestaff.access.catalog import SystemRole
from carestaff.models.lifecycle import RecordStatus
from carestaff.schemas.payment import (
    HourlyPayment,
    PaymentConfigCreate,
    PaymentConfigUpdate,
    StaffRateCreate,
    payment_method_config,
    primary_amount,
)
from carestaff.schemas.shift_types import ShiftTypeCreate
from carestaff.services import payment_configs, staff_rates
from carestaff.services.shift_types import create_shift_type


@pytest.fixture
def shift_type(db, organization):
    return create_shift_type(db, organization.organization_id, ShiftTypeCreate(name="Day"))


def _hourly(shift_type, rate=12.5, name="Standard"):
    return PaymentConfigCreate(
        shift_type_id=shift_type.shift_type_id,
        name=name,
        config={"payment_method": "hourly", "base_rate": rate, "night_differential": 0.15},
        effective_from=date(2024, 1, 1),
    )


class TestPaymentVariants:
    def test_discriminated_by_method(self):
        config = payment_method_config.validate_python({"payment_method": "monthly", "base_amount": 3000})
        assert config.payment_method == "monthly"
        assert primary_amount(config) == 3000

    def test_parameter_from_another_variant_is_rejected(self):
        with pytest.raises(ValidationError):
            payment_method_config.validate_python({"payment_method": "hourly", "base_rate": 10, "commission_rate": 0.1})

    def test_unknown_method_is_rejected(self):
        with pytest.raises(ValidationError):
            payment_method_config.validate_python({"payment_method": "barter"})

    def test_hourly_primary_amount_is_base_rate(self):
        assert primary_amount(HourlyPayment(payment_method="hourly", base_rate=11)) == 11

    def test_custom_has_no_primary_amount(self):
        config = payment_method_config.validate_python({"payment_method": "custom", "formula": "hours * 2"})
        assert primary_amount(config) is None

    def test_effective_to_before_from(self, shift_type):
        with pytest.raises(ValidationError):
            PaymentConfigCreate(
                shift_type_id=shift_type.shift_type_id,
                name="Bad",
                config={"payment_method": "per_shift", "base_amount": 80},
                effective_from=date(2024, 2, 1),
                effective_to=date(2024, 1, 1),
            )


class TestPaymentConfigs:
    def test_create_splits_method_and_parameters(self, db, organization, shift_type):
        config = payment_configs.create_payment_config(db, organization.organization_id, _hourly(shift_type))
        assert config.payment_method == "hourly"
        assert config.parameters["base_rate"] == 12.5
        assert "payment_method" not in config.parameters
        assert config.config["payment_method"] == "hourly"
        assert config.currency == "GBP"

    def test_new_config_supersedes_previous(self, db, organization, shift_type):
        first = payment_configs.create_payment_config(db, organization.organization_id, _hourly(shift_type))
        second = payment_configs.create_payment_config(db, organization.organization_id, _hourly(shift_type, rate=14, name="Uplift"))

        db.refresh(first)
        assert first.status == RecordStatus.superseded
        active = payment_configs.list_payment_configs(db, organization.organization_id, shift_type.shift_type_id)
        assert [c.payment_config_id for c in active] == [second.payment_config_id]
        everything = payment_configs.list_payment_configs(
            db, organization.organization_id, shift_type.shift_type_id, include_inactive=True
        )
        assert len(everything) == 2

    def test_update_replaces_method_and_parameters_together(self, db, organization, shift_type):
        config = payment_configs.create_payment_config(db, organization.organization_id, _hourly(shift_type))
        updated = payment_configs.update_payment_config(
            db,
            organization.organization_id,
            config.payment_config_id,
            PaymentConfigUpdate(config={"payment_method": "per_shift", "base_amount": 95}),
        )
        assert updated.payment_method == "per_shift"
        assert updated.parameters == {"base_amount": 95.0, "weekend_bonus": None, "holiday_bonus": None}

    def test_update_with_inverted_dates(self, db, organization, shift_type):
        config = payment_configs.create_payment_config(db, organization.organization_id, _hourly(shift_type))
        with pytest.raises(HTTPException) as exc:
            payment_configs.update_payment_config(
                db, organization.organization_id, config.payment_config_id, PaymentConfigUpdate(effective_to=date(2023, 1, 1))
            )
        assert exc.value.status_code == 422

    def test_delete_is_soft(self, db, organization, shift_type):
        config = payment_configs.create_payment_config(db, organization.organization_id, _hourly(shift_type))
        payment_configs.remove_payment_config(db, organization.organization_id, config.payment_config_id)
        assert payment_configs.get_payment_config(db, organization.organization_id, config.payment_config_id).status == RecordStatus.deleted
        assert payment_configs.get_active_payment_config(db, organization.organization_id, shift_type.shift_type_id) is None


class TestEffectiveRate:
    def test_config_rate_applies_without_override(self, db, organization, shift_type, make_user):
        carer = make_user(organization, SystemRole.carer)
        payment_configs.create_payment_config(db, organization.organization_id, _hourly(shift_type))

        rate = staff_rates.resolve_effective_rate(
            db, organization.organization_id, carer.user_id, shift_type.shift_type_id, date(2024, 6, 1)
        )
        assert rate.source == "payment_config"
        assert rate.rate == 12.5
        assert rate.payment_method == "hourly"

    def test_staff_override_wins(self, db, organization, shift_type, make_user):
        carer = make_user(organization, SystemRole.carer)
        payment_configs.create_payment_config(db, organization.organization_id, _hourly(shift_type))
        staff_rates.create_staff_rate(
            db,
            organization.organization_id,
            StaffRateCreate(
                user_id=carer.user_id,
                shift_type_id=shift_type.shift_type_id,
                override_rate=15,
                bonus_rate=1.5,
                effective_from=date(2024, 1, 1),
            ),
        )

        rate = staff_rates.resolve_effective_rate(
            db, organization.organization_id, carer.user_id, shift_type.shift_type_id, date(2024, 6, 1)
        )
        assert rate.source == "staff_rate"
        assert rate.rate == 15
        assert rate.bonus_rate == 1.5
        assert rate.payment_method == "hourly"

    def test_new_staff_rate_supersedes_previous(self, db, organization, shift_type, make_user):
        carer = make_user(organization, SystemRole.carer)
        payload = StaffRateCreate(user_id=carer.user_id, shift_type_id=shift_type.shift_type_id, override_rate=10)
        first = staff_rates.create_staff_rate(db, organization.organization_id, payload)
        staff_rates.create_staff_rate(db, organization.organization_id, payload.model_copy(update={"override_rate": 11}))

        db.refresh(first)
        assert first.status == RecordStatus.superseded
        assert len(staff_rates.list_staff_rates(db, organization.organization_id, user_id=carer.user_id)) == 1

    def test_no_rate_configured(self, db, organization, shift_type, make_user):
        carer = make_user(organization, SystemRole.carer)
        with pytest.raises(HTTPException) as exc:
            staff_rates.resolve_effective_rate(db, organization.organization_id, carer.user_id, shift_type.shift_type_id)
        assert exc.value.status_code == 404

    def test_config_not_yet_effective(self, db, organization, shift_type, make_user):
        carer = make_user(organization, SystemRole.carer)
        payment_configs.create_payment_config(db, organization.organization_id, _hourly(shift_type))
        with pytest.raises(HTTPException):
            staff_rates.resolve_effective_rate(
                db, organization.organization_id, carer.user_id, shift_type.shift_type_id, date(2023, 6, 1)
            )


class TestPaymentRoutes:
    def test_variant_mismatch_is_422(self, client, admin_headers, shift_type):
        response = client.post(
            "/payment-configs",
            json={
                "shift_type_id": str(shift_type.shift_type_id),
                "name": "Broken",
                "config": {"payment_method": "monthly", "base_rate": 10},
            },
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_create_and_read(self, client, admin_headers, shift_type):
        response = client.post(
            "/payment-configs",
            json={
                "shift_type_id": str(shift_type.shift_type_id),
                "name": "Commission",
                "config": {"payment_method": "commission", "commission_rate": 0.05},
            },
            headers=admin_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["config"]["commission_type"] == "percentage"

        fetched = client.get(f"/payment-configs/{body['payment_config_id']}", headers=admin_headers)
        assert fetched.json()["payment_method"] == "commission"

    def test_carer_cannot_read_configs(self, client, make_user, organization, headers_for):
        carer = make_user(organization, SystemRole.carer)
        assert client.get("/payment-configs", headers=headers_for(carer)).status_code == 403

    def test_effective_rate_route(self, client, db, organization, admin, admin_headers, shift_type):
        payment_configs.create_payment_config(db, organization.organization_id, _hourly(shift_type))
        response = client.get(
            "/staff-rates/effective",
            params={"user_id": str(admin.user_id), "shift_type_id": str(shift_type.shift_type_id), "on_date": "2024-03-01"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["rate"] == 12.5
