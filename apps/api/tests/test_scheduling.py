"""
Tests for scheduling rules and shift rotation patterns.
"""

import logging
import uuid

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from carestaff.models.lifecycle import RecordStatus
from carestaff.models.organization import OrganizationCategory
from carestaff.models.scheduling_rule import RuleScope, RuleSeverity, RuleType
from carestaff.scheduling.rule_templates import SYSTEM_RULES
from carestaff.schemas.scheduling import (
    RotationPatternCreate,
    RotationPatternUpdate,
    SchedulingRuleCreate,
    SchedulingRuleUpdate,
)
from carestaff.schemas.shift_types import ShiftTypeCreate
from carestaff.services import rotation_patterns, scheduling_rules
from carestaff.services.shift_types import create_shift_type, remove_shift_type


def _rest_rule(**overrides):
    data = {
        "name": "Eleven Hours Rest",
        "rule_type": "rest_period",
        "severity": "error",
        "parameters": {"minimum_rest_hours": 11},
        "conditions": [{"field": "shift_type", "operator": "eq", "value": "Night"}],
    }
    data.update(overrides)
    return SchedulingRuleCreate(**data)


@pytest.fixture
def healthcare(make_organization):
    return make_organization(name="Riverside Care", category=OrganizationCategory.healthcare)


class TestSchedulingRules:
    def test_non_organization_scope_needs_entity(self):
        with pytest.raises(ValidationError):
            _rest_rule(scope="staff")
        rule = _rest_rule(scope="staff", scope_entity_id=str(uuid.uuid4()))
        assert rule.scope == RuleScope.staff

    def test_create_and_filter(self, db, organization):
        rule = scheduling_rules.create_rule(db, organization.organization_id, _rest_rule())
        assert rule.rule_type == RuleType.rest_period
        assert rule.conditions[0]["logical_operator"] == "AND"
        assert rule.is_system is False

        scheduling_rules.create_rule(
            db, organization.organization_id, _rest_rule(name="Weekly Cap", rule_type="max_hours_period", severity="warning")
        )
        errors = scheduling_rules.list_rules(db, organization.organization_id, severity=RuleSeverity.error)
        assert [r.name for r in errors] == ["Eleven Hours Rest"]
        assert len(scheduling_rules.list_rules(db, organization.organization_id, search="cap")) == 1

    def test_update_and_deactivate(self, db, organization):
        rule = scheduling_rules.create_rule(db, organization.organization_id, _rest_rule())
        updated = scheduling_rules.update_rule(
            db,
            organization.organization_id,
            rule.rule_id,
            SchedulingRuleUpdate(parameters={"minimum_rest_hours": 12}, severity=None, is_active=False),
        )
        assert updated.parameters == {"minimum_rest_hours": 12}
        assert updated.severity == RuleSeverity.error
        assert updated.status == RecordStatus.deleted

    def test_updated_conditions_keep_logical_operator(self, db, organization):
        rule = scheduling_rules.create_rule(db, organization.organization_id, _rest_rule())
        updated = scheduling_rules.update_rule(
            db,
            organization.organization_id,
            rule.rule_id,
            SchedulingRuleUpdate(conditions=[{"field": "department", "operator": "in", "value": ["ICU"]}]),
        )
        assert updated.conditions == [{"field": "department", "operator": "in", "value": ["ICU"], "logical_operator": "AND"}]

    def test_other_organization_cannot_read(self, db, organization, make_organization):
        rule = scheduling_rules.create_rule(db, organization.organization_id, _rest_rule())
        other = make_organization(name="Other")
        with pytest.raises(HTTPException) as exc:
            scheduling_rules.get_rule(db, other.organization_id, rule.rule_id)
        assert exc.value.status_code == 404

    def test_delete_is_soft(self, db, organization):
        rule = scheduling_rules.create_rule(db, organization.organization_id, _rest_rule())
        scheduling_rules.remove_rule(db, organization.organization_id, rule.rule_id)
        assert scheduling_rules.list_rules(db, organization.organization_id, is_active=True) == []
        assert scheduling_rules.list_rules(db, organization.organization_id, is_active=False)[0].rule_id == rule.rule_id


class TestSystemRules:
    def test_seeding_is_idempotent(self, db):
        assert scheduling_rules.ensure_system_rules_exist(db) == len(SYSTEM_RULES)
        assert scheduling_rules.ensure_system_rules_exist(db) == 0

    def test_templates_by_category(self, db):
        scheduling_rules.ensure_system_rules_exist(db)
        names = {r.name for r in scheduling_rules.get_system_rule_templates(db, "healthcare")}
        assert names == {"Minimum Rest Between Shifts", "Maximum Weekly Hours"}

    def test_apply_uses_organization_category_and_is_idempotent(self, db, healthcare):
        scheduling_rules.ensure_system_rules_exist(db)

        created = scheduling_rules.apply_system_rules_to_organization(db, healthcare.organization_id)
        assert {r.name for r in created} == {"Minimum Rest Between Shifts", "Maximum Weekly Hours"}
        assert all(r.organization_id == healthcare.organization_id and not r.is_system for r in created)

        assert scheduling_rules.apply_system_rules_to_organization(db, healthcare.organization_id) == []
        assert len(scheduling_rules.list_rules(db, healthcare.organization_id)) == 2

    def test_clone_does_not_share_parameters(self, db, healthcare):
        scheduling_rules.ensure_system_rules_exist(db)
        clone = scheduling_rules.apply_system_rules_to_organization(db, healthcare.organization_id, "manufacturing")[0]
        clone.parameters["max_consecutive_shifts"] = 99
        template = next(r for r in scheduling_rules.get_system_rule_templates(db, "manufacturing") if r.name == clone.name)
        assert template.parameters != clone.parameters


class TestRotationPatterns:
    @pytest.fixture
    def shifts(self, db, organization):
        day = create_shift_type(db, organization.organization_id, ShiftTypeCreate(name="Day"))
        night = create_shift_type(db, organization.organization_id, ShiftTypeCreate(name="Night"))
        return day, night

    def _payload(self, shifts, cycle_length=8):
        day, night = shifts
        return RotationPatternCreate(
            name="Two Two Four",
            sequence=[
                {"shift_type_id": day.shift_type_id, "consecutive_days": 2},
                {"shift_type_id": night.shift_type_id, "consecutive_days": 2},
            ],
            breaks=[{"duration_days": 4}],
            cycle_length=cycle_length,
        )

    def test_consistent_cycle(self, db, organization, shifts):
        pattern = rotation_patterns.create_pattern(db, organization.organization_id, self._payload(shifts))
        assert pattern.computed_cycle_length == 8
        assert pattern.cycle_length_consistent
        assert pattern.category == organization.category

    def test_cycle_mismatch_is_flagged_not_rejected(self, db, organization, shifts, caplog):
        with caplog.at_level(logging.WARNING, logger="carestaff.services.rotation_patterns"):
            pattern = rotation_patterns.create_pattern(db, organization.organization_id, self._payload(shifts, cycle_length=7))
        assert pattern.cycle_length == 7
        assert not pattern.cycle_length_consistent
        assert "cycle_length" in caplog.text

    def test_unknown_shift_type(self, db, organization):
        payload = RotationPatternCreate(
            name="Ghost",
            sequence=[{"shift_type_id": uuid.uuid4(), "consecutive_days": 1}],
            cycle_length=1,
        )
        with pytest.raises(HTTPException) as exc:
            rotation_patterns.create_pattern(db, organization.organization_id, payload)
        assert exc.value.status_code == 404

    def test_deleted_shift_type_rejected(self, db, organization, shifts):
        remove_shift_type(db, organization.organization_id, shifts[1].shift_type_id)
        with pytest.raises(HTTPException):
            rotation_patterns.create_pattern(db, organization.organization_id, self._payload(shifts))

    def test_bounded_repeat_needs_max_repetitions(self, shifts):
        data = self._payload(shifts).model_dump(exclude={"repeat_indefinitely", "max_repetitions"})
        with pytest.raises(ValidationError):
            RotationPatternCreate(**data, repeat_indefinitely=False)
        assert RotationPatternCreate(**data, repeat_indefinitely=False, max_repetitions=3).max_repetitions == 3

    def test_update_sequence(self, db, organization, shifts):
        pattern = rotation_patterns.create_pattern(db, organization.organization_id, self._payload(shifts))
        day, _ = shifts
        updated = rotation_patterns.update_pattern(
            db,
            organization.organization_id,
            pattern.pattern_id,
            RotationPatternUpdate(sequence=[{"shift_type_id": day.shift_type_id, "consecutive_days": 4}]),
        )
        assert updated.sequence == [
            {"shift_type_id": str(day.shift_type_id), "consecutive_days": 4, "is_flexible": False, "metadata": None}
        ]
        assert updated.cycle_length_consistent

    def test_update_breaks_keep_full_shape(self, db, organization, shifts):
        pattern = rotation_patterns.create_pattern(db, organization.organization_id, self._payload(shifts))
        updated = rotation_patterns.update_pattern(
            db, organization.organization_id, pattern.pattern_id, RotationPatternUpdate(breaks=[{"duration_days": 3}])
        )
        assert updated.breaks == [{"duration_days": 3, "description": None, "is_paid": False}]
        assert updated.computed_cycle_length == 7

    def test_template_skeletons(self):
        panama = rotation_patterns.get_rotation_template("panama", "manufacturing")
        assert panama["cycle_length"] == 14
        assert panama["sequence"] == []
        assert len(panama["breaks"]) == 3

        fallback = rotation_patterns.get_rotation_template("no-such-rotation", "retail")
        assert fallback["name"] == "Basic Rotation (Template)"
        assert fallback["category"] == "retail"


class TestSchedulingRoutes:
    def test_apply_system_rules_route(self, client, db, make_user, healthcare, headers_for):
        scheduling_rules.ensure_system_rules_exist(db)
        manager = make_user(healthcare)
        headers = headers_for(manager)

        first = client.post("/scheduling-rules/apply-system-rules", json={}, headers=headers)
        assert first.status_code == 200
        assert len(first.json()) == 2
        second = client.post("/scheduling-rules/apply-system-rules", json={}, headers=headers)
        assert second.json() == []

    def test_rotation_template_defaults_to_organization_category(self, client, admin_headers):
        response = client.get("/rotation-patterns/templates/4on4off", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["cycle_length"] == 8
        assert body["category"] == "hospital"

    def test_rotation_pattern_response_flags(self, client, db, organization, admin_headers):
        day = create_shift_type(db, organization.organization_id, ShiftTypeCreate(name="Day"))
        response = client.post(
            "/rotation-patterns",
            json={
                "name": "Short",
                "sequence": [{"shift_type_id": str(day.shift_type_id), "consecutive_days": 3}],
                "cycle_length": 5,
            },
            headers=admin_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["computed_cycle_length"] == 3
        assert body["cycle_length_consistent"] is False

    def test_rule_scope_validation_route(self, client, admin_headers):
        response = client.post(
            "/scheduling-rules",
            json={"name": "Per staff", "rule_type": "custom", "scope": "staff"},
            headers=admin_headers,
        )
        assert response.status_code == 422
