"""
Tests for role/permission resolution, authorization conditions and seeding.
"""

import uuid

import pytest
from fastapi import HTTPException
from sqlalchemy import func, select

from carestaff.access.catalog import (
    ALL_PERMISSION_KEYS,
    PERMISSION_CATALOG,
    ROLE_DEFINITIONS,
    SAME_ORGANIZATION,
    Condition,
    ConditionOperator,
    SystemRole,
)
from carestaff.models.permission import Permission, permission_key
from carestaff.models.role import Role, RolePermission
from carestaff.services.permissions import (
    Actor,
    Grant,
    authorize,
    create_organization_role,
    evaluate_condition,
    has_permission,
    load_actor,
    resolve_role_permissions,
    seed_access_control,
    set_user_roles,
)


def _actor(grants=(), organization_id=None, roles=("admin",)) -> Actor:
    return Actor(
        user_id=uuid.uuid4(),
        organization_id=organization_id or uuid.uuid4(),
        role=roles[0] if roles else None,
        roles=tuple(roles),
        grants=tuple(grants),
        permissions=frozenset(),
        timezone="Europe/London",
        organization_category="hospital",
    )


class TestPermissionKey:
    def test_camel_case_subjects_become_snake_case(self):
        assert permission_key("invite", "Staff") == "invite_staff"
        assert permission_key("view", "LeaveRequests") == "view_leave_requests"
        assert permission_key("manage", "ShiftPaymentConfig") == "manage_shift_payment_config"


class TestHasPermission:
    def test_no_requirement_always_allowed(self):
        assert has_permission([], [])
        assert has_permission(["view_dashboard"], [])

    def test_any_required_permission_is_enough(self):
        assert has_permission(["view_staff"], ["invite_staff", "view_staff"])

    def test_none_of_the_required_permissions(self):
        assert not has_permission(["view_dashboard"], ["invite_staff", "view_staff"])

    def test_empty_actor_permissions(self):
        assert not has_permission([], ["invite_staff"])


class TestEvaluateCondition:
    def test_actor_reference_is_substituted(self):
        org = uuid.uuid4()
        context = {"organization_id": str(org)}
        assert evaluate_condition(SAME_ORGANIZATION, context, {"organization_id": org})
        assert not evaluate_condition(SAME_ORGANIZATION, context, {"organization_id": uuid.uuid4()})

    def test_missing_field_fails_equality(self):
        assert not evaluate_condition(SAME_ORGANIZATION, {"organization_id": "x"}, {})

    def test_in_and_ne_operators(self):
        in_condition = Condition("category", ConditionOperator.in_, ["hospital", "care_home"])
        assert evaluate_condition(in_condition, {}, {"category": "hospital"})
        assert not evaluate_condition(in_condition, {}, {"category": "retail"})

        ne_condition = Condition("status", ConditionOperator.ne, "deleted")
        assert evaluate_condition(ne_condition, {}, {"status": "active"})

    def test_round_trips_through_json(self):
        assert Condition.from_json(SAME_ORGANIZATION.to_json()) == SAME_ORGANIZATION


class TestAuthorize:
    def test_manage_implies_every_action(self):
        actor = _actor([Grant("manage", "ShiftType")])
        for action in ("create", "read", "update", "delete"):
            assert authorize(actor, action, "ShiftType")
        assert not authorize(actor, "read", "StaffRate")

    def test_same_organization_condition(self):
        org = uuid.uuid4()
        actor = _actor([Grant("read", "ShiftType", (SAME_ORGANIZATION,))], organization_id=org)
        assert authorize(actor, "read", "ShiftType")
        assert authorize(actor, "read", "ShiftType", {"organization_id": org})
        assert not authorize(actor, "read", "ShiftType", {"organization_id": uuid.uuid4()})

    def test_manage_all_covers_everything(self):
        actor = _actor([Grant("manage", "all")], roles=("super_admin",))
        assert authorize(actor, "delete", "Organization", {"organization_id": uuid.uuid4()})
        assert actor.is_super_admin


class TestSeeding:
    def test_super_admin_holds_whole_catalog(self, db):
        roles = seed_access_control(db)
        super_admin = resolve_role_permissions(roles[SystemRole.super_admin])
        assert len(super_admin) == len(PERMISSION_CATALOG)
        assert super_admin == ALL_PERMISSION_KEYS

    def test_every_system_role_is_seeded(self, db):
        roles = seed_access_control(db)
        assert set(roles) == set(SystemRole)
        for system_role, role in roles.items():
            assert resolve_role_permissions(role) == ROLE_DEFINITIONS[system_role].permissions

    def test_seeding_twice_is_idempotent(self, db):
        seed_access_control(db)
        counts = (
            db.scalar(select(func.count()).select_from(Permission)),
            db.scalar(select(func.count()).select_from(Role)),
            db.scalar(select(func.count()).select_from(RolePermission)),
        )
        seed_access_control(db)
        assert counts == (
            db.scalar(select(func.count()).select_from(Permission)),
            db.scalar(select(func.count()).select_from(Role)),
            db.scalar(select(func.count()).select_from(RolePermission)),
        )
        assert counts[0] == len(PERMISSION_CATALOG)

    def test_reseeding_refreshes_descriptions_and_grants(self, db):
        roles = seed_access_control(db)
        permission = db.execute(
            select(Permission).where(Permission.action == "invite", Permission.subject == "Staff")
        ).scalar_one()
        permission.description = "stale"
        roles[SystemRole.carer].grants.clear()
        db.commit()

        roles = seed_access_control(db)
        db.refresh(permission)
        assert permission.description == "Invite staff members"
        assert resolve_role_permissions(roles[SystemRole.carer]) == ROLE_DEFINITIONS[SystemRole.carer].permissions

    def test_clinical_roles_see_subjects_but_cannot_invite(self):
        doctor = ROLE_DEFINITIONS[SystemRole.doctor].permissions
        assert "view_subjects" in doctor
        assert "invite_staff" not in doctor


class TestLoadActor:
    def test_primary_role_follows_precedence(self, db, system_roles, make_user, organization):
        user = make_user(organization, SystemRole.carer)
        user.roles = [system_roles[SystemRole.carer], system_roles[SystemRole.admin]]
        db.commit()

        actor = load_actor(user, organization, "Europe/London")
        assert actor.role == "admin"
        assert set(actor.roles) == {"admin", "carer"}
        assert "invite_staff" in actor.permissions
        assert authorize(actor, "update", "ShiftType")
        assert not authorize(actor, "update", "ShiftType", {"organization_id": uuid.uuid4()})

    def test_super_admin_gets_manage_all(self, system_roles, make_user, organization):
        user = make_user(organization, SystemRole.super_admin)
        actor = load_actor(user, organization, "Europe/London")
        assert actor.is_super_admin
        assert authorize(actor, "create", "Organization", {"organization_id": uuid.uuid4()})


class TestOrganizationRoles:
    def test_custom_role_grants_are_organization_scoped(self, db, system_roles, organization):
        role = create_organization_role(db, organization.organization_id, "Ward Manager", None, ["read_shift_type", "view_staff"])
        assert role.key == "ward_manager"
        assert resolve_role_permissions(role) == {"read_shift_type", "view_staff"}
        assert all(grant.conditions == [SAME_ORGANIZATION.to_json()] for grant in role.grants)

    def test_unknown_permission_rejected(self, db, system_roles, organization):
        with pytest.raises(HTTPException) as exc:
            create_organization_role(db, organization.organization_id, "Ward Manager", None, ["fly_plane"])
        assert exc.value.status_code == 400

    def test_system_role_name_reserved(self, db, system_roles, organization):
        with pytest.raises(HTTPException) as exc:
            create_organization_role(db, organization.organization_id, "Super Admin", None, [])
        assert exc.value.status_code == 409

    def test_duplicate_name_conflicts(self, db, system_roles, organization):
        create_organization_role(db, organization.organization_id, "Ward Manager", None, [])
        with pytest.raises(HTTPException) as exc:
            create_organization_role(db, organization.organization_id, "ward manager", None, [])
        assert exc.value.status_code == 409

    def test_only_super_admin_grants_super_admin(self, db, system_roles, make_user, organization):
        admin = make_user(organization, SystemRole.admin)
        target = make_user(organization, SystemRole.carer)
        actor = load_actor(admin, organization, "Europe/London")
        with pytest.raises(HTTPException) as exc:
            set_user_roles(db, actor, organization.organization_id, target.user_id, [system_roles[SystemRole.super_admin].role_id])
        assert exc.value.status_code == 403


class TestAuthRoutes:
    def test_login_and_me(self, client, admin):
        response = client.post("/auth/login", json={"email": admin.email, "password": "correct-horse"})
        assert response.status_code == 200
        token = response.json()["access_token"]
        assert response.json()["role"] == "admin"

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert "invite_staff" in me.json()["permissions"]

    def test_wrong_password(self, client, admin):
        response = client.post("/auth/login", json={"email": admin.email, "password": "nope"})
        assert response.status_code == 401

    def test_missing_token(self, client):
        assert client.get("/auth/me").status_code in (401, 403)

    def test_forbidden_without_permission(self, client, make_user, organization, headers_for):
        carer = make_user(organization, SystemRole.carer)
        response = client.post("/shift-types", json={"name": "Early"}, headers=headers_for(carer))
        assert response.status_code == 403

    def test_admin_cannot_read_other_organization(self, client, make_organization, admin_headers):
        other = make_organization(name="Elsewhere")
        response = client.get(f"/admin/organizations/{other.organization_id}", headers=admin_headers)
        assert response.status_code == 403

    def test_admin_creates_user_with_role(self, client, organization, system_roles, admin_headers):
        response = client.post(
            f"/admin/organizations/{organization.organization_id}/users",
            json={
                "first_name": "Nina",
                "last_name": "Nurse",
                "email": "Nina@Example.com",
                "password": "long-enough",
                "role_ids": [str(system_roles[SystemRole.nurse].role_id)],
            },
            headers=admin_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "nina@example.com"
        assert body["roles"] == ["nurse"]
