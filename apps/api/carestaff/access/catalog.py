"""
Permission catalog and system role definitions.

Roles are a closed set (SystemRole). Each one carries a fixed set of
permission keys and, optionally, a scoping condition that is checked
against the actor at request time. The seeding service writes these
definitions to the permissions/roles/role_permissions tables.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

from carestaff.models.permission import permission_key


class ConditionOperator(str, enum.Enum):
    eq = "eq"
    ne = "ne"
    in_ = "in"


@dataclass(frozen=True)
class Condition:
    """Structural predicate on a resource field.

    ``value`` may reference the actor with ``$actor.<attribute>``.
    """

    field: str
    operator: ConditionOperator
    value: Any

    def to_json(self) -> dict:
        return {"field": self.field, "operator": self.operator.value, "value": self.value}

    @classmethod
    def from_json(cls, data: dict) -> "Condition":
        return cls(
            field=data["field"],
            operator=ConditionOperator(data.get("operator", "eq")),
            value=data.get("value"),
        )


ACTOR_REFERENCE_PREFIX = "$actor."

SAME_ORGANIZATION = Condition(
    field="organization_id",
    operator=ConditionOperator.eq,
    value=f"{ACTOR_REFERENCE_PREFIX}organization_id",
)


@dataclass(frozen=True)
class PermissionSpec:
    action: str
    subject: str
    description: str

    @property
    def key(self) -> str:
        return permission_key(self.action, self.subject)


CRUD_ACTIONS = ("create", "read", "update", "delete", "manage")

MANAGED_SUBJECTS = (
    ("Organization", "organizations"),
    ("User", "users"),
    ("Role", "roles"),
    ("Permission", "permissions"),
    ("ShiftType", "shift types"),
    ("ShiftTemplate", "shift templates"),
    ("ShiftPaymentConfig", "shift payment configurations"),
    ("StaffRate", "staff rates"),
    ("EmployeeAvailability", "employee availability"),
    ("SchedulingRule", "scheduling rules"),
    ("ShiftRotationPattern", "shift rotation patterns"),
)

# Screen-level permissions referenced by the navigation menu
NAVIGATION_PERMISSIONS = (
    PermissionSpec("view", "Dashboard", "Access the dashboard"),
    PermissionSpec("invite", "Staff", "Invite staff members"),
    PermissionSpec("view", "Staff", "View staff members"),
    PermissionSpec("view", "Invoices", "View invoices"),
    PermissionSpec("view", "Settings", "View organization settings"),
    PermissionSpec("view", "LeaveRequests", "View leave requests"),
    PermissionSpec("view", "Timesheets", "View timesheets"),
    PermissionSpec("view", "Subjects", "View residents, patients or clients"),
    PermissionSpec("edit", "Subjects", "Edit residents, patients or clients"),
    PermissionSpec("view", "Attendance", "View attendance"),
    PermissionSpec("view", "Agencies", "View partner agencies"),
    PermissionSpec("view", "Homes", "View partner homes"),
    PermissionSpec("view", "ThirdParties", "View third-party contacts"),
    PermissionSpec("view", "Schedules", "View shift schedules"),
)


def _crud_permissions() -> tuple[PermissionSpec, ...]:
    specs = []
    for subject, label in MANAGED_SUBJECTS:
        for action in CRUD_ACTIONS:
            verb = "Manage all" if action == "manage" else action.capitalize()
            specs.append(PermissionSpec(action, subject, f"{verb} {label}"))
    return tuple(specs)


PERMISSION_CATALOG: tuple[PermissionSpec, ...] = _crud_permissions() + NAVIGATION_PERMISSIONS
ALL_PERMISSION_KEYS = frozenset(spec.key for spec in PERMISSION_CATALOG)


def _keys(*pairs: tuple[str, str]) -> frozenset[str]:
    return frozenset(permission_key(action, subject) for action, subject in pairs)


def _crud(subject: str, actions=("create", "read", "update", "delete")) -> frozenset[str]:
    return _keys(*((action, subject) for action in actions))


class SystemRole(str, enum.Enum):
    super_admin = "super_admin"
    organization_admin = "organization_admin"
    owner = "owner"
    admin = "admin"
    scheduler = "scheduler"
    doctor = "doctor"
    nurse = "nurse"
    senior_carer = "senior_carer"
    carer = "carer"
    staff = "staff"


@dataclass(frozen=True)
class RoleDefinition:
    name: str
    description: str
    permissions: frozenset[str]
    condition: Optional[Condition] = None


_ORGANIZATION_ADMINISTRATION = (
    _keys(("read", "Organization"), ("update", "Organization"), ("read", "Permission"))
    | _crud("User")
    | _crud("Role")
    | _crud("ShiftType", CRUD_ACTIONS)
    | _keys(("read", "ShiftTemplate"))
    | _crud("ShiftPaymentConfig", CRUD_ACTIONS)
    | _crud("StaffRate", CRUD_ACTIONS)
    | _crud("EmployeeAvailability", CRUD_ACTIONS)
    | _crud("SchedulingRule", CRUD_ACTIONS)
    | _crud("ShiftRotationPattern", CRUD_ACTIONS)
    | frozenset(spec.key for spec in NAVIGATION_PERMISSIONS)
)

_SCHEDULING = (
    _keys(("read", "Organization"), ("read", "User"), ("read", "ShiftTemplate"))
    | _crud("ShiftType")
    | _crud("EmployeeAvailability")
    | _crud("SchedulingRule")
    | _crud("ShiftRotationPattern")
    | _keys(("view", "Dashboard"), ("view", "Staff"), ("view", "Schedules"), ("view", "Timesheets"))
)

_CLINICAL = _keys(
    ("read", "Organization"),
    ("read", "ShiftType"),
    ("create", "EmployeeAvailability"),
    ("read", "EmployeeAvailability"),
    ("update", "EmployeeAvailability"),
    ("view", "Dashboard"),
    ("view", "Subjects"),
    ("edit", "Subjects"),
    ("view", "Schedules"),
    ("view", "Timesheets"),
)

_CARE_STAFF = _keys(
    ("read", "Organization"),
    ("read", "ShiftType"),
    ("create", "EmployeeAvailability"),
    ("read", "EmployeeAvailability"),
    ("update", "EmployeeAvailability"),
    ("view", "Dashboard"),
    ("view", "Timesheets"),
)

ROLE_DEFINITIONS: Mapping[SystemRole, RoleDefinition] = MappingProxyType({
    SystemRole.super_admin: RoleDefinition(
        name="Super Admin",
        description="Platform administrator with every permission",
        permissions=ALL_PERMISSION_KEYS,
    ),
    SystemRole.organization_admin: RoleDefinition(
        name="Organization Admin",
        description="Administers a single organization",
        permissions=_ORGANIZATION_ADMINISTRATION,
        condition=SAME_ORGANIZATION,
    ),
    SystemRole.owner: RoleDefinition(
        name="Owner",
        description="Organization owner",
        permissions=_ORGANIZATION_ADMINISTRATION,
        condition=SAME_ORGANIZATION,
    ),
    SystemRole.admin: RoleDefinition(
        name="Admin",
        description="Organization administrator",
        permissions=_ORGANIZATION_ADMINISTRATION,
        condition=SAME_ORGANIZATION,
    ),
    SystemRole.scheduler: RoleDefinition(
        name="Scheduler",
        description="Builds rotas and maintains shift definitions",
        permissions=_SCHEDULING,
        condition=SAME_ORGANIZATION,
    ),
    SystemRole.doctor: RoleDefinition(
        name="Doctor",
        description="Clinical staff with patient access",
        permissions=_CLINICAL,
        condition=SAME_ORGANIZATION,
    ),
    SystemRole.nurse: RoleDefinition(
        name="Nurse",
        description="Nursing staff",
        permissions=_CLINICAL,
        condition=SAME_ORGANIZATION,
    ),
    SystemRole.senior_carer: RoleDefinition(
        name="Senior Carer",
        description="Senior care staff",
        permissions=_CARE_STAFF | _keys(("view", "Subjects")),
        condition=SAME_ORGANIZATION,
    ),
    SystemRole.carer: RoleDefinition(
        name="Carer",
        description="Care staff",
        permissions=_CARE_STAFF,
        condition=SAME_ORGANIZATION,
    ),
    SystemRole.staff: RoleDefinition(
        name="Staff",
        description="Default role for staff members",
        permissions=_CARE_STAFF,
        condition=SAME_ORGANIZATION,
    ),
})

# Order used to pick an actor's primary role when several are assigned
ROLE_PRECEDENCE = tuple(role.value for role in SystemRole)
