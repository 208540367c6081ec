"""
Role/permission resolution and access-control seeding.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from carestaff.access.catalog import (
    ACTOR_REFERENCE_PREFIX,
    PERMISSION_CATALOG,
    ROLE_DEFINITIONS,
    ROLE_PRECEDENCE,
    SAME_ORGANIZATION,
    Condition,
    ConditionOperator,
    SystemRole,
)
from carestaff.models.organization import Organization, category_for_legacy_type
from carestaff.models.permission import Permission
from carestaff.models.role import Role, RolePermission
from carestaff.models.user import User

logger = logging.getLogger(__name__)


def has_permission(actor_permissions: Iterable[str], required_permissions: Iterable[str]) -> bool:
    """True when nothing is required or the actor holds ANY of the required permissions."""
    required = list(required_permissions or [])
    if not required:
        return True
    held = set(actor_permissions or [])
    return any(permission in held for permission in required)


def _normalize(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    return value


def _substitute(value: Any, actor_context: Mapping[str, Any]) -> Any:
    if isinstance(value, str) and value.startswith(ACTOR_REFERENCE_PREFIX):
        return actor_context.get(value[len(ACTOR_REFERENCE_PREFIX):])
    if isinstance(value, (list, tuple)):
        return [_substitute(v, actor_context) for v in value]
    return value


def evaluate_condition(
    condition: Condition,
    actor_context: Mapping[str, Any],
    resource: Optional[Mapping[str, Any]],
) -> bool:
    expected = _substitute(condition.value, actor_context)
    actual = (resource or {}).get(condition.field)

    if condition.operator is ConditionOperator.eq:
        return actual is not None and _normalize(actual) == _normalize(expected)
    if condition.operator is ConditionOperator.ne:
        return _normalize(actual) != _normalize(expected)
    if condition.operator is ConditionOperator.in_:
        return _normalize(actual) in {_normalize(v) for v in (expected or [])}
    raise ValueError(f"Unsupported condition operator: {condition.operator}")


@dataclass(frozen=True)
class Grant:
    action: str
    subject: str
    conditions: tuple[Condition, ...] = ()


@dataclass(frozen=True)
class Actor:
    """The authenticated caller with everything resolved from its roles."""

    user_id: UUID
    organization_id: UUID
    role: Optional[str]
    roles: tuple[str, ...]
    grants: tuple[Grant, ...]
    permissions: frozenset[str]
    timezone: str
    organization_category: str
    legacy_type: Optional[str] = None
    organization_settings: Mapping[str, Any] = field(default_factory=dict)

    @property
    def context(self) -> dict:
        return {
            "user_id": str(self.user_id),
            "organization_id": str(self.organization_id),
            "role": self.role,
        }

    @property
    def is_super_admin(self) -> bool:
        return SystemRole.super_admin.value in self.roles


def authorize(actor: Actor, action: str, subject: str, resource: Optional[Mapping[str, Any]] = None) -> bool:
    if resource is None:
        resource = {"organization_id": actor.organization_id}
    for grant in actor.grants:
        if grant.subject not in (subject, "all"):
            continue
        if grant.action not in (action, "manage"):
            continue
        if all(evaluate_condition(c, actor.context, resource) for c in grant.conditions):
            return True
    return False


def resolve_role_permissions(role: Role) -> frozenset[str]:
    return frozenset(grant.permission.key for grant in role.grants)


def _grants_for(role: Role) -> list[Grant]:
    grants = []
    for rp in role.grants:
        conditions = tuple(Condition.from_json(c) for c in (rp.conditions or []))
        grants.append(Grant(rp.permission.action, rp.permission.subject, conditions))
    if role.is_system_role and role.key == SystemRole.super_admin.value:
        grants.append(Grant("manage", "all"))
    return grants


def _precedence(role: Role) -> int:
    try:
        return ROLE_PRECEDENCE.index(role.key)
    except ValueError:
        return len(ROLE_PRECEDENCE)


def load_actor(user: User, organization: Organization, default_timezone: str) -> Actor:
    roles = sorted(user.roles, key=_precedence)
    grants: list[Grant] = []
    permissions: set[str] = set()
    for role in roles:
        grants.extend(_grants_for(role))
        permissions |= resolve_role_permissions(role)

    category = (organization.category or category_for_legacy_type(organization.legacy_type)).value
    legacy = organization.legacy_type.value if organization.legacy_type else None
    return Actor(
        user_id=user.user_id,
        organization_id=user.organization_id,
        role=roles[0].key if roles else None,
        roles=tuple(role.key for role in roles),
        grants=tuple(grants),
        permissions=frozenset(permissions),
        timezone=user.timezone or default_timezone,
        organization_category=category,
        legacy_type=legacy,
        organization_settings=dict(organization.settings or {}),
    )


# --- Seeding ---

def seed_permissions(db: Session) -> dict[str, Permission]:
    """Insert missing catalog permissions and refresh descriptions of existing ones."""
    existing = {(p.action, p.subject): p for p in db.execute(select(Permission)).scalars()}
    by_key: dict[str, Permission] = {}
    created = 0
    for spec in PERMISSION_CATALOG:
        permission = existing.get((spec.action, spec.subject))
        if permission is None:
            permission = Permission(action=spec.action, subject=spec.subject, description=spec.description)
            db.add(permission)
            created += 1
        else:
            permission.description = spec.description
        by_key[spec.key] = permission
    db.flush()
    logger.info("Seeded permissions: %d created, %d total", created, len(by_key))
    return by_key


def seed_system_roles(db: Session, permissions_by_key: Mapping[str, Permission]) -> dict[SystemRole, Role]:
    """Create or refresh system roles, replacing each role's permission set wholesale."""
    seeded: dict[SystemRole, Role] = {}
    for system_role, definition in ROLE_DEFINITIONS.items():
        role = db.execute(
            select(Role).where(Role.key == system_role.value, Role.is_system_role.is_(True))
        ).scalar_one_or_none()
        if role is None:
            role = Role(key=system_role.value, is_system_role=True, organization_id=None)
            db.add(role)

        role.name = definition.name
        role.description = definition.description

        role.grants.clear()
        db.flush()

        conditions = [definition.condition.to_json()] if definition.condition else None
        for key in sorted(definition.permissions):
            role.grants.append(RolePermission(permission=permissions_by_key[key], conditions=conditions))
        seeded[system_role] = role

    db.flush()
    logger.info("Seeded %d system roles", len(seeded))
    return seeded


def seed_access_control(db: Session) -> dict[SystemRole, Role]:
    try:
        permissions = seed_permissions(db)
        roles = seed_system_roles(db, permissions)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Access control seeding failed")
        raise
    return roles


# --- Organization roles ---

_SLUG = re.compile(r"[^a-z0-9]+")


def _role_key(name: str) -> str:
    return _SLUG.sub("_", name.lower()).strip("_")


def list_roles(db: Session, organization_id: UUID) -> list[Role]:
    stmt = (
        select(Role)
        .where((Role.is_system_role.is_(True)) | (Role.organization_id == organization_id))
        .order_by(Role.is_system_role.desc(), Role.name)
    )
    return list(db.execute(stmt).scalars().all())


def create_organization_role(
    db: Session,
    organization_id: UUID,
    name: str,
    description: Optional[str],
    permission_keys: Iterable[str],
) -> Role:
    """Custom tenant role. Every grant is scoped to the tenant's organization."""
    key = _role_key(name)
    if not key:
        raise HTTPException(status_code=400, detail="Role name must contain letters or digits")

    reserved = {role.value for role in SystemRole}
    if key in reserved:
        raise HTTPException(status_code=409, detail=f"'{name}' is a system role name")

    duplicate = db.execute(
        select(Role).where(Role.organization_id == organization_id, Role.key == key)
    ).scalar_one_or_none()
    if duplicate:
        raise HTTPException(status_code=409, detail="Role with this name already exists")

    requested = set(permission_keys)
    catalog = {p.key: p for p in db.execute(select(Permission)).scalars()}
    unknown = sorted(requested - set(catalog))
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown permissions: {', '.join(unknown)}")

    role = Role(
        organization_id=organization_id,
        key=key,
        name=name,
        description=description,
        is_system_role=False,
    )
    conditions = [SAME_ORGANIZATION.to_json()]
    for permission_key in sorted(requested):
        role.grants.append(RolePermission(permission=catalog[permission_key], conditions=conditions))

    db.add(role)
    db.commit()
    db.refresh(role)
    logger.info("Created role %s for organization %s", key, organization_id)
    return role


def set_user_roles(db: Session, actor: Actor, organization_id: UUID, user_id: UUID, role_ids: list[UUID]) -> User:
    """Replace the user's role assignments."""
    user = db.get(User, user_id)
    if not user or user.organization_id != organization_id:
        raise HTTPException(status_code=404, detail="User not found")

    roles = []
    for role_id in role_ids:
        role = db.get(Role, role_id)
        if not role or (not role.is_system_role and role.organization_id != organization_id):
            raise HTTPException(status_code=404, detail=f"Role not found: {role_id}")
        if role.key == SystemRole.super_admin.value and role.is_system_role and not actor.is_super_admin:
            raise HTTPException(status_code=403, detail="Only a Super Admin can grant Super Admin")
        roles.append(role)

    user.roles = roles
    db.commit()
    db.refresh(user)
    return user
