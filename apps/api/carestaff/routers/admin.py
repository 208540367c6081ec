import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import select
from uuid import UUID

from carestaff.core.database import get_db
from carestaff.core.config import settings
from carestaff.models.organization import Organization, category_for_legacy_type
from carestaff.models.permission import Permission
from carestaff.models.role import Role
from carestaff.models.user import User
from carestaff.routers.auth import get_password_hash, require_permission
from carestaff.schemas.admin import (
    OrganizationCreate,
    OrganizationOut,
    OrganizationUpdate,
    PermissionOut,
    RoleCreate,
    RoleOut,
    UserCreate,
    UserOut,
    UserRoleAssign,
)
from carestaff.services import permissions as access
from carestaff.services.organizations import get_organization
from carestaff.services.scheduling_rules import ensure_system_rules_exist
from carestaff.services.shift_types import ensure_system_templates_exist
from carestaff.services.timezones import get_zone

router = APIRouter()
logger = logging.getLogger(__name__)


def user_out(user: User) -> UserOut:
    return UserOut(
        user_id=user.user_id,
        organization_id=user.organization_id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        phone=user.phone,
        timezone=user.timezone,
        is_active=user.is_active,
        roles=[role.key for role in user.roles],
    )


def role_out(role: Role) -> RoleOut:
    return RoleOut(
        role_id=role.role_id,
        organization_id=role.organization_id,
        key=role.key,
        name=role.name,
        description=role.description,
        is_system_role=role.is_system_role,
        permissions=sorted(access.resolve_role_permissions(role)),
    )


# --- Provisioning ---
@router.post("/seed")
def seed(
    db: Session = Depends(get_db),
    actor: access.Actor = Depends(require_permission("manage", "all")),
):
    """Seed permissions, system roles, shift templates and system rules."""
    roles = access.seed_access_control(db)
    templates = ensure_system_templates_exist(db)
    rules = ensure_system_rules_exist(db)
    logger.info("Provisioning run by %s", actor.user_id)
    return {
        "roles": sorted(role.value for role in roles),
        "templates_created": templates,
        "rules_created": rules,
    }


# --- Organizations ---
@router.post("/organizations", response_model=OrganizationOut)
def create_organization(
    payload: OrganizationCreate,
    db: Session = Depends(get_db),
    actor: access.Actor = Depends(require_permission("create", "Organization")),
):
    """Create a new organization (super admin only)."""
    get_zone(payload.timezone)
    org = Organization(
        name=payload.name,
        category=payload.category or category_for_legacy_type(payload.legacy_type),
        legacy_type=payload.legacy_type,
        timezone=payload.timezone,
        settings=payload.settings,
    )
    db.add(org)
    db.commit()
    db.refresh(org)
    logger.info("Created organization %s (%s)", org.organization_id, org.category.value)
    return org


@router.get("/organizations", response_model=list[OrganizationOut])
def list_organizations(
    db: Session = Depends(get_db),
    actor: access.Actor = Depends(require_permission("read", "Organization")),
):
    stmt = select(Organization).order_by(Organization.name)
    if not actor.is_super_admin:
        stmt = stmt.where(Organization.organization_id == actor.organization_id)
    return db.execute(stmt).scalars().all()


@router.get("/organizations/{organization_id}", response_model=OrganizationOut)
def read_organization(
    organization_id: UUID,
    db: Session = Depends(get_db),
    actor: access.Actor = Depends(require_permission("read", "Organization")),
):
    return get_organization(db, organization_id)


@router.patch("/organizations/{organization_id}", response_model=OrganizationOut)
def update_organization(
    organization_id: UUID,
    payload: OrganizationUpdate,
    db: Session = Depends(get_db),
    actor: access.Actor = Depends(require_permission("update", "Organization")),
):
    org = get_organization(db, organization_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("timezone"):
        get_zone(changes["timezone"])
    for field, value in changes.items():
        if value is not None:
            setattr(org, field, value)
    db.commit()
    db.refresh(org)
    return org


# --- Users ---
@router.post("/organizations/{organization_id}/users", response_model=UserOut)
def create_user(
    organization_id: UUID,
    payload: UserCreate,
    db: Session = Depends(get_db),
    actor: access.Actor = Depends(require_permission("create", "User")),
):
    get_organization(db, organization_id)
    email = str(payload.email).lower()
    if db.execute(select(User).where(User.email == email)).scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Email already registered")
    if payload.timezone:
        get_zone(payload.timezone)

    user = User(
        organization_id=organization_id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=email,
        phone=payload.phone,
        timezone=payload.timezone or settings.default_user_timezone,
        password_hash=get_password_hash(payload.password) if payload.password else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    if payload.role_ids:
        user = access.set_user_roles(db, actor, organization_id, user.user_id, payload.role_ids)
    logger.info("Created user %s in organization %s", user.user_id, organization_id)
    return user_out(user)


@router.get("/organizations/{organization_id}/users", response_model=list[UserOut])
def list_users(
    organization_id: UUID,
    db: Session = Depends(get_db),
    actor: access.Actor = Depends(require_permission("read", "User")),
):
    users = db.execute(
        select(User)
        .where(User.organization_id == organization_id)
        .order_by(User.last_name, User.first_name)
    ).scalars().all()
    return [user_out(u) for u in users]


@router.put("/organizations/{organization_id}/users/{user_id}/roles", response_model=UserOut)
def assign_user_roles(
    organization_id: UUID,
    user_id: UUID,
    payload: UserRoleAssign,
    db: Session = Depends(get_db),
    actor: access.Actor = Depends(require_permission("update", "User")),
):
    user = access.set_user_roles(db, actor, organization_id, user_id, payload.role_ids)
    return user_out(user)


# --- Roles & permissions ---
@router.get("/organizations/{organization_id}/roles", response_model=list[RoleOut])
def list_roles(
    organization_id: UUID,
    db: Session = Depends(get_db),
    actor: access.Actor = Depends(require_permission("read", "Role")),
):
    return [role_out(r) for r in access.list_roles(db, organization_id)]


@router.post("/organizations/{organization_id}/roles", response_model=RoleOut)
def create_role(
    organization_id: UUID,
    payload: RoleCreate,
    db: Session = Depends(get_db),
    actor: access.Actor = Depends(require_permission("create", "Role")),
):
    get_organization(db, organization_id)
    role = access.create_organization_role(db, organization_id, payload.name, payload.description, payload.permissions)
    return role_out(role)


@router.get("/permissions", response_model=list[PermissionOut])
def list_permissions(
    db: Session = Depends(get_db),
    actor: access.Actor = Depends(require_permission("read", "Permission")),
):
    return db.execute(select(Permission).order_by(Permission.subject, Permission.action)).scalars().all()
