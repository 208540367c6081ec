"""
Shift types: organization CRUD, system templates, template instantiation.

Timings reaching this module are already in the server timezone; the
routers convert to and from the caller's zone.
"""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from carestaff.models.lifecycle import RecordStatus
from carestaff.models.shift_template import ShiftTemplate
from carestaff.models.shift_type import ShiftType
from carestaff.scheduling.shift_templates import SHIFT_TEMPLATES, template_fields
from carestaff.schemas.common import dump_set_fields
from carestaff.schemas.shift_types import ShiftTypeCreate, ShiftTypeUpdate
from carestaff.services import notifications
from carestaff.services.organizations import get_organization
from carestaff.services.validators import calculate_duration_minutes

logger = logging.getLogger(__name__)

# columns that must never be nulled by a partial update or customization
REQUIRED_FIELDS = {"name", "category", "applicable_days"}


def with_duration(timing: Optional[dict], recompute: bool = False) -> Optional[dict]:
    """Fill in duration_minutes (always when ``recompute``)."""
    if not timing:
        return timing
    if recompute or timing.get("duration_minutes") is None:
        timing = dict(
            timing,
            duration_minutes=calculate_duration_minutes(
                timing["start_time"], timing["end_time"], bool(timing.get("is_overnight"))
            ),
        )
    return timing


def _ensure_unique_name(db: Session, organization_id: UUID, name: str, exclude_id: Optional[UUID] = None) -> None:
    stmt = select(ShiftType.shift_type_id).where(
        ShiftType.organization_id == organization_id,
        ShiftType.name == name,
    )
    if exclude_id is not None:
        stmt = stmt.where(ShiftType.shift_type_id != exclude_id)
    if db.execute(stmt).first():
        raise HTTPException(status_code=409, detail=f"Shift type '{name}' already exists")


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Shift type with this name already exists")


def create_shift_type(
    db: Session,
    organization_id: UUID,
    payload: ShiftTypeCreate,
    actor_id: Optional[UUID] = None,
) -> ShiftType:
    organization = get_organization(db, organization_id)
    _ensure_unique_name(db, organization_id, payload.name)

    timing = payload.default_timing.model_dump() if payload.default_timing else None
    shift_type = ShiftType(
        organization_id=organization_id,
        name=payload.name,
        description=payload.description,
        category=payload.category or organization.category,
        default_timing=with_duration(timing),
        color=payload.color,
        icon=payload.icon,
        applicable_days=list(payload.applicable_days),
        meta=payload.metadata,
        status_changed_by=actor_id,
    )
    db.add(shift_type)
    _commit(db)
    db.refresh(shift_type)
    logger.info("Created shift type %s (%s) for organization %s", shift_type.shift_type_id, shift_type.name, organization_id)
    return shift_type


def list_shift_types(
    db: Session,
    organization_id: UUID,
    category: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
) -> list[ShiftType]:
    stmt = select(ShiftType).where(ShiftType.organization_id == organization_id)
    if category:
        stmt = stmt.where(ShiftType.category == category)
    if is_active is True:
        stmt = stmt.where(ShiftType.status == RecordStatus.active)
    elif is_active is False:
        stmt = stmt.where(ShiftType.status != RecordStatus.active)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(ShiftType.name.ilike(pattern), ShiftType.description.ilike(pattern)))
    return list(db.execute(stmt.order_by(ShiftType.name)).scalars().all())


def get_shift_type(db: Session, organization_id: UUID, shift_type_id: UUID) -> ShiftType:
    shift_type = db.get(ShiftType, shift_type_id)
    if not shift_type or shift_type.organization_id != organization_id:
        raise HTTPException(status_code=404, detail="Shift type not found")
    return shift_type


def update_shift_type(
    db: Session,
    organization_id: UUID,
    shift_type_id: UUID,
    payload: ShiftTypeUpdate,
    actor_id: Optional[UUID] = None,
) -> ShiftType:
    shift_type = get_shift_type(db, organization_id, shift_type_id)
    changes = dump_set_fields(payload)

    if changes.get("name") and changes["name"] != shift_type.name:
        _ensure_unique_name(db, organization_id, changes["name"], exclude_id=shift_type_id)

    if "default_timing" in changes:
        shift_type.default_timing = with_duration(changes.pop("default_timing"), recompute=True)
    if "metadata" in changes:
        shift_type.meta = changes.pop("metadata")
    if "is_active" in changes:
        flag = changes.pop("is_active")
        if flag is not None and flag != shift_type.is_active:
            shift_type.transition(RecordStatus.active if flag else RecordStatus.deleted, actor_id)

    for field, value in changes.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(shift_type, field, value)

    _commit(db)
    db.refresh(shift_type)
    logger.info("Updated shift type %s", shift_type_id)

    notifications.notify_shift_type_updated(db, shift_type)
    return shift_type


def remove_shift_type(db: Session, organization_id: UUID, shift_type_id: UUID, actor_id: Optional[UUID] = None) -> None:
    shift_type = get_shift_type(db, organization_id, shift_type_id)
    shift_type.transition(RecordStatus.deleted, actor_id)
    db.commit()
    logger.info("Deleted shift type %s", shift_type_id)


# --- Templates ---

def get_shift_templates(db: Session, category: Optional[str] = None) -> list[ShiftTemplate]:
    stmt = select(ShiftTemplate).where(
        ShiftTemplate.is_system.is_(True),
        ShiftTemplate.status == RecordStatus.active,
    )
    if category:
        stmt = stmt.where(ShiftTemplate.category == category)
    return list(db.execute(stmt.order_by(ShiftTemplate.name)).scalars().all())


def apply_template(
    db: Session,
    template_id: UUID,
    organization_id: UUID,
    customizations: Optional[dict] = None,
    actor_id: Optional[UUID] = None,
) -> ShiftType:
    """New shift type copied from a template; explicit customizations win."""
    template = db.get(ShiftTemplate, template_id)
    if not template or not template.is_active:
        raise HTTPException(status_code=404, detail="Shift template not found")
    get_organization(db, organization_id)

    fields = {
        "name": template.name,
        "description": template.description,
        "category": template.category,
        "default_timing": dict(template.default_timing or {}) or None,
        "color": template.color,
        "icon": template.icon,
        "applicable_days": list(template.applicable_days or []),
        "meta": dict(template.meta) if template.meta else None,
    }

    overrides = dict(customizations or {})
    overrides.pop("is_active", None)
    if "metadata" in overrides:
        overrides["meta"] = overrides.pop("metadata")
    for field, value in overrides.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        fields[field] = value

    fields["default_timing"] = with_duration(fields["default_timing"])
    _ensure_unique_name(db, organization_id, fields["name"])

    shift_type = ShiftType(organization_id=organization_id, status_changed_by=actor_id, **fields)
    db.add(shift_type)
    _commit(db)
    db.refresh(shift_type)
    logger.info("Applied template %s as shift type %s for organization %s", template_id, shift_type.shift_type_id, organization_id)
    return shift_type


def ensure_system_templates_exist(db: Session) -> int:
    """Find-or-create every system template; returns how many were created."""
    created = 0
    for row in SHIFT_TEMPLATES:
        fields = template_fields(row)
        existing = db.execute(
            select(ShiftTemplate).where(
                ShiftTemplate.name == fields["name"],
                ShiftTemplate.category == fields["category"],
                ShiftTemplate.is_system.is_(True),
            )
        ).scalar_one_or_none()
        if existing is None:
            db.add(ShiftTemplate(is_system=True, **fields))
            created += 1
    db.commit()
    if created:
        logger.info("Created %d system shift templates", created)
    return created
