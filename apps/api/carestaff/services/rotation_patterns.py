from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from carestaff.models.lifecycle import RecordStatus
from carestaff.models.rotation_pattern import ShiftRotationPattern
from carestaff.scheduling.rule_templates import BASIC_ROTATION, ROTATION_TEMPLATES
from carestaff.schemas.common import dump_set_fields
from carestaff.schemas.scheduling import RotationPatternCreate, RotationPatternUpdate
from carestaff.services.organizations import get_organization
from carestaff.services.shift_types import get_shift_type
from carestaff.services.validators import validate_date_range

logger = logging.getLogger(__name__)


def _check_sequence(db: Session, organization_id: UUID, sequence: list[dict]) -> None:
    for step in sequence:
        shift_type = get_shift_type(db, organization_id, UUID(str(step["shift_type_id"])))
        if not shift_type.is_active:
            raise HTTPException(status_code=404, detail=f"Shift type not found: {step['shift_type_id']}")


def _warn_on_cycle_mismatch(pattern: ShiftRotationPattern) -> None:
    # cycle_length is advisory; a mismatch is reported, not rejected
    if not pattern.cycle_length_consistent:
        logger.warning(
            "Rotation pattern %s declares cycle_length %d but sequence and breaks add up to %d days",
            pattern.pattern_id,
            pattern.cycle_length,
            pattern.computed_cycle_length,
        )


def create_pattern(
    db: Session,
    organization_id: UUID,
    payload: RotationPatternCreate,
    actor_id: Optional[UUID] = None,
) -> ShiftRotationPattern:
    organization = get_organization(db, organization_id)
    data = payload.model_dump(mode="json")
    _check_sequence(db, organization_id, data["sequence"])

    pattern = ShiftRotationPattern(
        organization_id=organization_id,
        name=payload.name,
        description=payload.description,
        category=payload.category or organization.category,
        department_id=payload.department_id,
        sequence=data["sequence"],
        breaks=data["breaks"],
        cycle_length=payload.cycle_length,
        repeat_indefinitely=payload.repeat_indefinitely,
        max_repetitions=payload.max_repetitions,
        applicable_staff=data["applicable_staff"],
        applicable_roles=data["applicable_roles"],
        effective_from=payload.effective_from,
        effective_to=payload.effective_to,
        is_system=False,
        status_changed_by=actor_id,
    )
    db.add(pattern)
    db.commit()
    db.refresh(pattern)
    _warn_on_cycle_mismatch(pattern)
    logger.info("Created rotation pattern %s for organization %s", pattern.pattern_id, organization_id)
    return pattern


def list_patterns(
    db: Session,
    organization_id: UUID,
    category: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
) -> list[ShiftRotationPattern]:
    stmt = select(ShiftRotationPattern).where(ShiftRotationPattern.organization_id == organization_id)
    if category:
        stmt = stmt.where(ShiftRotationPattern.category == category)
    if is_active is True:
        stmt = stmt.where(ShiftRotationPattern.status == RecordStatus.active)
    elif is_active is False:
        stmt = stmt.where(ShiftRotationPattern.status != RecordStatus.active)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(ShiftRotationPattern.name.ilike(pattern), ShiftRotationPattern.description.ilike(pattern)))
    return list(db.execute(stmt.order_by(ShiftRotationPattern.name)).scalars().all())


def get_pattern(db: Session, organization_id: UUID, pattern_id: UUID) -> ShiftRotationPattern:
    pattern = db.get(ShiftRotationPattern, pattern_id)
    if not pattern or pattern.organization_id != organization_id:
        raise HTTPException(status_code=404, detail="Rotation pattern not found")
    return pattern


def update_pattern(
    db: Session,
    organization_id: UUID,
    pattern_id: UUID,
    payload: RotationPatternUpdate,
    actor_id: Optional[UUID] = None,
) -> ShiftRotationPattern:
    pattern = get_pattern(db, organization_id, pattern_id)
    changes = dump_set_fields(payload)
    json_changes = dump_set_fields(payload, mode="json")

    if changes.get("sequence") is not None:
        _check_sequence(db, organization_id, json_changes["sequence"])

    if "is_active" in changes:
        flag = changes.pop("is_active")
        if flag is not None and flag != pattern.is_active:
            pattern.transition(RecordStatus.active if flag else RecordStatus.deleted, actor_id)

    for field, value in changes.items():
        if value is None:
            if field in ("effective_from", "effective_to", "description", "department_id", "max_repetitions"):
                setattr(pattern, field, None)
            continue
        if field in ("sequence", "breaks", "applicable_staff"):
            value = json_changes[field]
        setattr(pattern, field, value)

    try:
        validate_date_range(pattern.effective_from, pattern.effective_to)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(exc))

    db.commit()
    db.refresh(pattern)
    _warn_on_cycle_mismatch(pattern)
    return pattern


def remove_pattern(db: Session, organization_id: UUID, pattern_id: UUID, actor_id: Optional[UUID] = None) -> None:
    pattern = get_pattern(db, organization_id, pattern_id)
    pattern.transition(RecordStatus.deleted, actor_id)
    db.commit()
    logger.info("Deleted rotation pattern %s", pattern_id)


def get_rotation_template(pattern_type: str, category: str) -> dict:
    """Skeleton for a named rotation; unknown names get the basic weekly rotation."""
    template = ROTATION_TEMPLATES.get(pattern_type, BASIC_ROTATION)
    return {
        "name": template["name"],
        "description": template["description"],
        "category": category,
        "cycle_length": template["cycle_length"],
        "sequence": [],
        "breaks": [dict(b) for b in template["breaks"]],
    }
