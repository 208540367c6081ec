"""
Employee availability records.

A record holds an ordered list of (date, period) entries plus an effective
window. Writes replace the entry list rather than merging into it, and
deletes only flip the record's status.

Recurring records are matched by every query without expanding the
recurrence against the requested date or period. That is how the data is
consumed today; callers that need real recurrence semantics must expand
records themselves.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from carestaff.models.availability import AvailabilityEntry, AvailabilityPeriod, EmployeeAvailability
from carestaff.models.lifecycle import RecordStatus
from carestaff.models.user import User
from carestaff.schemas.availability import AvailabilityCreate, AvailabilityOut, AvailabilityUpdate
from carestaff.services.organizations import get_organization, get_organization_user

logger = logging.getLogger(__name__)


def _entries(items) -> list[AvailabilityEntry]:
    return [AvailabilityEntry(date=item.date, period=AvailabilityPeriod(item.period)) for item in items]


def _active_records(organization_id: UUID, user_id: UUID):
    return select(EmployeeAvailability).where(
        EmployeeAvailability.organization_id == organization_id,
        EmployeeAvailability.user_id == user_id,
        EmployeeAvailability.status == RecordStatus.active,
    )


def _current_record(db: Session, organization_id: UUID, user_id: UUID) -> Optional[EmployeeAvailability]:
    stmt = _active_records(organization_id, user_id).order_by(EmployeeAvailability.effective_from.desc())
    return db.execute(stmt).scalars().first()


def create_or_update_availability(
    db: Session,
    organization_id: UUID,
    user_id: UUID,
    payload: AvailabilityCreate,
    actor_id: Optional[UUID] = None,
) -> EmployeeAvailability:
    get_organization(db, organization_id)
    get_organization_user(db, organization_id, user_id)

    stmt = _active_records(organization_id, user_id)
    if not payload.is_recurring:
        window_end = payload.effective_to or payload.effective_from
        stmt = stmt.where(
            EmployeeAvailability.effective_from <= window_end,
            or_(
                EmployeeAvailability.effective_to.is_(None),
                EmployeeAvailability.effective_to >= payload.effective_from,
            ),
        )
    existing = db.execute(stmt.order_by(EmployeeAvailability.effective_from.desc())).scalars().first()

    if existing is not None:
        existing.entries = _entries(payload.entries)
        existing.effective_from = payload.effective_from
        existing.effective_to = payload.effective_to
        existing.is_recurring = payload.is_recurring
        existing.updated_by = actor_id
        record = existing
    else:
        record = EmployeeAvailability(
            user_id=user_id,
            organization_id=organization_id,
            effective_from=payload.effective_from,
            effective_to=payload.effective_to,
            is_recurring=payload.is_recurring,
            created_by=actor_id,
            updated_by=actor_id,
        )
        record.entries = _entries(payload.entries)
        db.add(record)

    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to save availability for user %s", user_id)
        raise
    db.refresh(record)
    logger.info(
        "%s availability %s for user %s (%d entries)",
        "Replaced" if existing is not None else "Created",
        record.availability_id,
        user_id,
        len(record.entries),
    )
    return record


def get_availability(
    db: Session,
    organization_id: UUID,
    start_date: date,
    end_date: date,
    user_id: Optional[UUID] = None,
) -> list[AvailabilityOut]:
    """Records overlapping [start_date, end_date], plus every recurring record.

    Entries of non-recurring records are narrowed to the range; recurring
    records come back with all of their entries.
    """
    if end_date < start_date:
        raise HTTPException(status_code=422, detail="end_date must not be before start_date")

    overlaps = and_(
        EmployeeAvailability.effective_from <= end_date,
        or_(EmployeeAvailability.effective_to.is_(None), EmployeeAvailability.effective_to >= start_date),
    )
    stmt = select(EmployeeAvailability).where(
        EmployeeAvailability.organization_id == organization_id,
        EmployeeAvailability.status == RecordStatus.active,
        or_(overlaps, EmployeeAvailability.is_recurring.is_(True)),
    )
    if user_id:
        stmt = stmt.where(EmployeeAvailability.user_id == user_id)
    stmt = stmt.order_by(EmployeeAvailability.user_id, EmployeeAvailability.effective_from)

    results = []
    for record in db.execute(stmt).scalars().all():
        out = AvailabilityOut.model_validate(record)
        if not record.is_recurring:
            # filter on the response copy, never on the mapped collection
            out = out.model_copy(update={
                "entries": [e for e in out.entries if start_date <= e.date <= end_date],
            })
        results.append(out)
    return results


def get_employee_availability(db: Session, organization_id: UUID, user_id: UUID) -> list[EmployeeAvailability]:
    stmt = _active_records(organization_id, user_id).order_by(EmployeeAvailability.effective_from.desc())
    return list(db.execute(stmt).scalars().all())


def update_availability(
    db: Session,
    organization_id: UUID,
    user_id: UUID,
    payload: AvailabilityUpdate,
    actor_id: Optional[UUID] = None,
) -> EmployeeAvailability:
    """Replace the entries of the user's current record.

    With no current record, a record is created only when there are entries
    to store; otherwise an unsaved empty record is returned.
    """
    get_organization_user(db, organization_id, user_id)
    record = _current_record(db, organization_id, user_id)

    if record is None:
        record = EmployeeAvailability(
            user_id=user_id,
            organization_id=organization_id,
            effective_from=payload.effective_from or date.today(),
            effective_to=payload.effective_to,
            is_recurring=bool(payload.is_recurring),
            created_by=actor_id,
            updated_by=actor_id,
        )
        if not payload.entries:
            return record
        record.entries = _entries(payload.entries)
        db.add(record)
    else:
        record.entries = _entries(payload.entries)
        fields = payload.model_fields_set
        if payload.effective_from is not None:
            record.effective_from = payload.effective_from
        if "effective_to" in fields:
            record.effective_to = payload.effective_to
        if payload.is_recurring is not None:
            record.is_recurring = payload.is_recurring
        record.updated_by = actor_id

    db.commit()
    db.refresh(record)
    return record


def update_single_date_availability(
    db: Session,
    organization_id: UUID,
    user_id: UUID,
    on_date: date,
    period: Optional[str],
    actor_id: Optional[UUID] = None,
) -> EmployeeAvailability:
    """Set or clear the entry for one calendar date; other entries are untouched."""
    get_organization_user(db, organization_id, user_id)
    record = _current_record(db, organization_id, user_id)

    if record is None:
        record = EmployeeAvailability(
            user_id=user_id,
            organization_id=organization_id,
            effective_from=on_date,
            is_recurring=False,
            created_by=actor_id,
        )
        db.add(record)

    index = next((i for i, entry in enumerate(record.entries) if entry.date == on_date), None)

    if period is None:
        if index is not None:
            record.entries.pop(index)
            record.entries.reorder()
    elif index is not None:
        record.entries[index].period = AvailabilityPeriod(period)
    else:
        record.entries.append(AvailabilityEntry(date=on_date, period=AvailabilityPeriod(period)))
        # keep the new date inside the record's window so range queries see it
        if on_date < record.effective_from:
            record.effective_from = on_date
        if record.effective_to is not None and on_date > record.effective_to:
            record.effective_to = on_date

    record.updated_by = actor_id
    db.commit()
    db.refresh(record)
    return record


def get_available_employees(
    db: Session,
    organization_id: UUID,
    on_date: date,
    period: str,
) -> list[User]:
    """Users with a matching entry on ``on_date``, plus everyone with a recurring record."""
    periods = [AvailabilityPeriod(period), AvailabilityPeriod.both]

    dated = (
        select(User)
        .join(EmployeeAvailability, EmployeeAvailability.user_id == User.user_id)
        .join(AvailabilityEntry, AvailabilityEntry.availability_id == EmployeeAvailability.availability_id)
        .where(
            EmployeeAvailability.organization_id == organization_id,
            EmployeeAvailability.status == RecordStatus.active,
            EmployeeAvailability.is_recurring.is_(False),
            AvailabilityEntry.date == on_date,
            AvailabilityEntry.period.in_(periods),
        )
        .order_by(User.last_name, User.first_name)
    )
    recurring = (
        select(User)
        .join(EmployeeAvailability, EmployeeAvailability.user_id == User.user_id)
        .where(
            EmployeeAvailability.organization_id == organization_id,
            EmployeeAvailability.status == RecordStatus.active,
            EmployeeAvailability.is_recurring.is_(True),
        )
        .order_by(User.last_name, User.first_name)
    )

    users: list[User] = []
    seen: set[UUID] = set()
    for stmt in (dated, recurring):
        for user in db.execute(stmt).scalars().all():
            if user.user_id not in seen:
                seen.add(user.user_id)
                users.append(user)
    return users


def get_availability_record(db: Session, organization_id: UUID, availability_id: UUID) -> EmployeeAvailability:
    record = db.get(EmployeeAvailability, availability_id)
    if not record or record.organization_id != organization_id:
        raise HTTPException(status_code=404, detail="Availability record not found")
    return record


def delete_availability(
    db: Session,
    organization_id: UUID,
    availability_id: UUID,
    actor_id: Optional[UUID] = None,
) -> EmployeeAvailability:
    record = get_availability_record(db, organization_id, availability_id)
    record.transition(RecordStatus.deleted, actor_id)
    record.updated_by = actor_id
    db.commit()
    db.refresh(record)
    logger.info("Deleted availability %s", availability_id)
    return record
