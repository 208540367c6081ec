from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from carestaff.core.database import get_db
from carestaff.routers.auth import require_permission
from carestaff.schemas.availability import (
    AvailabilityCreate,
    AvailabilityOut,
    AvailabilityPeriod,
    AvailabilityUpdate,
    AvailableEmployeeOut,
    SingleDateAvailability,
)
from carestaff.schemas.common import CalendarDate
from carestaff.services import availability as service
from carestaff.services.permissions import Actor, authorize

router = APIRouter()


def _target_user(actor: Actor, user_id: Optional[UUID]) -> UUID:
    """Staff edit their own availability; editing someone else's needs manage rights."""
    if user_id is None or user_id == actor.user_id:
        return actor.user_id
    if not authorize(actor, "manage", "EmployeeAvailability"):
        raise HTTPException(status_code=403, detail="Not allowed to manage other users' availability")
    return user_id


@router.post("", response_model=AvailabilityOut)
def create_or_update_availability(
    payload: AvailabilityCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("create", "EmployeeAvailability")),
):
    user_id = _target_user(actor, payload.user_id)
    return service.create_or_update_availability(db, actor.organization_id, user_id, payload, actor.user_id)


@router.get("", response_model=list[AvailabilityOut])
def get_availability(
    start_date: CalendarDate,
    end_date: CalendarDate,
    user_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "EmployeeAvailability")),
):
    return service.get_availability(db, actor.organization_id, start_date, end_date, user_id)


@router.get("/me", response_model=list[AvailabilityOut])
def get_my_availability(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "EmployeeAvailability")),
):
    return service.get_employee_availability(db, actor.organization_id, actor.user_id)


@router.get("/available-employees", response_model=list[AvailableEmployeeOut])
def get_available_employees(
    date: CalendarDate,
    period: AvailabilityPeriod,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "EmployeeAvailability")),
):
    return service.get_available_employees(db, actor.organization_id, date, period)


@router.put("/date", response_model=AvailabilityOut)
def update_single_date(
    payload: SingleDateAvailability,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("update", "EmployeeAvailability")),
):
    user_id = _target_user(actor, payload.user_id)
    return service.update_single_date_availability(
        db, actor.organization_id, user_id, payload.date, payload.period, actor.user_id
    )


@router.put("/{user_id}", response_model=AvailabilityOut)
def update_availability(
    user_id: UUID,
    payload: AvailabilityUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("update", "EmployeeAvailability")),
):
    """Replace the entries of a user's current availability record."""
    target = _target_user(actor, user_id)
    return service.update_availability(db, actor.organization_id, target, payload, actor.user_id)


@router.delete("/{availability_id}", response_model=AvailabilityOut)
def delete_availability(
    availability_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("delete", "EmployeeAvailability")),
):
    record = service.get_availability_record(db, actor.organization_id, availability_id)
    _target_user(actor, record.user_id)
    return service.delete_availability(db, actor.organization_id, availability_id, actor.user_id)
