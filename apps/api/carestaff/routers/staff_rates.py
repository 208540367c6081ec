from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from carestaff.core.database import get_db
from carestaff.routers.auth import require_permission
from carestaff.schemas.payment import EffectiveRateOut, StaffRateCreate, StaffRateOut, StaffRateUpdate
from carestaff.services import staff_rates as service
from carestaff.services.permissions import Actor

router = APIRouter()


@router.post("", response_model=StaffRateOut)
def create_staff_rate(
    payload: StaffRateCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("create", "StaffRate")),
):
    return service.create_staff_rate(db, actor.organization_id, payload, actor.user_id)


@router.get("", response_model=list[StaffRateOut])
def list_staff_rates(
    user_id: Optional[UUID] = None,
    shift_type_id: Optional[UUID] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "StaffRate")),
):
    return service.list_staff_rates(db, actor.organization_id, user_id, shift_type_id, include_inactive)


@router.get("/effective", response_model=EffectiveRateOut)
def effective_rate(
    user_id: UUID,
    shift_type_id: UUID,
    on_date: Optional[date] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "StaffRate")),
):
    """What ``user_id`` is paid for ``shift_type_id`` on ``on_date`` (default today)."""
    return service.resolve_effective_rate(db, actor.organization_id, user_id, shift_type_id, on_date)


@router.get("/{staff_rate_id}", response_model=StaffRateOut)
def read_staff_rate(
    staff_rate_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "StaffRate")),
):
    return service.get_staff_rate(db, actor.organization_id, staff_rate_id)


@router.patch("/{staff_rate_id}", response_model=StaffRateOut)
def update_staff_rate(
    staff_rate_id: UUID,
    payload: StaffRateUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("update", "StaffRate")),
):
    return service.update_staff_rate(db, actor.organization_id, staff_rate_id, payload)


@router.delete("/{staff_rate_id}", status_code=204)
def delete_staff_rate(
    staff_rate_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("delete", "StaffRate")),
):
    service.remove_staff_rate(db, actor.organization_id, staff_rate_id, actor.user_id)
    return Response(status_code=204)
