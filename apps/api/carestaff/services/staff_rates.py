from __future__ import annotations

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from carestaff.models.lifecycle import RecordStatus
from carestaff.models.staff_rate import StaffRate
from carestaff.schemas.payment import (
    EffectiveRateOut,
    StaffRateCreate,
    StaffRateUpdate,
    payment_method_config,
    primary_amount,
)
from carestaff.services.organizations import get_organization_user
from carestaff.services.payment_configs import get_active_payment_config, get_payment_config, is_effective
from carestaff.services.shift_types import get_shift_type
from carestaff.services.validators import validate_date_range

logger = logging.getLogger(__name__)


def _active_rate(db: Session, organization_id: UUID, user_id: UUID, shift_type_id: Optional[UUID]) -> Optional[StaffRate]:
    stmt = select(StaffRate).where(
        StaffRate.organization_id == organization_id,
        StaffRate.user_id == user_id,
        StaffRate.status == RecordStatus.active,
    )
    if shift_type_id is None:
        stmt = stmt.where(StaffRate.shift_type_id.is_(None))
    else:
        stmt = stmt.where(StaffRate.shift_type_id == shift_type_id)
    return db.execute(stmt.order_by(StaffRate.effective_from.desc())).scalars().first()


def create_staff_rate(
    db: Session,
    organization_id: UUID,
    payload: StaffRateCreate,
    actor_id: Optional[UUID] = None,
) -> StaffRate:
    get_organization_user(db, organization_id, payload.user_id)
    if payload.shift_type_id:
        get_shift_type(db, organization_id, payload.shift_type_id)
    if payload.payment_config_id:
        get_payment_config(db, organization_id, payload.payment_config_id)

    previous = _active_rate(db, organization_id, payload.user_id, payload.shift_type_id)
    if previous is not None:
        previous.transition(RecordStatus.superseded, actor_id)

    rate = StaffRate(
        organization_id=organization_id,
        status_changed_by=actor_id,
        **payload.model_dump(),
    )
    db.add(rate)
    db.commit()
    db.refresh(rate)
    logger.info("Created staff rate %s for user %s", rate.staff_rate_id, payload.user_id)
    return rate


def list_staff_rates(
    db: Session,
    organization_id: UUID,
    user_id: Optional[UUID] = None,
    shift_type_id: Optional[UUID] = None,
    include_inactive: bool = False,
) -> list[StaffRate]:
    stmt = select(StaffRate).where(StaffRate.organization_id == organization_id)
    if user_id:
        stmt = stmt.where(StaffRate.user_id == user_id)
    if shift_type_id:
        stmt = stmt.where(StaffRate.shift_type_id == shift_type_id)
    if not include_inactive:
        stmt = stmt.where(StaffRate.status == RecordStatus.active)
    return list(db.execute(stmt.order_by(StaffRate.user_id, StaffRate.effective_from.desc())).scalars().all())


def get_staff_rate(db: Session, organization_id: UUID, staff_rate_id: UUID) -> StaffRate:
    rate = db.get(StaffRate, staff_rate_id)
    if not rate or rate.organization_id != organization_id:
        raise HTTPException(status_code=404, detail="Staff rate not found")
    return rate


def update_staff_rate(db: Session, organization_id: UUID, staff_rate_id: UUID, payload: StaffRateUpdate) -> StaffRate:
    rate = get_staff_rate(db, organization_id, staff_rate_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("payment_config_id"):
        get_payment_config(db, organization_id, changes["payment_config_id"])
    if "effective_from" in changes and changes["effective_from"] is None:
        changes.pop("effective_from")

    for field, value in changes.items():
        setattr(rate, field, value)

    try:
        validate_date_range(rate.effective_from, rate.effective_to)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(exc))

    db.commit()
    db.refresh(rate)
    return rate


def remove_staff_rate(db: Session, organization_id: UUID, staff_rate_id: UUID, actor_id: Optional[UUID] = None) -> None:
    rate = get_staff_rate(db, organization_id, staff_rate_id)
    rate.transition(RecordStatus.deleted, actor_id)
    db.commit()
    logger.info("Deleted staff rate %s", staff_rate_id)


def resolve_effective_rate(
    db: Session,
    organization_id: UUID,
    user_id: UUID,
    shift_type_id: UUID,
    on_date: Optional[date] = None,
) -> EffectiveRateOut:
    """The rate a user is paid for a shift type.

    A staff rate with an override wins; otherwise the shift type's active
    payment config applies, with any staff bonus layered on top.
    """
    on_date = on_date or date.today()
    get_organization_user(db, organization_id, user_id)
    get_shift_type(db, organization_id, shift_type_id)

    staff_rate = _active_rate(db, organization_id, user_id, shift_type_id)
    if staff_rate is None or not is_effective(staff_rate, on_date):
        staff_rate = _active_rate(db, organization_id, user_id, None)
        if staff_rate is not None and not is_effective(staff_rate, on_date):
            staff_rate = None

    payment_config = None
    if staff_rate is not None and staff_rate.payment_config_id:
        payment_config = get_payment_config(db, organization_id, staff_rate.payment_config_id)
    if payment_config is None:
        payment_config = get_active_payment_config(db, organization_id, shift_type_id)
    if payment_config is not None and not is_effective(payment_config, on_date):
        payment_config = None

    bonus = float(staff_rate.bonus_rate) if staff_rate is not None and staff_rate.bonus_rate is not None else None

    if staff_rate is not None and staff_rate.override_rate is not None:
        return EffectiveRateOut(
            user_id=user_id,
            shift_type_id=shift_type_id,
            source="staff_rate",
            payment_method=staff_rate.payment_method or (payment_config.payment_method if payment_config else None),
            rate=float(staff_rate.override_rate),
            bonus_rate=bonus,
            currency=payment_config.currency if payment_config else None,
            staff_rate_id=staff_rate.staff_rate_id,
            payment_config_id=payment_config.payment_config_id if payment_config else None,
        )

    if payment_config is None:
        raise HTTPException(status_code=404, detail="No rate configured for this user and shift type")

    config = payment_method_config.validate_python(payment_config.config)
    return EffectiveRateOut(
        user_id=user_id,
        shift_type_id=shift_type_id,
        source="payment_config",
        payment_method=payment_config.payment_method,
        rate=primary_amount(config),
        bonus_rate=bonus,
        currency=payment_config.currency,
        staff_rate_id=staff_rate.staff_rate_id if staff_rate is not None else None,
        payment_config_id=payment_config.payment_config_id,
    )
