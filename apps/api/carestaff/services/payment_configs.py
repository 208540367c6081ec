from __future__ import annotations

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from carestaff.core.config import settings
from carestaff.models.lifecycle import RecordStatus
from carestaff.models.payment_config import ShiftPaymentConfig
from carestaff.schemas.payment import PaymentConfigCreate, PaymentConfigUpdate, split_config
from carestaff.services.shift_types import get_shift_type
from carestaff.services.validators import validate_date_range

logger = logging.getLogger(__name__)


def get_active_payment_config(db: Session, organization_id: UUID, shift_type_id: UUID) -> Optional[ShiftPaymentConfig]:
    stmt = select(ShiftPaymentConfig).where(
        ShiftPaymentConfig.organization_id == organization_id,
        ShiftPaymentConfig.shift_type_id == shift_type_id,
        ShiftPaymentConfig.status == RecordStatus.active,
    )
    return db.execute(stmt).scalar_one_or_none()


def create_payment_config(
    db: Session,
    organization_id: UUID,
    payload: PaymentConfigCreate,
    actor_id: Optional[UUID] = None,
) -> ShiftPaymentConfig:
    """New active config for a shift type; the previous active one becomes superseded."""
    shift_type = get_shift_type(db, organization_id, payload.shift_type_id)
    if not shift_type.is_active:
        raise HTTPException(status_code=404, detail="Shift type not found")

    previous = get_active_payment_config(db, organization_id, payload.shift_type_id)
    if previous is not None:
        previous.transition(RecordStatus.superseded, actor_id)
        # the partial unique index only allows one active row
        db.flush()

    method, parameters = split_config(payload.config)
    config = ShiftPaymentConfig(
        organization_id=organization_id,
        shift_type_id=payload.shift_type_id,
        name=payload.name,
        description=payload.description,
        payment_method=method,
        parameters=parameters,
        currency=payload.currency or settings.default_currency,
        effective_from=payload.effective_from,
        effective_to=payload.effective_to,
        status_changed_by=actor_id,
    )
    db.add(config)
    db.commit()
    db.refresh(config)

    if previous is not None:
        logger.info("Payment config %s superseded by %s", previous.payment_config_id, config.payment_config_id)
    logger.info("Created %s payment config %s for shift type %s", method, config.payment_config_id, payload.shift_type_id)
    return config


def list_payment_configs(
    db: Session,
    organization_id: UUID,
    shift_type_id: Optional[UUID] = None,
    include_inactive: bool = False,
) -> list[ShiftPaymentConfig]:
    stmt = select(ShiftPaymentConfig).where(ShiftPaymentConfig.organization_id == organization_id)
    if shift_type_id:
        stmt = stmt.where(ShiftPaymentConfig.shift_type_id == shift_type_id)
    if not include_inactive:
        stmt = stmt.where(ShiftPaymentConfig.status == RecordStatus.active)
    stmt = stmt.order_by(ShiftPaymentConfig.name, ShiftPaymentConfig.effective_from.desc())
    return list(db.execute(stmt).scalars().all())


def get_payment_config(db: Session, organization_id: UUID, payment_config_id: UUID) -> ShiftPaymentConfig:
    config = db.get(ShiftPaymentConfig, payment_config_id)
    if not config or config.organization_id != organization_id:
        raise HTTPException(status_code=404, detail="Payment configuration not found")
    return config


def update_payment_config(
    db: Session,
    organization_id: UUID,
    payment_config_id: UUID,
    payload: PaymentConfigUpdate,
) -> ShiftPaymentConfig:
    config = get_payment_config(db, organization_id, payment_config_id)
    changes = payload.model_dump(exclude_unset=True, exclude={"config"})

    if payload.config is not None:
        # method and parameters always change together
        config.payment_method, config.parameters = split_config(payload.config)

    for field in ("name", "currency", "effective_from"):
        if changes.get(field) is None:
            changes.pop(field, None)
    for field, value in changes.items():
        setattr(config, field, value)

    try:
        validate_date_range(config.effective_from, config.effective_to)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(exc))

    db.commit()
    db.refresh(config)
    logger.info("Updated payment config %s", payment_config_id)
    return config


def remove_payment_config(db: Session, organization_id: UUID, payment_config_id: UUID, actor_id: Optional[UUID] = None) -> None:
    config = get_payment_config(db, organization_id, payment_config_id)
    config.transition(RecordStatus.deleted, actor_id)
    db.commit()
    logger.info("Deleted payment config %s", payment_config_id)


def is_effective(record, on_date: date) -> bool:
    if record.effective_from and record.effective_from > on_date:
        return False
    if record.effective_to and record.effective_to < on_date:
        return False
    return True
