from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from carestaff.core.database import get_db
from carestaff.routers.auth import require_permission
from carestaff.schemas.payment import PaymentConfigCreate, PaymentConfigOut, PaymentConfigUpdate
from carestaff.services import payment_configs as service
from carestaff.services.permissions import Actor

router = APIRouter()


@router.post("", response_model=PaymentConfigOut)
def create_payment_config(
    payload: PaymentConfigCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("create", "ShiftPaymentConfig")),
):
    return service.create_payment_config(db, actor.organization_id, payload, actor.user_id)


@router.get("", response_model=list[PaymentConfigOut])
def list_payment_configs(
    shift_type_id: Optional[UUID] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "ShiftPaymentConfig")),
):
    return service.list_payment_configs(db, actor.organization_id, shift_type_id, include_inactive)


@router.get("/{payment_config_id}", response_model=PaymentConfigOut)
def read_payment_config(
    payment_config_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "ShiftPaymentConfig")),
):
    return service.get_payment_config(db, actor.organization_id, payment_config_id)


@router.patch("/{payment_config_id}", response_model=PaymentConfigOut)
def update_payment_config(
    payment_config_id: UUID,
    payload: PaymentConfigUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("update", "ShiftPaymentConfig")),
):
    return service.update_payment_config(db, actor.organization_id, payment_config_id, payload)


@router.delete("/{payment_config_id}", status_code=204)
def delete_payment_config(
    payment_config_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("delete", "ShiftPaymentConfig")),
):
    service.remove_payment_config(db, actor.organization_id, payment_config_id, actor.user_id)
    return Response(status_code=204)
