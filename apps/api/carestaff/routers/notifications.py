from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from carestaff.core.database import get_db
from carestaff.routers.auth import get_current_actor
from carestaff.services import notifications
from carestaff.services.permissions import Actor

router = APIRouter()


class DeviceTokenIn(BaseModel):
    token: str = Field(min_length=1)
    platform: Optional[str] = None


class DeviceTokenOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    device_token_id: UUID
    token: str
    platform: Optional[str] = None
    is_active: bool


@router.post("/device-tokens", response_model=DeviceTokenOut)
def register_device_token(
    payload: DeviceTokenIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return notifications.register_device_token(db, actor.user_id, payload.token, payload.platform)


@router.delete("/device-tokens/{token}", status_code=204)
def unregister_device_token(
    token: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    notifications.unregister_device_token(db, actor.user_id, token)
    return Response(status_code=204)
