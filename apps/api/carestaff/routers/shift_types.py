from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from carestaff.core.database import get_db
from carestaff.models.organization import OrganizationCategory
from carestaff.models.shift_type import ShiftType
from carestaff.routers.auth import require_permission
from carestaff.schemas.common import dump_set_fields
from carestaff.schemas.shift_types import (
    ApplyTemplateRequest,
    ShiftTemplateOut,
    ShiftTiming,
    ShiftTypeCreate,
    ShiftTypeOut,
    ShiftTypeUpdate,
)
from carestaff.services import shift_types as service
from carestaff.services.permissions import Actor
from carestaff.services.timezones import timing_from_server, timing_to_server

router = APIRouter()


def _to_server(timing: Optional[ShiftTiming], actor: Actor) -> Optional[ShiftTiming]:
    if timing is None:
        return None
    return ShiftTiming(**timing_to_server(timing.model_dump(), actor.timezone))


def _out(shift_type: ShiftType, actor: Actor) -> ShiftTypeOut:
    """Response with the stored server-zone timing shown in the caller's zone."""
    out = ShiftTypeOut.model_validate(shift_type)
    if out.default_timing is not None:
        local = timing_from_server(out.default_timing.model_dump(), actor.timezone)
        out = out.model_copy(update={"default_timing": ShiftTiming(**local)})
    return out


@router.get("/templates", response_model=list[ShiftTemplateOut])
def list_templates(
    category: Optional[OrganizationCategory] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "ShiftTemplate")),
):
    return service.get_shift_templates(db, category)


@router.post("/apply-template", response_model=ShiftTypeOut)
def apply_template(
    payload: ApplyTemplateRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("create", "ShiftType")),
):
    customizations = None
    if payload.customizations is not None:
        customizations = dump_set_fields(payload.customizations)
        if customizations.get("default_timing"):
            customizations["default_timing"] = timing_to_server(customizations["default_timing"], actor.timezone)
    shift_type = service.apply_template(db, payload.template_id, actor.organization_id, customizations, actor.user_id)
    return _out(shift_type, actor)


@router.post("", response_model=ShiftTypeOut)
def create_shift_type(
    payload: ShiftTypeCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("create", "ShiftType")),
):
    payload = payload.model_copy(update={"default_timing": _to_server(payload.default_timing, actor)})
    shift_type = service.create_shift_type(db, actor.organization_id, payload, actor.user_id)
    return _out(shift_type, actor)


@router.get("", response_model=list[ShiftTypeOut])
def list_shift_types(
    category: Optional[OrganizationCategory] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "ShiftType")),
):
    rows = service.list_shift_types(db, actor.organization_id, category, is_active, search)
    return [_out(st, actor) for st in rows]


@router.get("/{shift_type_id}", response_model=ShiftTypeOut)
def read_shift_type(
    shift_type_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "ShiftType")),
):
    return _out(service.get_shift_type(db, actor.organization_id, shift_type_id), actor)


@router.patch("/{shift_type_id}", response_model=ShiftTypeOut)
def update_shift_type(
    shift_type_id: UUID,
    payload: ShiftTypeUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("update", "ShiftType")),
):
    if payload.default_timing is not None:
        payload = payload.model_copy(update={"default_timing": _to_server(payload.default_timing, actor)})
    shift_type = service.update_shift_type(db, actor.organization_id, shift_type_id, payload, actor.user_id)
    return _out(shift_type, actor)


@router.delete("/{shift_type_id}", status_code=204)
def delete_shift_type(
    shift_type_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("delete", "ShiftType")),
):
    service.remove_shift_type(db, actor.organization_id, shift_type_id, actor.user_id)
    return Response(status_code=204)
