from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from carestaff.core.database import get_db
from carestaff.models.organization import OrganizationCategory
from carestaff.routers.auth import require_permission
from carestaff.schemas.scheduling import (
    RotationPatternCreate,
    RotationPatternOut,
    RotationPatternUpdate,
    RotationTemplateOut,
)
from carestaff.services import rotation_patterns as service
from carestaff.services.permissions import Actor

router = APIRouter()


@router.get("/templates/{pattern_type}", response_model=RotationTemplateOut)
def rotation_template(
    pattern_type: str,
    category: Optional[OrganizationCategory] = None,
    actor: Actor = Depends(require_permission("read", "ShiftRotationPattern")),
):
    return service.get_rotation_template(pattern_type, category or actor.organization_category)


@router.post("", response_model=RotationPatternOut)
def create_pattern(
    payload: RotationPatternCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("create", "ShiftRotationPattern")),
):
    return service.create_pattern(db, actor.organization_id, payload, actor.user_id)


@router.get("", response_model=list[RotationPatternOut])
def list_patterns(
    category: Optional[OrganizationCategory] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "ShiftRotationPattern")),
):
    return service.list_patterns(db, actor.organization_id, category, is_active, search)


@router.get("/{pattern_id}", response_model=RotationPatternOut)
def read_pattern(
    pattern_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "ShiftRotationPattern")),
):
    return service.get_pattern(db, actor.organization_id, pattern_id)


@router.patch("/{pattern_id}", response_model=RotationPatternOut)
def update_pattern(
    pattern_id: UUID,
    payload: RotationPatternUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("update", "ShiftRotationPattern")),
):
    return service.update_pattern(db, actor.organization_id, pattern_id, payload, actor.user_id)


@router.delete("/{pattern_id}", status_code=204)
def delete_pattern(
    pattern_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("delete", "ShiftRotationPattern")),
):
    service.remove_pattern(db, actor.organization_id, pattern_id, actor.user_id)
    return Response(status_code=204)
