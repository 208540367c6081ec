from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from carestaff.core.database import get_db
from carestaff.models.organization import OrganizationCategory
from carestaff.models.scheduling_rule import RuleScope, RuleSeverity, RuleType
from carestaff.routers.auth import require_permission
from carestaff.schemas.scheduling import (
    ApplySystemRulesRequest,
    SchedulingRuleCreate,
    SchedulingRuleOut,
    SchedulingRuleUpdate,
)
from carestaff.services import scheduling_rules as service
from carestaff.services.permissions import Actor

router = APIRouter()


@router.get("/templates", response_model=list[SchedulingRuleOut])
def list_rule_templates(
    category: Optional[OrganizationCategory] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "SchedulingRule")),
):
    return service.get_system_rule_templates(db, category)


@router.post("/apply-system-rules", response_model=list[SchedulingRuleOut])
def apply_system_rules(
    payload: ApplySystemRulesRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("create", "SchedulingRule")),
):
    """Copy the system rules for a category (default: the organization's) into the organization."""
    return service.apply_system_rules_to_organization(db, actor.organization_id, payload.category, actor.user_id)


@router.post("", response_model=SchedulingRuleOut)
def create_rule(
    payload: SchedulingRuleCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("create", "SchedulingRule")),
):
    return service.create_rule(db, actor.organization_id, payload, actor.user_id)


@router.get("", response_model=list[SchedulingRuleOut])
def list_rules(
    rule_type: Optional[RuleType] = None,
    severity: Optional[RuleSeverity] = None,
    scope: Optional[RuleScope] = None,
    category: Optional[OrganizationCategory] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "SchedulingRule")),
):
    return service.list_rules(db, actor.organization_id, rule_type, severity, scope, category, is_active, search)


@router.get("/{rule_id}", response_model=SchedulingRuleOut)
def read_rule(
    rule_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("read", "SchedulingRule")),
):
    return service.get_rule(db, actor.organization_id, rule_id)


@router.patch("/{rule_id}", response_model=SchedulingRuleOut)
def update_rule(
    rule_id: UUID,
    payload: SchedulingRuleUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("update", "SchedulingRule")),
):
    return service.update_rule(db, actor.organization_id, rule_id, payload, actor.user_id)


@router.delete("/{rule_id}", status_code=204)
def delete_rule(
    rule_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission("delete", "SchedulingRule")),
):
    service.remove_rule(db, actor.organization_id, rule_id, actor.user_id)
    return Response(status_code=204)
