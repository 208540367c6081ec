from __future__ import annotations

import copy
import logging
from typing import Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from carestaff.models.lifecycle import RecordStatus
from carestaff.models.scheduling_rule import SchedulingRule
from carestaff.scheduling.rule_templates import SYSTEM_RULES
from carestaff.schemas.common import dump_set_fields
from carestaff.schemas.scheduling import SchedulingRuleCreate, SchedulingRuleUpdate
from carestaff.services.organizations import get_organization
from carestaff.services.validators import validate_date_range

logger = logging.getLogger(__name__)

# columns copied from a system rule into an organization's rule
CLONED_FIELDS = (
    "name", "description", "rule_type", "severity", "scope", "scope_entity_id",
    "category", "parameters", "conditions", "error_message", "effective_from",
    "effective_to", "meta",
)


def _payload_fields(data: dict) -> dict:
    if "metadata" in data:
        data["meta"] = data.pop("metadata")
    if data.get("conditions") is not None:
        data["conditions"] = [dict(c) for c in data["conditions"]]
    return data


def create_rule(db: Session, organization_id: UUID, payload: SchedulingRuleCreate, actor_id: Optional[UUID] = None) -> SchedulingRule:
    get_organization(db, organization_id)
    fields = _payload_fields(payload.model_dump(mode="json"))
    # keep typed values for typed columns
    fields.update(
        rule_type=payload.rule_type,
        severity=payload.severity,
        scope=payload.scope,
        category=payload.category,
        scope_entity_id=payload.scope_entity_id,
        effective_from=payload.effective_from,
        effective_to=payload.effective_to,
    )
    rule = SchedulingRule(organization_id=organization_id, is_system=False, status_changed_by=actor_id, **fields)
    db.add(rule)
    db.commit()
    db.refresh(rule)
    logger.info("Created scheduling rule %s (%s) for organization %s", rule.rule_id, rule.rule_type.value, organization_id)
    return rule


def list_rules(
    db: Session,
    organization_id: UUID,
    rule_type: Optional[str] = None,
    severity: Optional[str] = None,
    scope: Optional[str] = None,
    category: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
) -> list[SchedulingRule]:
    stmt = select(SchedulingRule).where(SchedulingRule.organization_id == organization_id)
    if rule_type:
        stmt = stmt.where(SchedulingRule.rule_type == rule_type)
    if severity:
        stmt = stmt.where(SchedulingRule.severity == severity)
    if scope:
        stmt = stmt.where(SchedulingRule.scope == scope)
    if category:
        stmt = stmt.where(SchedulingRule.category == category)
    if is_active is True:
        stmt = stmt.where(SchedulingRule.status == RecordStatus.active)
    elif is_active is False:
        stmt = stmt.where(SchedulingRule.status != RecordStatus.active)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(SchedulingRule.name.ilike(pattern), SchedulingRule.description.ilike(pattern)))
    return list(db.execute(stmt.order_by(SchedulingRule.name)).scalars().all())


def get_rule(db: Session, organization_id: UUID, rule_id: UUID) -> SchedulingRule:
    rule = db.get(SchedulingRule, rule_id)
    if not rule or rule.organization_id != organization_id:
        raise HTTPException(status_code=404, detail="Scheduling rule not found")
    return rule


def update_rule(
    db: Session,
    organization_id: UUID,
    rule_id: UUID,
    payload: SchedulingRuleUpdate,
    actor_id: Optional[UUID] = None,
) -> SchedulingRule:
    rule = get_rule(db, organization_id, rule_id)
    changes = _payload_fields(dump_set_fields(payload))

    if "is_active" in changes:
        flag = changes.pop("is_active")
        if flag is not None and flag != rule.is_active:
            rule.transition(RecordStatus.active if flag else RecordStatus.deleted, actor_id)

    for field, value in changes.items():
        if value is None and field in ("name", "rule_type", "severity", "scope", "parameters", "conditions"):
            continue
        setattr(rule, field, value)

    try:
        validate_date_range(rule.effective_from, rule.effective_to)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(exc))

    db.commit()
    db.refresh(rule)
    return rule


def remove_rule(db: Session, organization_id: UUID, rule_id: UUID, actor_id: Optional[UUID] = None) -> None:
    rule = get_rule(db, organization_id, rule_id)
    rule.transition(RecordStatus.deleted, actor_id)
    db.commit()
    logger.info("Deleted scheduling rule %s", rule_id)


def get_system_rule_templates(db: Session, category: Optional[str] = None) -> list[SchedulingRule]:
    stmt = select(SchedulingRule).where(
        SchedulingRule.is_system.is_(True),
        SchedulingRule.organization_id.is_(None),
        SchedulingRule.status == RecordStatus.active,
    )
    if category:
        stmt = stmt.where(SchedulingRule.category == category)
    return list(db.execute(stmt.order_by(SchedulingRule.category, SchedulingRule.name)).scalars().all())


def ensure_system_rules_exist(db: Session) -> int:
    created = 0
    for row in SYSTEM_RULES:
        existing = db.execute(
            select(SchedulingRule).where(
                SchedulingRule.name == row["name"],
                SchedulingRule.category == row["category"],
                SchedulingRule.is_system.is_(True),
            )
        ).scalar_one_or_none()
        if existing is None:
            db.add(SchedulingRule(organization_id=None, is_system=True, conditions=[], **row))
            created += 1
    db.commit()
    if created:
        logger.info("Created %d system scheduling rules", created)
    return created


def apply_system_rules_to_organization(
    db: Session,
    organization_id: UUID,
    category: Optional[str] = None,
    actor_id: Optional[UUID] = None,
) -> list[SchedulingRule]:
    """Clone the category's system rules into the organization.

    Rules the organization already has (by name) are left alone, so
    applying twice creates nothing new.
    """
    organization = get_organization(db, organization_id)
    category = category or organization.category

    owned = set(db.execute(
        select(SchedulingRule.name).where(SchedulingRule.organization_id == organization_id)
    ).scalars().all())

    created = []
    for template in get_system_rule_templates(db, category):
        if template.name in owned:
            continue
        fields = {field: copy.deepcopy(getattr(template, field)) for field in CLONED_FIELDS}
        rule = SchedulingRule(organization_id=organization_id, is_system=False, status_changed_by=actor_id, **fields)
        db.add(rule)
        created.append(rule)

    db.commit()
    for rule in created:
        db.refresh(rule)
    logger.info("Applied %d system rules to organization %s", len(created), organization_id)
    return created
