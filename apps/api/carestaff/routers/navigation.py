from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from carestaff.models.organization import OrganizationCategory
from carestaff.navigation.menu import organization_category_for, resolve_menu_or_fallback
from carestaff.navigation.terminology import terminology_for
from carestaff.routers.auth import get_current_actor
from carestaff.services.permissions import Actor

router = APIRouter()


class MenuItemOut(BaseModel):
    id: str
    label: str
    path: str
    icon: str
    order: int
    section: Optional[str] = None


@router.get("/menu", response_model=list[MenuItemOut])
def get_menu(actor: Actor = Depends(get_current_actor)):
    """Navigation for the current user. Always returns something to render."""
    items = resolve_menu_or_fallback(
        category=organization_category_for(actor.organization_category, actor.legacy_type),
        permissions=actor.permissions,
        role=actor.role,
        settings=actor.organization_settings,
        legacy_type=actor.legacy_type,
    )
    return [MenuItemOut(**vars(item)) for item in items]


@router.get("/terminology", response_model=dict[str, str])
def get_terminology(
    category: Optional[OrganizationCategory] = None,
    actor: Actor = Depends(get_current_actor),
):
    return terminology_for(category.value if category else actor.organization_category)
