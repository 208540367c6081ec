"""
Navigation menu resolution.

``resolve_menu`` is pure: it reads the immutable configuration and the
caller's context and returns a fresh list. Callers that must always render
something use ``resolve_menu_or_fallback``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from carestaff.models.organization import category_for_legacy_type
from carestaff.navigation.menu_config import (
    ANY_CATEGORY,
    FALLBACK_MENU,
    MENU_CONFIG,
    MenuConfiguration,
    MenuItem,
    MenuSection,
)
from carestaff.services.permissions import has_permission

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedMenuItem:
    id: str
    label: str
    path: str
    icon: str
    order: int
    section: Optional[str] = None


def organization_category_for(category: Optional[str], legacy_type: Optional[str] = None) -> str:
    if category:
        return category
    return category_for_legacy_type(legacy_type).value


def is_category_match(categories: Iterable[str], category: Optional[str]) -> bool:
    categories = tuple(categories or (ANY_CATEGORY,))
    return ANY_CATEGORY in categories or category in categories


def _section_matches(section: MenuSection, category: Optional[str], legacy_type: Optional[str]) -> bool:
    if not is_category_match(section.organization_categories, category):
        return False
    if legacy_type and section.legacy_types:
        return legacy_type in section.legacy_types
    return True


def _item_matches(
    item: MenuItem,
    category: Optional[str],
    permissions: Iterable[str],
    role: Optional[str],
    settings: Mapping,
) -> bool:
    if not is_category_match(item.organization_categories, category):
        return False
    if not has_permission(permissions, item.required_permissions):
        return False
    if item.roles and role and role not in item.roles:
        return False
    if item.show_if is not None and not item.show_if(settings):
        return False
    return True


def _resolve(item: MenuItem, category: Optional[str], section_id: Optional[str]) -> ResolvedMenuItem:
    return ResolvedMenuItem(
        id=item.id,
        label=item.category_labels.get(category, item.label) if category else item.label,
        path=item.path,
        icon=item.icon,
        order=item.order or 0,
        section=section_id,
    )


def resolve_menu(
    config: MenuConfiguration,
    category: Optional[str],
    permissions: Iterable[str],
    role: Optional[str] = None,
    settings: Optional[Mapping] = None,
    legacy_type: Optional[str] = None,
) -> list[ResolvedMenuItem]:
    """Menu items visible to a caller, ordered by ``order``.

    Sections are walked in their declared order and ties keep that order,
    so identical inputs always produce the same list.
    """
    permissions = frozenset(permissions or ())
    settings = settings or {}

    items = []
    for section in config.sections:
        if not _section_matches(section, category, legacy_type):
            continue
        for item in section.items:
            if _item_matches(item, category, permissions, role, settings):
                items.append(_resolve(item, category, section.id))

    return sorted(items, key=lambda resolved: resolved.order)


def fallback_menu() -> list[ResolvedMenuItem]:
    return [_resolve(item, None, None) for item in FALLBACK_MENU]


def resolve_menu_or_fallback(
    category: Optional[str],
    permissions: Iterable[str],
    role: Optional[str] = None,
    settings: Optional[Mapping] = None,
    legacy_type: Optional[str] = None,
    config: MenuConfiguration = MENU_CONFIG,
) -> list[ResolvedMenuItem]:
    try:
        return resolve_menu(config, category, permissions, role, settings, legacy_type)
    except Exception:
        logger.exception("Menu resolution failed for role=%s category=%s; serving fallback menu", role, category)
        return fallback_menu()


def find_menu_item_by_path(path: str, config: MenuConfiguration = MENU_CONFIG) -> Optional[MenuItem]:
    for section in config.sections:
        for item in section.items:
            if item.path == path:
                return item
    return None


def is_route_accessible(
    path: str,
    category: Optional[str],
    permissions: Iterable[str],
    config: MenuConfiguration = MENU_CONFIG,
) -> bool:
    """Routes outside the menu are always reachable; menu routes follow the item's filters."""
    item = find_menu_item_by_path(path, config)
    if item is None:
        return True
    return is_category_match(item.organization_categories, category) and has_permission(
        permissions, item.required_permissions
    )
