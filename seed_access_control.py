#!/usr/bin/env python3
"""
Seed permissions, system roles, shift templates and system scheduling rules,
and optionally create the first Super Admin.
Run this after the database migration has been completed.

Usage:
    python seed_access_control.py
    python seed_access_control.py <email> <password> <first_name> <organization_name>

Example:
    python seed_access_control.py admin@example.com mypassword123 "Platform" "CareStaff HQ"
"""

import logging
import sys
from pathlib import Path

# Add the apps/api directory to the path so we can import carestaff
api_dir = Path(__file__).parent / "apps" / "api"
sys.path.insert(0, str(api_dir))

from sqlalchemy import select

from carestaff.access.catalog import SystemRole
from carestaff.core.database import SessionLocal
from carestaff.models import registry  # noqa: F401
from carestaff.models.organization import Organization
from carestaff.models.user import User
from carestaff.routers.auth import get_password_hash
from carestaff.services.permissions import seed_access_control
from carestaff.services.scheduling_rules import ensure_system_rules_exist
from carestaff.services.shift_types import ensure_system_templates_exist

logger = logging.getLogger("seed_access_control")


def create_super_admin(db, email: str, password: str, first_name: str, organization_name: str, super_admin_role) -> bool:
    """Create a Super Admin user (and its organization) unless the email is taken."""
    existing = db.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()
    if existing:
        logger.error("User with email %s already exists", email)
        return False

    organization = db.execute(
        select(Organization).where(Organization.name == organization_name)
    ).scalar_one_or_none()
    if organization is None:
        organization = Organization(name=organization_name)
        db.add(organization)
        db.flush()

    user = User(
        organization_id=organization.organization_id,
        first_name=first_name,
        last_name="",
        email=email.lower(),
        password_hash=get_password_hash(password),
        is_active=True,
    )
    user.roles = [super_admin_role]
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Super Admin created: %s <%s> in organization %s", user.user_id, user.email, organization.name)
    return True


def main(argv: list[str]) -> int:
    if len(argv) not in (1, 5):
        print(__doc__)
        return 1

    db = SessionLocal()
    try:
        roles = seed_access_control(db)
        templates = ensure_system_templates_exist(db)
        rules = ensure_system_rules_exist(db)
        logger.info("Seeded %d roles, %d new templates, %d new rules", len(roles), templates, rules)

        if len(argv) == 5:
            email, password, first_name, organization_name = argv[1:]
            if not all((email, password, first_name, organization_name)):
                logger.error("Email, password, first name and organization name are required")
                return 1
            ok = create_super_admin(db, email, password, first_name, organization_name, roles[SystemRole.super_admin])
            return 0 if ok else 1
        return 0
    except Exception:
        db.rollback()
        logger.exception("Seeding failed")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    sys.exit(main(sys.argv))
