from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.orm import Session

from carestaff.models.organization import Organization
from carestaff.models.user import User


def get_organization(db: Session, organization_id: UUID) -> Organization:
    organization = db.get(Organization, organization_id)
    if not organization:
        raise HTTPException(status_code=404, detail="Organization not found")
    return organization


def get_organization_user(db: Session, organization_id: UUID, user_id: UUID) -> User:
    user = db.get(User, user_id)
    if not user or user.organization_id != organization_id:
        raise HTTPException(status_code=404, detail="User not found")
    return user
