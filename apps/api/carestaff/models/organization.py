import enum
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from carestaff.core.database import Base, JSONType


class OrganizationCategory(str, enum.Enum):
    hospital = "hospital"
    care_home = "care_home"
    education = "education"
    healthcare = "healthcare"
    social_services = "social_services"
    retail = "retail"
    service_provider = "service_provider"
    software_company = "software_company"
    manufacturing = "manufacturing"
    logistics = "logistics"
    construction = "construction"
    financial = "financial"
    hospitality = "hospitality"
    professional_services = "professional_services"
    other = "other"


class LegacyOrganizationType(str, enum.Enum):
    agency = "agency"
    home = "home"
    other = "other"


# Tenants created before categories existed only carry a legacy type
LEGACY_CATEGORY_MAP = {
    LegacyOrganizationType.agency: OrganizationCategory.service_provider,
    LegacyOrganizationType.home: OrganizationCategory.care_home,
}


def category_for_legacy_type(legacy_type) -> OrganizationCategory:
    return LEGACY_CATEGORY_MAP.get(legacy_type, OrganizationCategory.other)


def _default_category(context):
    return category_for_legacy_type(context.get_current_parameters().get("legacy_type"))


class Organization(Base):
    __tablename__ = "organizations"

    organization_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)

    category = Column(
        Enum(OrganizationCategory, name="organization_category"),
        nullable=False,
        default=_default_category,
    )
    # Older tenants were typed agency/home before categories existed
    legacy_type = Column(Enum(LegacyOrganizationType, name="legacy_organization_type"), nullable=True)

    timezone = Column(String, nullable=False, default="Europe/London")

    # feature flags consulted by the menu, e.g. {"allowResident3rdParty": true}
    settings = Column(JSONType, nullable=False, default=dict)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
