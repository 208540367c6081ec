"""Display terms that vary with the organization category."""

from __future__ import annotations

import enum
from types import MappingProxyType
from typing import Mapping, Optional


class TermKey(str, enum.Enum):
    subject = "subject"
    subjects = "subjects"
    subject_management = "subject_management"
    subject_profile = "subject_profile"
    subject_records = "subject_records"
    service_plan = "service_plan"
    service_plans = "service_plans"
    service_note = "service_note"
    service_notes = "service_notes"
    health_record = "health_record"
    health_records = "health_records"
    location = "location"
    locations = "locations"
    provider = "provider"
    providers = "providers"
    schedule = "schedule"
    schedules = "schedules"
    dashboard = "dashboard"
    settings = "settings"


def _subject_terms(suffix: str = "") -> Mapping[str, str]:
    nouns = {
        "hospital": "Patient",
        "healthcare": "Patient",
        "care_home": "Resident",
        "education": "Student",
        "retail": "Customer",
        "service_provider": "Client",
        "financial": "Client",
    }
    return {category: f"{noun}{suffix}" for category, noun in nouns.items()}


def _plural(terms: Mapping[str, str]) -> Mapping[str, str]:
    return {category: f"{term}s" for category, term in terms.items()}


_SERVICE_PLAN = {
    "hospital": "Treatment Plan",
    "care_home": "Care Plan",
    "education": "Learning Plan",
    "service_provider": "Service Agreement",
}
_SERVICE_NOTE = {
    "hospital": "Medical Note",
    "care_home": "Care Note",
    "education": "Progress Note",
}
_LOCATION = {
    "hospital": "Hospital",
    "care_home": "Home",
    "education": "School",
    "retail": "Store",
}
_PROVIDER = {
    "hospital": "Medical Provider",
    "education": "Educational Provider",
    "retail": "Supplier",
}

# key -> (default term, per-category terms)
TERMINOLOGY: Mapping[TermKey, tuple[str, Mapping[str, str]]] = MappingProxyType({
    TermKey.subject: ("Subject", _subject_terms()),
    TermKey.subjects: ("Subjects", _plural(_subject_terms())),
    TermKey.subject_management: ("Subject Management", _subject_terms(" Management")),
    TermKey.subject_profile: ("Subject Profile", _subject_terms(" Profile")),
    TermKey.subject_records: ("Subject Records", _subject_terms(" Records")),
    TermKey.service_plan: ("Service Plan", _SERVICE_PLAN),
    TermKey.service_plans: ("Service Plans", _plural(_SERVICE_PLAN)),
    TermKey.service_note: ("Service Note", _SERVICE_NOTE),
    TermKey.service_notes: ("Service Notes", _plural(_SERVICE_NOTE)),
    TermKey.health_record: ("Health Record", {"hospital": "Medical Record"}),
    TermKey.health_records: ("Health Records", {"hospital": "Medical Records"}),
    TermKey.location: ("Location", _LOCATION),
    TermKey.locations: ("Locations", _plural(_LOCATION)),
    TermKey.provider: ("Provider", dict(_PROVIDER, care_home="Care Agency")),
    TermKey.providers: ("Providers", dict(_plural(_PROVIDER), care_home="Care Agencies")),
    TermKey.schedule: ("Schedule", {}),
    TermKey.schedules: ("Schedules", {}),
    TermKey.dashboard: ("Dashboard", {}),
    TermKey.settings: ("Settings", {}),
})


def resolve_term(key: str, category: Optional[str]) -> str:
    """Category-specific term, else the default; unknown keys come back unchanged."""
    try:
        default, terms = TERMINOLOGY[TermKey(key)]
    except ValueError:
        return key
    return terms.get(category or "", default)


def terminology_for(category: Optional[str]) -> dict[str, str]:
    return {key.value: resolve_term(key.value, category) for key in TermKey}
