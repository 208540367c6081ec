"""
Sidebar menu definition.

Built once at import into frozen dataclasses, tuples and read-only
mappings; the resolver only ever reads it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping, Optional

ANY_CATEGORY = "*"


def _labels(**labels: str) -> Mapping[str, str]:
    return MappingProxyType(dict(labels))


@dataclass(frozen=True)
class MenuItem:
    id: str
    label: str
    path: str
    icon: str
    order: Optional[int] = 0
    required_permissions: tuple[str, ...] = ()
    organization_categories: tuple[str, ...] = (ANY_CATEGORY,)
    roles: tuple[str, ...] = ()
    category_labels: Mapping[str, str] = field(default_factory=_labels)
    # predicate over organization settings (feature flags)
    show_if: Optional[Callable[[Mapping], bool]] = None


@dataclass(frozen=True)
class MenuSection:
    id: str
    label: str
    icon: str
    order: int
    items: tuple[MenuItem, ...]
    organization_categories: tuple[str, ...] = (ANY_CATEGORY,)
    legacy_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class MenuConfiguration:
    sections: tuple[MenuSection, ...]


ADMIN_ROLES = ("admin", "owner", "organization_admin")
CLINICAL_ROLES = ADMIN_ROLES + ("doctor", "nurse")

SUBJECT_LABELS = _labels(
    hospital="Patients",
    healthcare="Patients",
    care_home="Residents",
    education="Students",
    retail="Customers",
    social_services="Clients",
    service_provider="Clients",
)


def _third_party_enabled(settings: Mapping) -> bool:
    return (settings or {}).get("allowResident3rdParty") is True


MENU_CONFIG = MenuConfiguration(sections=(
    MenuSection(
        id="common", label="Common", icon="material-symbols-light:home-outline", order=10,
        items=(
            MenuItem("home", "Home", "/dashboard", "material-symbols-light:home-outline", order=10),
        ),
    ),
    MenuSection(
        id="admin", label="Administration", icon="mingcute:settings-3-fill", order=20,
        items=(
            MenuItem("invitations", "Invitations", "/dashboard/invitations", "fluent:mail-20-regular",
                     order=10, required_permissions=("invite_staff",), roles=ADMIN_ROLES),
            MenuItem("invoices", "Invoices", "/dashboard/invoices", "fluent:document-20-regular",
                     order=20, required_permissions=("view_invoices",), roles=ADMIN_ROLES),
            MenuItem("settings", "Settings", "/dashboard/settings", "mingcute:settings-3-fill",
                     order=30, required_permissions=("view_settings",), roles=ADMIN_ROLES),
            MenuItem("leave-management", "Leave", "/dashboard/leave-management", "fluent:calendar-20-regular",
                     order=40, required_permissions=("view_leave_requests",), roles=ADMIN_ROLES),
        ),
    ),
    MenuSection(
        id="agency-items", label="Agency Management", icon="octicon:organization-24", order=30,
        organization_categories=("service_provider",), legacy_types=("agency",),
        items=(
            MenuItem("timesheets", "Timesheets", "/dashboard/org-timesheets", "hugeicons:google-sheet",
                     order=10, required_permissions=("view_timesheets",),
                     organization_categories=("service_provider",), roles=ADMIN_ROLES),
            MenuItem("homes", "Homes", "/dashboard/home-users", "material-symbols-light:home-work",
                     order=20, required_permissions=("view_homes", "view_staff"),
                     organization_categories=("service_provider",), roles=ADMIN_ROLES),
            MenuItem("staffs", "Staffs", "/dashboard/staffs", "fluent:scan-person-20-regular",
                     order=30, required_permissions=("view_staff",),
                     organization_categories=("service_provider",), roles=ADMIN_ROLES),
        ),
    ),
    MenuSection(
        id="home-items", label="Home Management", icon="material-symbols-light:home-work", order=30,
        organization_categories=("care_home",), legacy_types=("home",),
        items=(
            MenuItem("residents", "Residents", "/dashboard/residents", "healthicons:elderly-outline",
                     order=10, required_permissions=("view_subjects",),
                     organization_categories=("care_home",), roles=ADMIN_ROLES),
            MenuItem("timesheets", "Timesheets", "/dashboard/org-timesheets", "hugeicons:google-sheet",
                     order=20, required_permissions=("view_timesheets",),
                     organization_categories=("care_home",), roles=ADMIN_ROLES),
            MenuItem("attendance", "Attendance", "/dashboard/attendance-registry", "fluent:people-20-regular",
                     order=30, required_permissions=("view_attendance", "view_staff"),
                     organization_categories=("care_home",), roles=ADMIN_ROLES),
            MenuItem("agencies", "Agencies", "/dashboard/agency-users", "octicon:organization-24",
                     order=40, required_permissions=("view_agencies", "view_staff"),
                     organization_categories=("care_home",), roles=ADMIN_ROLES),
            MenuItem("staffs", "Staffs", "/dashboard/staffs", "fluent:scan-person-20-regular",
                     order=50, required_permissions=("view_staff",),
                     organization_categories=("care_home",), roles=ADMIN_ROLES),
            MenuItem("third-parties", "Third Parties", "/dashboard/home-thirdparties", "fluent:scan-person-20-regular",
                     order=60, required_permissions=("view_third_parties", "view_staff"),
                     organization_categories=("care_home",), roles=ADMIN_ROLES,
                     show_if=_third_party_enabled),
        ),
    ),
    MenuSection(
        id="clinical-items", label="Clinical", icon="healthicons:doctor-outline", order=35,
        organization_categories=("hospital", "healthcare"),
        items=(
            MenuItem("patients", "Residents", "/dashboard/residents", "healthicons:inpatient-outline",
                     order=10, required_permissions=("view_subjects",),
                     organization_categories=("hospital", "healthcare"), roles=CLINICAL_ROLES,
                     category_labels=SUBJECT_LABELS),
            MenuItem("rounds", "Schedules", "/dashboard/schedules", "fluent:calendar-ltr-20-regular",
                     order=20, required_permissions=("view_schedules",),
                     organization_categories=("hospital", "healthcare"), roles=CLINICAL_ROLES),
        ),
    ),
    MenuSection(
        id="scheduling", label="Scheduling", icon="fluent:calendar-clock-20-regular", order=38,
        items=(
            MenuItem("shift-types", "Shift Types", "/dashboard/shift-types", "fluent:clock-20-regular",
                     order=70, required_permissions=("read_shift_type",)),
            MenuItem("availability", "Availability", "/dashboard/availability", "fluent:calendar-checkmark-20-regular",
                     order=75, required_permissions=("read_employee_availability",)),
            MenuItem("payment-configs", "Pay Rates", "/dashboard/payment-configs", "fluent:money-20-regular",
                     order=80, required_permissions=("read_shift_payment_config",)),
            MenuItem("rotation-patterns", "Rotations", "/dashboard/rotation-patterns", "fluent:arrow-repeat-all-20-regular",
                     order=85, required_permissions=("read_shift_rotation_pattern",)),
        ),
    ),
    MenuSection(
        id="carer-items", label="Carer", icon="fluent:scan-person-20-regular", order=40,
        items=(
            MenuItem("timesheets", "Timesheets", "/dashboard/staff-timesheets", "hugeicons:google-sheet",
                     order=10, roles=("carer",)),
            MenuItem("leave", "Leave", "/dashboard/employee-leave", "fluent:calendar-20-regular",
                     order=20, roles=("carer",)),
            MenuItem("profile", "Profile", "/dashboard/carer-profile", "fluent:scan-person-20-regular",
                     order=30, roles=("carer",)),
        ),
    ),
    MenuSection(
        id="nurse-items", label="Nurse", icon="fluent:scan-person-20-regular", order=50,
        items=(
            MenuItem("profile", "Profile", "/dashboard/nurse-profile", "fluent:scan-person-20-regular",
                     order=10, roles=("nurse",)),
            MenuItem("timesheets", "Timesheets", "/dashboard/timesheets", "hugeicons:google-sheet",
                     order=20, roles=("nurse",)),
            MenuItem("leave", "Leave Management", "/dashboard/employee-leave", "fluent:calendar-20-regular",
                     order=30, roles=("nurse",)),
        ),
    ),
    MenuSection(
        id="senior-carer-items", label="Senior Carer", icon="fluent:scan-person-20-regular", order=60,
        items=(
            MenuItem("profile", "Profile", "/dashboard/carer-profile", "fluent:scan-person-20-regular",
                     order=10, roles=("senior_carer",)),
            MenuItem("timesheets", "Timesheets", "/dashboard/timesheets", "hugeicons:google-sheet",
                     order=20, roles=("senior_carer",)),
            MenuItem("leave", "Leave Management", "/dashboard/employee-leave", "fluent:calendar-20-regular",
                     order=30, roles=("senior_carer",)),
        ),
    ),
))

# Served whenever menu resolution fails
FALLBACK_MENU = (
    MenuItem("home", "Home", "/dashboard", "material-symbols-light:home-outline", order=10),
    MenuItem("invitations", "Invitations", "/dashboard/invitations", "fluent:mail-20-regular", order=20),
    MenuItem("residents", "Residents", "/dashboard/residents", "healthicons:elderly-outline", order=30),
    MenuItem("timesheets", "Timesheets", "/dashboard/timesheets", "hugeicons:google-sheet", order=40),
)
