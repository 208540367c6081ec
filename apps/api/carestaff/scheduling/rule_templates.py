SYSTEM_RULES = [
    # Healthcare
    {
        "name": "Minimum Rest Between Shifts",
        "description": "Healthcare staff must have at least 11 hours rest between shifts",
        "rule_type": "rest_period",
        "severity": "error",
        "scope": "organization",
        "category": "healthcare",
        "parameters": {"minimum_rest_hours": 11, "check_period_days": 1},
        "error_message": "Healthcare staff must have at least 11 hours rest between shifts",
    },
    {
        "name": "Maximum Weekly Hours",
        "description": "Healthcare staff should not work more than 48 hours per week",
        "rule_type": "max_hours_period",
        "severity": "warning",
        "scope": "organization",
        "category": "healthcare",
        "parameters": {"max_hours": 48, "period_days": 7},
        "error_message": "Staff member is scheduled for more than 48 hours in a week",
    },
    # Manufacturing
    {
        "name": "Maximum Consecutive Shifts",
        "description": "Manufacturing staff should not work more than 6 consecutive shifts",
        "rule_type": "max_consecutive_shifts",
        "severity": "warning",
        "scope": "organization",
        "category": "manufacturing",
        "parameters": {"max_consecutive_shifts": 6},
        "error_message": "Staff member is scheduled for more than 6 consecutive shifts",
    },
    {
        "name": "Minimum Rest After Night Shift",
        "description": "Manufacturing staff must have at least 24 hours rest after a night shift",
        "rule_type": "rest_period",
        "severity": "error",
        "scope": "shift_type",
        "category": "manufacturing",
        "parameters": {"minimum_rest_hours": 24, "apply_to_shift_types": ["Third Shift", "Night Shift"]},
        "error_message": "Staff must have 24 hours rest after working night shift",
    },
    # Retail
    {
        "name": "Retail Break Requirements",
        "description": "Retail staff must have a 30-minute break during shifts over 6 hours",
        "rule_type": "custom",
        "severity": "info",
        "scope": "organization",
        "category": "retail",
        "parameters": {"minimum_break_minutes": 30, "apply_to_shifts_longer_than_hours": 6},
        "error_message": "Staff needs a 30-minute break for shifts over 6 hours",
    },
    # Hospitality
    {
        "name": "Split Shift Restriction",
        "description": "Hospitality staff should not have more than 2 split shifts per week",
        "rule_type": "custom",
        "severity": "warning",
        "scope": "organization",
        "category": "hospitality",
        "parameters": {"max_split_shifts_per_week": 2},
        "error_message": "Staff is scheduled for more than 2 split shifts this week",
    },
]

# Rotation skeletons; the sequence is filled in with the organization's own shift types.
ROTATION_TEMPLATES = {
    "continental": {
        "name": "Continental Rotation (Template)",
        "description": "4 teams, 8-hour shifts, rotating through morning, afternoon, night, and off days",
        "cycle_length": 28,
        "breaks": [
            {"duration_days": 2, "description": "Weekend off", "is_paid": False},
            {"duration_days": 3, "description": "Mid-week off", "is_paid": False},
        ],
    },
    "4on4off": {
        "name": "4 On, 4 Off Rotation (Template)",
        "description": "4 days on, 4 days off - typically 12-hour shifts",
        "cycle_length": 8,
        "breaks": [{"duration_days": 4, "description": "Days off", "is_paid": False}],
    },
    "panama": {
        "name": "Panama Rotation (Template)",
        "description": "2 days on, 2 days off, 3 days on, 2 days off, 2 days on, 3 days off",
        "cycle_length": 14,
        "breaks": [
            {"duration_days": 2, "description": "First break", "is_paid": False},
            {"duration_days": 2, "description": "Second break", "is_paid": False},
            {"duration_days": 3, "description": "Third break", "is_paid": False},
        ],
    },
}

BASIC_ROTATION = {
    "name": "Basic Rotation (Template)",
    "description": "Basic weekly rotation pattern",
    "cycle_length": 7,
    "breaks": [{"duration_days": 2, "description": "Weekend", "is_paid": False}],
}
