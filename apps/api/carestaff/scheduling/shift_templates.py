WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]
ALL_DAYS = WEEKDAYS + ["saturday", "sunday"]

HEALTHCARE_STAFFING = {"staffing_requirements": {"minimum_staff": 2, "preferred_staff": 3}}

# System shift templates, one block per organization category.
# Timings are in the server timezone.
SHIFT_TEMPLATES = [
    # Healthcare
    {"name": "Day Shift", "category": "healthcare", "description": "Standard day shift for healthcare staff",
     "timing": ("07:00", "19:00", 720, False), "days": ALL_DAYS, "color": "#4CAF50", "icon": "sun",
     "payment_method": "hourly", "qualifications": [], "metadata": HEALTHCARE_STAFFING},
    {"name": "Night Shift", "category": "healthcare", "description": "Overnight shift for healthcare staff",
     "timing": ("19:00", "07:00", 720, True), "days": ALL_DAYS, "color": "#3F51B5", "icon": "moon",
     "payment_method": "hourly", "payment_config": {"night_differential": 0.15}, "qualifications": [],
     "metadata": HEALTHCARE_STAFFING},

    # Hospital
    {"name": "Morning Rounds", "category": "hospital", "description": "Morning rounds for hospital doctors",
     "timing": ("06:00", "09:00", 180, False), "days": WEEKDAYS, "color": "#FF9800", "icon": "clipboard",
     "payment_method": "hourly", "qualifications": [{"name": "Medical License", "is_required": True}]},

    # Retail
    {"name": "Morning Shift", "category": "retail", "description": "Morning retail shift",
     "timing": ("08:00", "16:00", 480, False), "days": ALL_DAYS, "color": "#2196F3", "icon": "shopping-cart",
     "payment_method": "hourly"},
    {"name": "Evening Shift", "category": "retail", "description": "Evening retail shift",
     "timing": ("16:00", "00:00", 480, False), "days": ALL_DAYS, "color": "#9C27B0", "icon": "moon",
     "payment_method": "hourly", "payment_config": {"night_differential": 0.1}},

    # Manufacturing
    {"name": "First Shift", "category": "manufacturing", "description": "First manufacturing shift",
     "timing": ("06:00", "14:00", 480, False), "days": WEEKDAYS, "color": "#FFC107", "icon": "tool",
     "payment_method": "hourly"},
    {"name": "Second Shift", "category": "manufacturing", "description": "Second manufacturing shift",
     "timing": ("14:00", "22:00", 480, False), "days": WEEKDAYS, "color": "#FF5722", "icon": "tool",
     "payment_method": "hourly", "payment_config": {"shift_differential": 0.05}},
    {"name": "Third Shift", "category": "manufacturing", "description": "Third manufacturing shift (night)",
     "timing": ("22:00", "06:00", 480, True), "days": WEEKDAYS, "color": "#607D8B", "icon": "tool",
     "payment_method": "hourly", "payment_config": {"night_differential": 0.15}},

    # Hospitality
    {"name": "Morning Service", "category": "hospitality", "description": "Morning hospitality service shift",
     "timing": ("06:00", "14:00", 480, False), "days": ALL_DAYS, "color": "#8BC34A", "icon": "coffee",
     "payment_method": "hourly"},
    {"name": "Evening Service", "category": "hospitality", "description": "Evening hospitality service shift",
     "timing": ("14:00", "22:00", 480, False), "days": ALL_DAYS, "color": "#E91E63", "icon": "utensils",
     "payment_method": "hourly", "payment_config": {"service_fee": True}},

    # Education
    {"name": "School Hours", "category": "education", "description": "Standard school hours shift",
     "timing": ("08:00", "16:00", 480, False), "days": WEEKDAYS, "color": "#00BCD4", "icon": "book",
     "payment_method": "monthly", "payment_config": {"base_amount": 3000, "working_days_per_period": 22}},
    {"name": "After School Program", "category": "education", "description": "After school program shift",
     "timing": ("16:00", "18:00", 120, False), "days": WEEKDAYS, "color": "#009688", "icon": "users",
     "payment_method": "hourly"},
]


def template_fields(row: dict) -> dict:
    """Column values for a ShiftTemplate row."""
    start, end, duration, overnight = row["timing"]
    return {
        "name": row["name"],
        "category": row["category"],
        "description": row["description"],
        "default_timing": {
            "start_time": start,
            "end_time": end,
            "duration_minutes": duration,
            "is_overnight": overnight,
        },
        "applicable_days": list(row["days"]),
        "color": row["color"],
        "icon": row["icon"],
        "default_payment_method": row["payment_method"],
        "default_payment_config": row.get("payment_config"),
        "qualification_requirements": row.get("qualifications"),
        "meta": row.get("metadata"),
    }
