"""Import every model so relationship strings resolve and metadata is complete."""

from carestaff.models.organization import Organization  # noqa: F401
from carestaff.models.user import User  # noqa: F401
from carestaff.models.permission import Permission  # noqa: F401
from carestaff.models.role import Role, RolePermission  # noqa: F401
from carestaff.models.user_role import UserRole  # noqa: F401
from carestaff.models.shift_type import ShiftType  # noqa: F401
from carestaff.models.shift_template import ShiftTemplate  # noqa: F401
from carestaff.models.payment_config import ShiftPaymentConfig  # noqa: F401
from carestaff.models.staff_rate import StaffRate  # noqa: F401
from carestaff.models.availability import EmployeeAvailability, AvailabilityEntry  # noqa: F401
from carestaff.models.scheduling_rule import SchedulingRule  # noqa: F401
from carestaff.models.rotation_pattern import ShiftRotationPattern  # noqa: F401
from carestaff.models.device_token import DeviceToken  # noqa: F401
