from beach_admin.models.user import User, UserRole
from beach_admin.models.beach import Beach, BeachStatus, beach_admins
from beach_admin.models.zone import Zone, Sunbed, SunbedStatus
from beach_admin.models.booking import Booking, BookingStatus, PaymentStatus, booking_sunbeds
from beach_admin.models.finance import Finance, FinanceType, Payout, PayoutStatus, Alert, AlertType

__all__ = [
    "User", "UserRole",
    "Beach", "BeachStatus", "beach_admins",
    "Zone", "Sunbed", "SunbedStatus",
    "Booking", "BookingStatus", "PaymentStatus", "booking_sunbeds",
    "Finance", "FinanceType", "Payout", "PayoutStatus", "Alert", "AlertType",
]
