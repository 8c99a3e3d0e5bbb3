"""SQLAlchemy models for bookit.

All models are imported here so that ``Base.metadata`` knows every table
before ``create_all`` runs. If you add a new model, import it in this file.
"""

from bookit.models.bookable import Bookable, BookableType, PriceCategory
from bookit.models.booking import Booking, BookingHookType, BookingItem
from bookit.models.coupon import Coupon, CouponType
from bookit.models.event import Event
from bookit.models.role import Role, RoleAssignment
from bookit.models.tenant import Tenant

__all__ = [
    "Bookable",
    "BookableType",
    "Booking",
    "BookingHookType",
    "BookingItem",
    "Coupon",
    "CouponType",
    "Event",
    "PriceCategory",
    "Role",
    "RoleAssignment",
    "Tenant",
]
