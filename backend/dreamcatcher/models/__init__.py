from .access_key import AccessKey
from .admin import Admin
from .booking import Booking

__all__ = [
    "AccessKey",
    "Admin",
    "Booking",
]
