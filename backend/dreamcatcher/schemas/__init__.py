from .access_key import AccessKeyCreate, KeyValidationRequest, KeyValidationResponse
from .auth import AdminLogin, ClientLogin, TokenResponse
from .booking import (
    AdminBookingUpdate,
    BookingCreated,
    BookingSubmission,
    ClientBookingUpdate,
)

__all__ = [
    "AccessKeyCreate",
    "KeyValidationRequest",
    "KeyValidationResponse",
    "AdminLogin",
    "ClientLogin",
    "TokenResponse",
    "AdminBookingUpdate",
    "BookingCreated",
    "BookingSubmission",
    "ClientBookingUpdate",
]
