from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from dreamcatcher.db.database import get_session
from dreamcatcher.errors import NotFoundError, ValidationError
from dreamcatcher.schemas import (
    BookingCreated,
    BookingSubmission,
    ClientBookingUpdate,
    ClientLogin,
    KeyValidationRequest,
    KeyValidationResponse,
    TokenResponse,
)
from dreamcatcher.security.dependencies import ClientPrincipal, require_client
from dreamcatcher.services.access_key_service import AccessKeyService, get_access_key_service
from dreamcatcher.services.auth_service import AuthService, get_auth_service
from dreamcatcher.services.booking_service import BookingPayload, BookingService, get_booking_service

router = APIRouter(tags=["booking"])


@router.post("/validate-key", response_model=KeyValidationResponse)
async def validate_key(
    payload: KeyValidationRequest,
    db: AsyncSession = Depends(get_session),
    access_key_service: AccessKeyService = Depends(get_access_key_service),
) -> KeyValidationResponse:
    if not payload.key or not payload.key.strip():
        raise ValidationError("Access key is required.")

    if not await access_key_service.validate_key(db, payload.key):
        raise NotFoundError("Invalid access key.")
    return KeyValidationResponse(valid=True, message="Key is valid.")


@router.post("/bookings", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingSubmission,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingCreated:
    booking = await booking_service.create_booking(db, BookingPayload(**payload.model_dump()))
    return BookingCreated(
        message="Booking created successfully.",
        booking_id=booking.id,
        client_id=booking.client_code,
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: ClientLogin,
    db: AsyncSession = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    token = await auth_service.login_client(db, payload.client_id, payload.password)
    return TokenResponse(token=token)


@router.get("/my-booking")
async def get_my_booking(
    client: ClientPrincipal = Depends(require_client),
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> Dict[str, Any]:
    booking = await booking_service.get_by_client_code(db, client.client_code)
    return booking.to_dict()


@router.patch("/my-booking")
async def update_my_booking(
    payload: ClientBookingUpdate,
    client: ClientPrincipal = Depends(require_client),
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> Dict[str, Any]:
    booking = await booking_service.update_own_booking(
        db,
        client.client_code,
        payload.model_dump(exclude_unset=True),
    )
    return {"message": "Booking details updated.", "booking": booking.to_dict()}
