from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from dreamcatcher.db.database import get_session
from dreamcatcher.schemas import AccessKeyCreate, AdminBookingUpdate, AdminLogin, TokenResponse
from dreamcatcher.security.dependencies import require_admin
from dreamcatcher.services.access_key_service import AccessKeyService, get_access_key_service
from dreamcatcher.services.auth_service import AuthService, get_auth_service
from dreamcatcher.services.booking_service import BookingService, get_booking_service

router = APIRouter(prefix="/admin", tags=["admin"])
protected = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/login", response_model=TokenResponse)
async def admin_login(
    payload: AdminLogin,
    db: AsyncSession = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    token = await auth_service.login_admin(db, payload.email, payload.password)
    return TokenResponse(token=token)


@protected.get("/bookings")
async def list_bookings(
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> list[Dict[str, Any]]:
    bookings = await booking_service.list_bookings(db)
    return [booking.to_summary() for booking in bookings]


@protected.get("/bookings/{booking_id}")
async def get_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> Dict[str, Any]:
    booking = await booking_service.get_booking(db, booking_id)
    return booking.to_dict()


@protected.patch("/bookings/{booking_id}")
async def update_booking(
    booking_id: int,
    payload: AdminBookingUpdate,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> Dict[str, Any]:
    booking = await booking_service.update_booking(db, booking_id, payload.model_dump())
    return {"message": "Booking updated.", "booking": booking.to_dict()}


@protected.get("/access-keys")
async def list_access_keys(
    db: AsyncSession = Depends(get_session),
    access_key_service: AccessKeyService = Depends(get_access_key_service),
) -> list[Dict[str, Any]]:
    access_keys = await access_key_service.list_access_keys(db)
    return [access_key.to_dict() for access_key in access_keys]


@protected.post("/access-keys", status_code=status.HTTP_201_CREATED)
async def create_access_key(
    payload: AccessKeyCreate,
    db: AsyncSession = Depends(get_session),
    access_key_service: AccessKeyService = Depends(get_access_key_service),
) -> Dict[str, Any]:
    access_key = await access_key_service.create_access_key(db, payload.owner_label)
    return access_key.to_dict()


@protected.delete("/access-keys/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_access_key(
    key_id: int,
    db: AsyncSession = Depends(get_session),
    access_key_service: AccessKeyService = Depends(get_access_key_service),
) -> Response:
    await access_key_service.delete_access_key(db, key_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


router.include_router(protected)
