from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import Date, DateTime, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from dreamcatcher.db.base import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")

CLIENT_EDITABLE_FIELDS = ("bride_address", "groom_address", "locations", "schedule", "additional_info")
ADMIN_EDITABLE_FIELDS = (
    "bride_name",
    "groom_name",
    "email",
    "phone_number",
    "wedding_date",
) + CLIENT_EDITABLE_FIELDS


class Booking(Base):
    __tablename__ = "bookings"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    client_code: Mapped[str] = mapped_column(String(4), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    access_key: Mapped[str] = mapped_column(String(255), nullable=False)
    package_name: Mapped[str | None] = mapped_column(String(255))
    total_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    selected_items: Mapped[Any] = mapped_column(JSONType, nullable=True)
    bride_name: Mapped[str | None] = mapped_column(String(255))
    groom_name: Mapped[str | None] = mapped_column(String(255))
    wedding_date: Mapped[date | None] = mapped_column(Date)
    bride_address: Mapped[str | None] = mapped_column(Text)
    groom_address: Mapped[str | None] = mapped_column(Text)
    locations: Mapped[str | None] = mapped_column(Text)
    schedule: Mapped[str | None] = mapped_column(Text)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(255), nullable=False)
    additional_info: Mapped[str | None] = mapped_column(Text)
    discount_code: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        # password_hash stays server-side
        return {
            "id": self.id,
            "client_id": self.client_code,
            "access_key": self.access_key,
            "package_name": self.package_name,
            "total_price": str(self.total_price) if self.total_price is not None else None,
            "selected_items": self.selected_items,
            "bride_name": self.bride_name,
            "groom_name": self.groom_name,
            "wedding_date": self.wedding_date.isoformat() if self.wedding_date else None,
            "bride_address": self.bride_address,
            "groom_address": self.groom_address,
            "locations": self.locations,
            "schedule": self.schedule,
            "email": self.email,
            "phone_number": self.phone_number,
            "additional_info": self.additional_info,
            "discount_code": self.discount_code,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def to_summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "client_id": self.client_code,
            "bride_name": self.bride_name,
            "groom_name": self.groom_name,
            "wedding_date": self.wedding_date.isoformat() if self.wedding_date else None,
            "total_price": str(self.total_price) if self.total_price is not None else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
