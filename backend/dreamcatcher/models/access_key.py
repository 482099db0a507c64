from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from dreamcatcher.db.base import Base


class AccessKey(Base):
    __tablename__ = "access_keys"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    owner_label: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "owner_label": self.owner_label,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
