"""SQLAlchemy ORM model for the admin audit log."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime, JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column

from pipevault.db.base import Base


class AuditAction(str, enum.Enum):
    APPROVE_REQUEST = "APPROVE_REQUEST"
    REJECT_REQUEST = "REJECT_REQUEST"
    ADJUST_RACK = "ADJUST_RACK"


class AuditLogEntry(Base):
    __tablename__ = "admin_audit_log"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # Who
    admin_user_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)

    # What
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    entity_id: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    details: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    # When (no updated_at / deleted_at; audit rows are immutable)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
