"""SQLAlchemy ORM models for Trucking Loads and their attached Documents."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pipevault.db.base import Base
from pipevault.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class LoadDirection(str, enum.Enum):
    INBOUND = "INBOUND"
    OUTBOUND = "OUTBOUND"


class LoadStatus(str, enum.Enum):
    NEW = "NEW"
    APPROVED = "APPROVED"
    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    IN_TRANSIT = "IN_TRANSIT"
    ARRIVED = "ARRIVED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TruckingLoad(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "trucking_loads"

    storage_request_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("storage_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    direction: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    sequence_number: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=LoadStatus.NEW.value, nullable=False, index=True
    )

    scheduled_slot_start: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    scheduled_slot_end: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    total_joints_planned: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    total_joints_completed: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    total_weight_lbs_planned: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    total_weight_lbs_completed: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )

    trucking_company: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    storage_request: Mapped["StorageRequest"] = relationship(
        back_populates="loads", lazy="noload"
    )
    documents: Mapped[List["TruckingDocument"]] = relationship(
        back_populates="trucking_load", lazy="noload"
    )


class TruckingDocument(Base, UUIDPrimaryKeyMixin):
    """A file uploaded against a load (manifest, bill of lading, photo)."""

    __tablename__ = "trucking_documents"

    trucking_load_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("trucking_loads.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    storage_path: Mapped[str] = mapped_column(String(500), nullable=False)
    document_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # AI-extracted manifest rows, if the document has been processed
    parsed_payload: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    uploaded_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )

    trucking_load: Mapped["TruckingLoad"] = relationship(
        back_populates="documents", lazy="noload"
    )
