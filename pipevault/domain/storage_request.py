"""SQLAlchemy ORM model for Storage Requests (a customer "project")."""

from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pipevault.db.base import Base
from pipevault.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class RequestStatus(str, enum.Enum):
    """Request lifecycle.

    PENDING -> APPROVED -> (operational states) -> COMPLETED
    PENDING -> REJECTED
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"


class StorageRequest(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "storage_requests"

    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reference_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(
        String(20), default=RequestStatus.PENDING.value, nullable=False, index=True
    )

    # Requester identity
    user_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    submitted_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Pipe details from the original submission
    pipe_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    pipe_grade: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    outer_diameter: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 3), nullable=True)
    connection_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    total_joints_estimate: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    storage_start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    estimated_duration_months: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    special_handling: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Written only by the approval workflow
    assigned_rack_ids: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    approved_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    company: Mapped["Company"] = relationship(back_populates="requests", lazy="noload")
    loads: Mapped[List["TruckingLoad"]] = relationship(
        back_populates="storage_request", lazy="noload"
    )

