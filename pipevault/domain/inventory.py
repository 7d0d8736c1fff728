"""SQLAlchemy ORM model for individual pipe joints held in inventory."""

from __future__ import annotations

import enum
from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from pipevault.db.base import Base
from pipevault.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class InventoryStatus(str, enum.Enum):
    PENDING_DELIVERY = "PENDING_DELIVERY"
    IN_STORAGE = "IN_STORAGE"
    PICKED_UP = "PICKED_UP"
    IN_TRANSIT = "IN_TRANSIT"


class InventoryItem(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "inventory"

    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    storage_request_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("storage_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    trucking_load_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("trucking_loads.id", ondelete="SET NULL"), nullable=True, index=True
    )
    rack_id: Mapped[Optional[str]] = mapped_column(
        String(50), ForeignKey("racks.id", ondelete="SET NULL"), nullable=True, index=True
    )

    status: Mapped[str] = mapped_column(
        String(20), default=InventoryStatus.PENDING_DELIVERY.value, nullable=False, index=True
    )
    length_ft: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    weight_lbs: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
