"""SQLAlchemy ORM model for storage Racks.

``occupied`` is bounded by ``0 <= occupied <= capacity`` at the database
level as well; every write path also checks it before writing.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pipevault.db.base import Base
from pipevault.domain.mixins import TimestampMixin


class Rack(Base, TimestampMixin):
    __tablename__ = "racks"
    __table_args__ = (
        CheckConstraint("occupied >= 0", name="racks_occupied_non_negative"),
        CheckConstraint("occupied <= capacity", name="racks_capacity_check"),
    )

    # Yard-style identifiers, e.g. "A-A1-01"
    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    area: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Measured in joints
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    occupied: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    @property
    def available(self) -> int:
        return self.capacity - self.occupied
