from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Enum as SQLEnum, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.carrental.models import Base, utcnow

if TYPE_CHECKING:
    from app.carrental.modules.rentals.models import Rental


class CarStatus(str, enum.Enum):
    """Car availability."""
    AVAILABLE = "AVAILABLE"
    RENTED = "RENTED"
    MAINTENANCE = "MAINTENANCE"
    UNAVAILABLE = "UNAVAILABLE"


class Car(Base):
    __tablename__ = "cars"
    __table_args__ = (
        UniqueConstraint("license_plate", name="uq_cars_license_plate"),
        CheckConstraint("mileage >= 0", name="ck_cars_mileage_non_negative"),
        Index("idx_cars_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    brand: Mapped[str] = mapped_column(Text, nullable=False)
    model: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    license_plate: Mapped[str] = mapped_column(Text, nullable=False)
    color: Mapped[str | None] = mapped_column(Text, nullable=True)
    mileage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[CarStatus] = mapped_column(
        SQLEnum(CarStatus, name="car_status"), nullable=False, default=CarStatus.AVAILABLE
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)

    rentals: Mapped[list["Rental"]] = relationship("Rental", back_populates="car", lazy="select")
