from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.carrental.models import Base, utcnow
from app.carrental.modules.customers.models import Customer
from app.carrental.modules.fleet.models import Car


class RentalStatus(str, enum.Enum):
    """Rental status. Only ACTIVE rentals hold a car."""
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Rental(Base):
    __tablename__ = "rentals"
    __table_args__ = (
        Index("idx_rentals_customer_id_status", "customer_id", "status"),
        Index("idx_rentals_car_id", "car_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    car_id: Mapped[int] = mapped_column(ForeignKey("cars.id", ondelete="RESTRICT"), nullable=False)

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    start_mileage: Mapped[int] = mapped_column(Integer, nullable=False)
    end_mileage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[RentalStatus] = mapped_column(
        SQLEnum(RentalStatus, name="rental_status"), nullable=False, default=RentalStatus.ACTIVE
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)

    customer: Mapped[Customer] = relationship("Customer", back_populates="rentals")
    car: Mapped[Car] = relationship("Car", back_populates="rentals", lazy="joined", innerjoin=True)
