from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Index, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.carrental.models import Base, utcnow

if TYPE_CHECKING:
    from app.carrental.modules.rentals.models import Rental


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("email", name="uq_customers_email"),
        Index("idx_customers_last_name", "last_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=utcnow)

    # Inactive rental history goes with the customer; active rentals block the delete upstream.
    rentals: Mapped[list["Rental"]] = relationship(
        "Rental",
        back_populates="customer",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="select",
    )


# Case-insensitive uniqueness backstop; the plain unique constraint above covers exact matches.
Index("uq_customers_email_lower", func.lower(Customer.email), unique=True)
