from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime(timezone=False) columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


# Ensure module models are imported so Base.metadata includes their tables.
# (Kept at bottom to avoid circular imports.)
from app.carrental.modules.customers.models import Customer  # noqa: E402,F401
from app.carrental.modules.fleet.models import Car, CarStatus  # noqa: E402,F401
from app.carrental.modules.rentals.models import Rental, RentalStatus  # noqa: E402,F401
