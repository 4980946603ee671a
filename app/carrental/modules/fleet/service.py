from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.carrental.models import utcnow
from app.carrental.modules.fleet.models import Car, CarStatus


def get_car_by_plate(s: Session, license_plate: str) -> Car | None:
    plate = (license_plate or "").strip().upper()
    return s.execute(select(Car).where(Car.license_plate == plate)).scalars().one_or_none()


def ensure_car(
    s: Session,
    *,
    brand: str,
    model: str,
    year: int,
    license_plate: str,
    color: str | None = None,
    mileage: int = 0,
) -> Car:
    """Idempotent by license plate; an existing car is returned untouched."""
    if mileage < 0:
        raise ValueError("mileage must be non-negative")
    car = get_car_by_plate(s, license_plate)
    if car:
        return car
    now = utcnow()
    car = Car(
        brand=brand.strip(),
        model=model.strip(),
        year=year,
        license_plate=license_plate.strip().upper(),
        color=(color or "").strip() or None,
        mileage=mileage,
        status=CarStatus.AVAILABLE,
        created_at=now,
        updated_at=now,
    )
    s.add(car)
    s.flush()
    return car
