from __future__ import annotations

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session, joinedload

from app.carrental.errors import ConflictError, NotFoundError
from app.carrental.models import utcnow
from app.carrental.modules.customers.models import Customer
from app.carrental.modules.fleet.models import Car, CarStatus
from app.carrental.modules.rentals.models import Rental, RentalStatus


def has_active_rental(s: Session, customer_id: int) -> bool:
    stmt = select(
        exists().where(Rental.customer_id == customer_id, Rental.status == RentalStatus.ACTIVE)
    )
    return bool(s.execute(stmt).scalar())


def count_active_rentals(s: Session) -> int:
    stmt = select(func.count(Rental.id)).where(Rental.status == RentalStatus.ACTIVE)
    return int(s.execute(stmt).scalar() or 0)


def rentals_for_customer(s: Session, customer_id: int) -> list[Rental]:
    """Newest rental first, each with its car loaded."""
    stmt = (
        select(Rental)
        .options(joinedload(Rental.car))
        .where(Rental.customer_id == customer_id)
        .order_by(Rental.start_date.desc(), Rental.id.desc())
    )
    return list(s.execute(stmt).scalars().unique().all())


def open_rental(s: Session, *, customer_id: int, car_id: int) -> Rental:
    """
    Start an ACTIVE rental. Locks the customer row first, the same row the
    customer delete guard locks, so the two cannot interleave.
    """
    customer = s.execute(select(Customer).where(Customer.id == customer_id).with_for_update()).scalars().one_or_none()
    if customer is None:
        raise NotFoundError("Customer not found")
    car = s.execute(select(Car).where(Car.id == car_id).with_for_update()).scalars().one_or_none()
    if car is None:
        raise NotFoundError("Car not found")
    if car.status != CarStatus.AVAILABLE:
        raise ConflictError("Car is not available")

    now = utcnow()
    r = Rental(
        customer_id=customer.id,
        car_id=car.id,
        start_date=now,
        start_mileage=car.mileage,
        status=RentalStatus.ACTIVE,
        created_at=now,
        updated_at=now,
    )
    car.status = CarStatus.RENTED
    car.updated_at = now
    s.add(r)
    s.flush()
    return r


def close_rental(s: Session, rental_id: int, *, status: RentalStatus = RentalStatus.COMPLETED, end_mileage: int | None = None) -> Rental:
    """Finish an ACTIVE rental as COMPLETED or CANCELLED and release its car."""
    if status == RentalStatus.ACTIVE:
        raise ValueError("close_rental needs a terminal status")
    r = s.execute(select(Rental).where(Rental.id == rental_id).with_for_update()).scalars().one_or_none()
    if r is None:
        raise NotFoundError("Rental not found")
    if r.status != RentalStatus.ACTIVE:
        raise ConflictError("Rental is not active")
    if end_mileage is not None and end_mileage < r.start_mileage:
        raise ConflictError("End mileage cannot be lower than start mileage")

    now = utcnow()
    r.status = status
    r.end_date = now
    r.end_mileage = end_mileage
    r.updated_at = now
    car = r.car
    if end_mileage is not None:
        car.mileage = end_mileage
    car.status = CarStatus.AVAILABLE
    car.updated_at = now
    s.flush()
    return r
