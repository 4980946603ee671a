from __future__ import annotations

from datetime import datetime
from typing import Any

from app.carrental.modules.customers.models import Customer
from app.carrental.modules.fleet.models import Car
from app.carrental.modules.rentals.models import Rental


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def customer_to_dict(c: Customer) -> dict[str, Any]:
    return {
        "id": c.id,
        "firstName": c.first_name,
        "lastName": c.last_name,
        "email": c.email,
        "phone": c.phone,
        "address": c.address,
        "createdAt": _iso(c.created_at),
        "updatedAt": _iso(c.updated_at),
    }


def car_to_dict(car: Car) -> dict[str, Any]:
    return {
        "id": car.id,
        "brand": car.brand,
        "model": car.model,
        "year": car.year,
        "licensePlate": car.license_plate,
        "color": car.color,
        "mileage": car.mileage,
        "status": car.status.value,
    }


def rental_to_dict(r: Rental) -> dict[str, Any]:
    return {
        "id": r.id,
        "carId": r.car_id,
        "startDate": _iso(r.start_date),
        "endDate": _iso(r.end_date),
        "startMileage": r.start_mileage,
        "endMileage": r.end_mileage,
        "status": r.status.value,
        "car": car_to_dict(r.car),
    }


def customer_detail_to_dict(c: Customer, rentals: list[Rental]) -> dict[str, Any]:
    data = customer_to_dict(c)
    data["rentals"] = [rental_to_dict(r) for r in rentals]
    return data
