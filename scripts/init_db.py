"""
Seed demo fleet data (idempotent).

Usage:
  python scripts/init_db.py [--with-demo-customer]
"""

import argparse
import os
import sys
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.carrental.config import load_settings
from app.carrental.modules.customers.service import create_customer, find_customer_by_email
from app.carrental.modules.fleet.models import CarStatus
from app.carrental.modules.fleet.service import ensure_car
from app.carrental.modules.rentals.service import count_active_rentals, has_active_rental, open_rental

DEMO_CARS = (
    {"brand": "Toyota", "model": "Corolla", "year": 2022, "license_plate": "CR-1001", "color": "White", "mileage": 18250},
    {"brand": "Volkswagen", "model": "Golf", "year": 2021, "license_plate": "CR-1002", "color": "Blue", "mileage": 32410},
    {"brand": "Tesla", "model": "Model 3", "year": 2023, "license_plate": "CR-1003", "color": "Black", "mileage": 9120},
    {"brand": "Ford", "model": "Transit", "year": 2020, "license_plate": "CR-1004", "color": None, "mileage": 61004},
)

DEMO_CUSTOMER = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "phone": "+44 20 7946 0000",
    "address": None,
}


@contextmanager
def _session_scope(database_url: str):
    engine = create_engine(database_url, future=True)
    if database_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _enable_sqlite_fks(dbapi_connection, connection_record):  # type: ignore[no-redef]
            dbapi_connection.execute("PRAGMA foreign_keys=ON")

    sm = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False, expire_on_commit=False, future=True)
    s: Session = sm()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
        engine.dispose()


def seed_only(*, database_url: str | None = None, with_demo_customer: bool = False) -> None:
    """
    Seed demo cars keyed by license plate. Never modifies existing rows.
    """
    db_url = database_url or load_settings().database_url

    with _session_scope(db_url) as s:
        cars = [ensure_car(s, **spec) for spec in DEMO_CARS]
        print(f"Fleet: {len(cars)} demo cars present.", flush=True)

        if with_demo_customer:
            customer = find_customer_by_email(s, DEMO_CUSTOMER["email"])
            if customer is None:
                customer = create_customer(s, DEMO_CUSTOMER)
            available = next((c for c in cars if c.status == CarStatus.AVAILABLE), None)
            if available is not None and not has_active_rental(s, customer.id):
                open_rental(s, customer_id=customer.id, car_id=available.id)
            print(f"Demo customer id={customer.id}", flush=True)

        print(f"Active rentals: {count_active_rentals(s)}", flush=True)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo car-rental data.")
    parser.add_argument("--with-demo-customer", action="store_true", help="also seed one customer with an ACTIVE rental")
    parser.add_argument("--database-url", default=os.environ.get("DATABASE_URL"))
    args = parser.parse_args()
    seed_only(database_url=args.database_url, with_demo_customer=args.with_demo_customer)


if __name__ == "__main__":
    main()
