"""
CUSTOMER LIFECYCLE
==================

Invariants owned here (the rest of the app must go through these functions):

- No two customers share an email (case-insensitive). The check below gives a
  friendly error; the unique constraint + lower(email) index are the backstop,
  and an IntegrityError on flush is reported as the same ConflictError.
- A customer with an ACTIVE rental cannot be deleted. The customer row is locked
  before the rentals are read so the check and the delete share a transaction.

Functions flush but never commit; callers wrap them in db.unit_of_work().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.carrental.errors import ConflictError, NotFoundError, ValidationError
from app.carrental.models import utcnow
from app.carrental.modules.customers.models import Customer
from app.carrental.modules.rentals.models import Rental
from app.carrental.modules.rentals.service import has_active_rental, rentals_for_customer

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "First name, last name and email are required"
DUPLICATE_EMAIL_MESSAGE = "A customer with this email already exists"
DUPLICATE_EMAIL_OTHER_MESSAGE = "A different customer with this email already exists"
NOT_FOUND_MESSAGE = "Customer not found"
ACTIVE_RENTALS_MESSAGE = "Cannot delete customer with active rentals"


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return None
    return value.strip() or None


def validate_customer_payload(payload: dict[str, Any]) -> list[FieldError]:
    errs: list[FieldError] = []
    for key, label in (("firstName", "First name"), ("lastName", "Last name"), ("email", "Email")):
        raw = payload.get(key)
        if raw is not None and not isinstance(raw, str):
            errs.append(FieldError(key, f"{label} must be a string."))
        elif not _clean(raw):
            errs.append(FieldError(key, f"{label} is required."))
    for key in ("phone", "address"):
        raw = payload.get(key)
        if raw is not None and not isinstance(raw, str):
            errs.append(FieldError(key, f"{key.capitalize()} must be a string."))
    return errs


def _require_valid(payload: dict[str, Any]) -> None:
    errs = validate_customer_payload(payload)
    if errs:
        logger.debug("Customer payload rejected: %s", ", ".join(f"{e.field}: {e.message}" for e in errs))
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)


def find_customer_by_email(s: Session, email: str, *, exclude_id: int | None = None) -> Customer | None:
    stmt = select(Customer).where(func.lower(Customer.email) == email.lower())
    if exclude_id is not None:
        stmt = stmt.where(Customer.id != exclude_id)
    return s.execute(stmt.limit(1)).scalars().first()


def _flush_or_conflict(s: Session, message: str) -> None:
    try:
        s.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent writer; the store rejected the duplicate.
        s.rollback()
        logger.warning("Customer write rejected by store constraint: %s", e.orig)
        raise ConflictError(message) from e


def get_customer_by_id(s: Session, customer_id: int, *, for_update: bool = False) -> Customer | None:
    stmt = select(Customer).where(Customer.id == customer_id)
    if for_update:
        stmt = stmt.with_for_update()
    return s.execute(stmt).scalars().one_or_none()


def get_customer(s: Session, customer_id: int) -> Customer:
    c = get_customer_by_id(s, customer_id)
    if c is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return c


def list_customer_rentals(s: Session, customer_id: int) -> list[Rental]:
    get_customer(s, customer_id)
    return rentals_for_customer(s, customer_id)


def list_customers(s: Session, q: str | None = None) -> list[Customer]:
    stmt = select(Customer)
    q = (q or "").strip()
    if q:
        # Plain substring match: % and _ in q are literal characters.
        stmt = stmt.where(
            or_(
                Customer.first_name.icontains(q, autoescape=True),
                Customer.last_name.icontains(q, autoescape=True),
                Customer.email.icontains(q, autoescape=True),
            )
        )
    stmt = stmt.order_by(Customer.last_name.asc(), Customer.id.asc())
    return list(s.execute(stmt).scalars().all())


def create_customer(s: Session, payload: dict[str, Any]) -> Customer:
    _require_valid(payload)
    email = _clean(payload.get("email")) or ""

    if find_customer_by_email(s, email) is not None:
        logger.warning("Customer create rejected: email already registered")
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

    now = utcnow()
    c = Customer(
        first_name=_clean(payload.get("firstName")),
        last_name=_clean(payload.get("lastName")),
        email=email,
        phone=_clean(payload.get("phone")),
        address=_clean(payload.get("address")),
        created_at=now,
        updated_at=now,
    )
    s.add(c)
    _flush_or_conflict(s, DUPLICATE_EMAIL_MESSAGE)
    logger.info("Customer created (id=%s)", c.id)
    return c


def update_customer(s: Session, customer_id: int, payload: dict[str, Any]) -> Customer:
    c = get_customer_by_id(s, customer_id, for_update=True)
    if c is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    _require_valid(payload)
    email = _clean(payload.get("email")) or ""

    if find_customer_by_email(s, email, exclude_id=c.id) is not None:
        logger.warning("Customer update rejected (id=%s): email held by another customer", c.id)
        raise ConflictError(DUPLICATE_EMAIL_OTHER_MESSAGE)

    before = {"first_name": c.first_name, "last_name": c.last_name, "email": c.email, "phone": c.phone, "address": c.address}

    # Full overwrite: omitted optional fields are cleared, not kept.
    c.first_name = _clean(payload.get("firstName")) or ""
    c.last_name = _clean(payload.get("lastName")) or ""
    c.email = email
    c.phone = _clean(payload.get("phone"))
    c.address = _clean(payload.get("address"))
    c.updated_at = utcnow()

    _flush_or_conflict(s, DUPLICATE_EMAIL_OTHER_MESSAGE)
    fields_changed = [k for k, v in before.items() if getattr(c, k) != v]
    logger.info("Customer updated (id=%s fields_changed=%s)", c.id, ",".join(fields_changed) or "-")
    return c


def delete_customer(s: Session, customer_id: int) -> None:
    c = get_customer_by_id(s, customer_id, for_update=True)
    if c is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)

    if has_active_rental(s, c.id):
        logger.warning("Customer delete refused (id=%s): active rental exists", c.id)
        raise ConflictError(ACTIVE_RENTALS_MESSAGE)

    s.delete(c)
    s.flush()
    logger.info("Customer deleted (id=%s)", customer_id)
