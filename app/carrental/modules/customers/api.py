from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from app.carrental.db import db_session, unit_of_work
from app.carrental.errors import ValidationError
from app.carrental.modules.customers.serializers import customer_detail_to_dict, customer_to_dict
from app.carrental.modules.customers.service import (
    create_customer,
    delete_customer,
    get_customer,
    list_customers,
    update_customer,
)
from app.carrental.modules.rentals.service import rentals_for_customer

bp = Blueprint("customers_api", __name__)

# Largest value an INTEGER primary key holds on Postgres.
MAX_CUSTOMER_ID = 2_147_483_647


def _parse_customer_id(raw: str) -> int:
    # Only plain positive decimals; "1abc", "-1", "0", "1.5" and out-of-range ids are rejected before touching the DB.
    if not raw.isascii() or not raw.isdigit() or len(raw) > len(str(MAX_CUSTOMER_ID)):
        raise ValidationError("Invalid customer ID")
    if not 1 <= int(raw) <= MAX_CUSTOMER_ID:
        raise ValidationError("Invalid customer ID")
    return int(raw)


def _json_payload() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


@bp.get("/customers")
def customers_list():
    s = db_session()
    q = request.args.get("q")
    return jsonify([customer_to_dict(c) for c in list_customers(s, q)])


@bp.post("/customers")
def customers_create():
    s = db_session()
    payload = _json_payload()
    with unit_of_work(s):
        c = create_customer(s, payload)
    return jsonify(customer_to_dict(c)), 201


@bp.get("/customers/<customer_id>")
def customer_detail(customer_id: str):
    cid = _parse_customer_id(customer_id)
    s = db_session()
    c = get_customer(s, cid)
    rentals = rentals_for_customer(s, c.id)
    return jsonify(customer_detail_to_dict(c, rentals))


@bp.put("/customers/<customer_id>")
def customer_update(customer_id: str):
    cid = _parse_customer_id(customer_id)
    s = db_session()
    payload = _json_payload()
    with unit_of_work(s):
        c = update_customer(s, cid, payload)
    return jsonify(customer_to_dict(c))


@bp.delete("/customers/<customer_id>")
def customer_delete(customer_id: str):
    cid = _parse_customer_id(customer_id)
    s = db_session()
    with unit_of_work(s):
        delete_customer(s, cid)
    return jsonify({"success": True})
