"""HTTP tests for the /customers endpoints."""
import pytest
from sqlalchemy.exc import OperationalError

from app.carrental import create_app
from app.carrental.db import session_scope
from app.carrental.models import Base, Car, Rental, RentalStatus
from app.carrental.modules.customers import api as customers_api


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        s.add(Car(brand="Toyota", model="Corolla", year=2022, license_plate="CR-1001", color="White", mileage=18250))
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


ADA = {"firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com"}


def _post(client, body):
    return client.post("/customers", json=body)


def test_create_customer_201(client):
    r = _post(client, {**ADA, "phone": "555-0100"})
    assert r.status_code == 201
    body = r.json
    assert body["id"] == 1
    assert body["firstName"] == "Ada"
    assert body["lastName"] == "Lovelace"
    assert body["email"] == "ada@example.com"
    assert body["phone"] == "555-0100"
    assert body["address"] is None
    assert body["createdAt"] and body["updatedAt"]


def test_create_missing_fields_400(client):
    r = _post(client, {"firstName": "Ada", "email": "ada@example.com"})
    assert r.status_code == 400
    assert r.json == {"message": "First name, last name and email are required"}


def test_create_non_object_body_400(client):
    r = client.post("/customers", data="not json", content_type="application/json")
    assert r.status_code == 400
    assert "message" in r.json

    r = client.post("/customers", json=["Ada"])
    assert r.status_code == 400


def test_create_duplicate_email_400(client):
    assert _post(client, ADA).status_code == 201
    r = _post(client, {**ADA, "firstName": "Augusta"})
    assert r.status_code == 400
    assert r.json == {"message": "A customer with this email already exists"}


def test_list_customers_with_query(client):
    _post(client, ADA)
    _post(client, {"firstName": "Charles", "lastName": "Babbage", "email": "charles@example.com"})
    _post(client, {"firstName": "Grace", "lastName": "Hopper", "email": "grace@navy.mil"})

    r = client.get("/customers")
    assert r.status_code == 200
    assert [c["lastName"] for c in r.json] == ["Babbage", "Hopper", "Lovelace"]

    r = client.get("/customers?q=")
    assert [c["lastName"] for c in r.json] == ["Babbage", "Hopper", "Lovelace"]

    r = client.get("/customers?q=EXAMPLE")
    assert [c["lastName"] for c in r.json] == ["Babbage", "Lovelace"]

    r = client.get("/customers?q=grace")
    assert [c["email"] for c in r.json] == ["grace@navy.mil"]


def test_get_customer(client):
    cid = _post(client, ADA).json["id"]
    r = client.get(f"/customers/{cid}")
    assert r.status_code == 200
    assert r.json["email"] == "ada@example.com"
    assert r.json["rentals"] == []


def test_get_customer_includes_rentals_with_car(app, client):
    cid = _post(client, ADA).json["id"]
    with session_scope(app) as s:
        s.add(Rental(customer_id=cid, car_id=1, start_mileage=18250, status=RentalStatus.ACTIVE))

    r = client.get(f"/customers/{cid}")
    assert r.status_code == 200
    (rental,) = r.json["rentals"]
    assert rental["status"] == "ACTIVE"
    assert rental["startMileage"] == 18250
    assert rental["endDate"] is None
    assert rental["car"]["licensePlate"] == "CR-1001"
    assert rental["car"]["status"] == "AVAILABLE"


@pytest.mark.parametrize("bad_id", ["abc", "0", "-1", "1.5", "1abc", "2147483648", "99999999999999999999", "9" * 5000])
def test_invalid_id_400(client, bad_id):
    for method in (client.get, client.delete):
        r = method(f"/customers/{bad_id}")
        assert r.status_code == 400
        assert r.json == {"message": "Invalid customer ID"}
    r = client.put(f"/customers/{bad_id}", json=ADA)
    assert r.status_code == 400
    assert r.json == {"message": "Invalid customer ID"}


def test_invalid_id_never_touches_store(client, monkeypatch):
    def _boom():
        raise AssertionError("store accessed")

    monkeypatch.setattr(customers_api, "db_session", _boom)
    r = client.get("/customers/abc")
    assert r.status_code == 400


def test_missing_customer_404(client):
    assert client.get("/customers/2147483647").status_code == 404
    assert client.get("/customers/99").status_code == 404
    assert client.get("/customers/99").json == {"message": "Customer not found"}
    assert client.put("/customers/99", json=ADA).status_code == 404
    assert client.delete("/customers/99").status_code == 404


def test_update_customer(client):
    cid = _post(client, {**ADA, "phone": "555-0100"}).json["id"]
    r = client.put(f"/customers/{cid}", json={**ADA, "email": "ada@babbage.dev"})
    assert r.status_code == 200
    assert r.json["email"] == "ada@babbage.dev"
    # phone omitted from the PUT body: cleared
    assert r.json["phone"] is None


def test_update_missing_fields_400(client):
    cid = _post(client, ADA).json["id"]
    r = client.put(f"/customers/{cid}", json={"firstName": "Ada"})
    assert r.status_code == 400
    assert r.json == {"message": "First name, last name and email are required"}


def test_update_duplicate_email_400(client):
    _post(client, ADA)
    cid = _post(client, {"firstName": "Charles", "lastName": "Babbage", "email": "charles@example.com"}).json["id"]
    r = client.put(f"/customers/{cid}", json={"firstName": "Charles", "lastName": "Babbage", "email": "ada@example.com"})
    assert r.status_code == 400
    assert r.json == {"message": "A different customer with this email already exists"}


def test_delete_customer(client):
    cid = _post(client, ADA).json["id"]
    r = client.delete(f"/customers/{cid}")
    assert r.status_code == 200
    assert r.json == {"success": True}
    assert client.get(f"/customers/{cid}").status_code == 404
    assert client.get("/customers").json == []


def test_unexpected_error_is_500_without_detail(client, monkeypatch):
    def _fail(*args, **kwargs):
        raise OperationalError("SELECT secret_table", {}, Exception("connection refused"))

    monkeypatch.setattr(customers_api, "list_customers", _fail)
    r = client.get("/customers")
    assert r.status_code == 500
    assert r.json == {"message": "Something went wrong"}
    assert "secret" not in r.get_data(as_text=True)


def test_store_failure_during_write_is_500_without_detail(client, monkeypatch):
    def _fail(*args, **kwargs):
        raise OperationalError("INSERT INTO customers", {}, Exception("server closed the connection"))

    monkeypatch.setattr(customers_api, "create_customer", _fail)
    r = _post(client, ADA)
    assert r.status_code == 500
    assert r.json == {"message": "Something went wrong"}
    assert "server closed" not in r.get_data(as_text=True)


def test_failed_write_leaves_no_row(app, client, monkeypatch):
    from app.carrental.modules.customers import service

    def _explode(*args, **kwargs):
        raise RuntimeError("disk full")

    # Fails after the INSERT was flushed, inside the same unit of work.
    with monkeypatch.context() as m:
        m.setattr(service.logger, "info", _explode)
        r = _post(client, ADA)
    assert r.status_code == 500

    assert client.get("/customers").json == []


def test_lifecycle_scenario(app, client):
    r = _post(client, ADA)
    assert r.status_code == 201
    assert r.json["id"] == 1

    r = _post(client, ADA)
    assert r.status_code == 400
    assert r.json == {"message": "A customer with this email already exists"}

    r = client.get("/customers/1")
    assert r.status_code == 200
    assert r.json["firstName"] == "Ada"

    r = client.put("/customers/1", json={**ADA, "email": "ada@babbage.dev"})
    assert r.status_code == 200
    assert r.json["email"] == "ada@babbage.dev"

    with session_scope(app) as s:
        rental = Rental(customer_id=1, car_id=1, start_mileage=18250, status=RentalStatus.ACTIVE)
        s.add(rental)
        s.flush()
        rental_id = rental.id

    r = client.delete("/customers/1")
    assert r.status_code == 400
    assert r.json == {"message": "Cannot delete customer with active rentals"}
    assert client.get("/customers/1").status_code == 200

    with session_scope(app) as s:
        s.get(Rental, rental_id).status = RentalStatus.COMPLETED

    r = client.delete("/customers/1")
    assert r.status_code == 200
    assert r.json == {"success": True}


def test_detail_view_loads_customer_once(app, client):
    from sqlalchemy import event

    cid = _post(client, ADA).json["id"]
    engine = app.extensions["sqlalchemy_engine"]
    statements = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", _record)
    try:
        r = client.get(f"/customers/{cid}")
    finally:
        event.remove(engine, "before_cursor_execute", _record)

    assert r.status_code == 200
    assert len([st for st in statements if "FROM customers" in st]) == 1
