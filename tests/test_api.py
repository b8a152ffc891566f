"""
HTTP-level tests: routing, auth, status codes and error bodies.
"""

from fastapi.testclient import TestClient

from barbershop import schedules
from barbershop.appointments import SLOT_TAKEN_MESSAGE


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_register_login_and_me(client):
    body = {"email": "kim@example.com", "name": "Kim", "password": "s3cret-pass", "role": "customer"}
    response = client.post("/users", json=body)
    assert response.status_code == 201
    assert response.json()["role"] == "customer"

    assert client.post("/users", json=body).status_code == 409
    assert client.post("/users", json=dict(body, email=" Kim@Example.com")).status_code == 409

    bad = client.post("/auth/login", data={"username": "kim@example.com", "password": "wrong-pass"})
    assert bad.status_code == 401

    token = client.post("/auth/login", data={"username": "KIM@example.com", "password": "s3cret-pass"})
    assert token.status_code == 200
    headers = {"Authorization": f"Bearer {token.json()['access_token']}"}

    me = client.get("/me", headers=headers).json()
    assert (me["email"], me["name"]) == ("kim@example.com", "Kim")


def test_me_requires_a_valid_token(client):
    assert client.get("/me").status_code == 401
    assert client.get("/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_list_barbers(client, barber, other_barber, customer):
    assert [b["name"] for b in client.get("/barbers").json()] == ["Alex", "Sam"]


def test_availability(client, barber, make_schedule, haircut):
    make_schedule(barber.id, start="09:00", end="10:00")

    response = client.get(f"/barbers/{barber.id}/availability", params={"date": "2024-06-01", "service_id": "haircut"})

    assert response.status_code == 200
    assert response.json() == {
        "barber_id": barber.id,
        "date": "2024-06-01",
        "service_id": "haircut",
        "available_starts": ["09:00", "09:20"],
    }


def test_availability_rejects_malformed_date(client, barber):
    response = client.get(f"/barbers/{barber.id}/availability", params={"date": "2024-13-01"})
    assert response.status_code == 400
    assert "YYYY-MM-DD" in response.json()["detail"]


def test_book_then_conflict(client, auth_headers, barber, customer, other_customer, haircut):
    body = {
        "barber_id": barber.id,
        "appointment_date": "2024-06-01T10:00:00Z",
        "service_id": "haircut",
        "price": "30.00",
    }

    created = client.post("/appointments", json=body, headers=auth_headers(customer))
    assert created.status_code == 201
    data = created.json()
    assert data["service_id"] == "haircut"
    assert data["price"] == 30.0
    assert data["duration"] == 40
    assert data["barber"] == {"id": barber.id, "name": "Sam"}

    taken = client.post("/appointments", json=body, headers=auth_headers(other_customer))
    assert taken.status_code == 409
    assert taken.json() == {"detail": SLOT_TAKEN_MESSAGE}

    mine = client.get("/appointments/me", headers=auth_headers(customer)).json()
    assert [a["id"] for a in mine] == [data["id"]]


def test_booking_rule_violation_is_422(client, auth_headers, barber, customer):
    body = {"barber_id": barber.id, "appointment_date": "2024-06-01T10:10:00Z"}
    response = client.post("/appointments", json=body, headers=auth_headers(customer))
    assert response.status_code == 422
    assert response.json()["detail"] == "Appointments must start at :00, :20, or :40 past the hour"


def test_booking_with_malformed_timestamp_is_400(client, auth_headers, barber, customer):
    body = {"barber_id": barber.id, "appointment_date": "first of June"}
    assert client.post("/appointments", json=body, headers=auth_headers(customer)).status_code == 400


def test_only_customers_book(client, auth_headers, barber, other_barber):
    body = {"barber_id": other_barber.id, "appointment_date": "2024-06-01T10:00:00Z"}
    assert client.post("/appointments", json=body, headers=auth_headers(barber)).status_code == 403


def test_customer_cancels(client, auth_headers, barber, customer, other_customer):
    body = {"barber_id": barber.id, "appointment_date": "2024-06-01T10:00:00Z"}
    appointment_id = client.post("/appointments", json=body, headers=auth_headers(customer)).json()["id"]

    assert client.delete(f"/appointments/{appointment_id}", headers=auth_headers(other_customer)).status_code == 403
    assert client.delete("/appointments/9999", headers=auth_headers(customer)).status_code == 404

    response = client.delete(f"/appointments/{appointment_id}", headers=auth_headers(customer))
    assert response.status_code == 200
    assert client.get("/appointments/me", headers=auth_headers(customer)).json() == []


def test_barber_cancels(client, auth_headers, barber, customer):
    body = {"barber_id": barber.id, "appointment_date": "2024-06-01T10:00:00Z"}
    appointment_id = client.post("/appointments", json=body, headers=auth_headers(customer)).json()["id"]

    bad = client.patch(
        f"/barbers/me/appointments/{appointment_id}/status", json={"status": "done"}, headers=auth_headers(barber)
    )
    assert bad.status_code == 422

    response = client.patch(
        f"/barbers/me/appointments/{appointment_id}/status", json={"status": "cancelled"}, headers=auth_headers(barber)
    )
    assert response.json()["status"] == "cancelled"

    cancelled = client.get("/barbers/me/appointments", params={"status": "cancelled"}, headers=auth_headers(barber))
    assert [a["id"] for a in cancelled.json()] == [appointment_id]


def test_schedule_endpoints(client, auth_headers, barber, customer):
    headers = auth_headers(barber)
    body = {"date": "2024-06-01", "start_time": "09:00", "end_time": "17:00"}

    created = client.post("/barbers/me/schedules", json=body, headers=headers)
    assert created.status_code == 201
    schedule_id = created.json()["id"]

    assert client.post("/barbers/me/schedules", json=body, headers=headers).status_code == 409
    assert client.post("/barbers/me/schedules", json=body, headers=auth_headers(customer)).status_code == 403

    malformed = dict(body, date="2024-06-02", start_time="9am")
    assert client.post("/barbers/me/schedules", json=malformed, headers=headers).status_code == 400
    backwards = dict(body, date="2024-06-02", start_time="18:00")
    assert client.post("/barbers/me/schedules", json=backwards, headers=headers).status_code == 422

    updated = client.patch(f"/barbers/me/schedules/{schedule_id}", json={"end_time": "12:00"}, headers=headers)
    assert updated.json()["end_time"] == "12:00"

    public = client.get(f"/barbers/{barber.id}/schedule", params={"date": "2024-06-01"}).json()
    assert public["schedule"]["end_time"] == "12:00"

    upserted = client.put("/barbers/me/schedule", json=dict(body, start_time="10:00"), headers=headers)
    assert upserted.json()["id"] == schedule_id
    assert upserted.json()["start_time"] == "10:00"

    assert client.delete(f"/barbers/me/schedules/{schedule_id}", headers=headers).status_code == 200
    empty = client.get(f"/barbers/{barber.id}/schedule", params={"date": "2024-06-01"}).json()
    assert empty == {"schedule": None}


def test_service_endpoints(client, auth_headers, barber, customer):
    headers = auth_headers(barber)
    body = {"id": "buzz_cut", "name": "Buzz Cut", "price": "20.00", "duration": 20}

    assert client.post("/services", json=body, headers=auth_headers(customer)).status_code == 403
    assert client.post("/services", json=body, headers=headers).status_code == 201
    assert client.post("/services", json=body, headers=headers).status_code == 409
    assert client.post("/services", json=dict(body, id="odd", duration=30), headers=headers).status_code == 422

    assert client.delete("/services/buzz_cut", headers=headers).status_code == 200
    assert client.get("/services").json() == []
    assert [s["id"] for s in client.get("/services/all", headers=headers).json()] == ["buzz_cut"]

    # re-creating an inactive service restores it
    restored = client.post("/services", json=dict(body, price="22.00"), headers=headers)
    assert restored.status_code == 200
    assert restored.json()["price"] == 22.0
    assert restored.json()["is_active"] is True

    patched = client.patch("/services/buzz_cut", json={"name": "Buzz"}, headers=headers)
    assert patched.json()["name"] == "Buzz"
    assert client.post("/services/buzz_cut/restore", headers=headers).status_code == 422
    assert client.post("/services/missing/restore", headers=headers).status_code == 404


def test_unexpected_error_is_500(client, barber, monkeypatch):
    from barbershop.main import app

    def boom(*args, **kwargs):
        raise RuntimeError("database on fire")

    monkeypatch.setattr(schedules, "get_schedule", boom)
    unsafe = TestClient(app, raise_server_exceptions=False)

    response = unsafe.get(f"/barbers/{barber.id}/schedule", params={"date": "2024-06-01"})
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
