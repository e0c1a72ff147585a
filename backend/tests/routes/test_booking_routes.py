from datetime import datetime, timedelta, timezone

import pytest

from homefix.models.booking import BookingStatus


@pytest.fixture
def assigned(factory, customer, technician, category):
    return factory.booking(customer, category, status=BookingStatus.ASSIGNED, technician=technician)


def test_identity_headers_required(client):
    response = client.get("/api/bookings")
    assert response.status_code == 401
    assert response.json()["status"] == 401


def test_unknown_role_rejected(client, customer):
    response = client.get("/api/bookings", headers={"X-User-Id": customer.id, "X-User-Role": "ROOT"})
    assert response.status_code == 401


def test_create_booking(client, auth_headers, customer, category):
    scheduled = (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()
    response = client.post(
        "/api/bookings",
        json={"category_id": category.id, "scheduled_at": scheduled, "address": "12 MG Road"},
        headers=auth_headers(customer),
    )
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "PENDING"
    assert body["technician_id"] is None
    assert body["price"] == 500.0


def test_create_booking_needs_a_target(client, auth_headers, customer):
    scheduled = (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()
    response = client.post("/api/bookings", json={"scheduled_at": scheduled}, headers=auth_headers(customer))
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_pin_visible_to_customer_but_not_technician(client, auth_headers, customer, technician, assigned):
    response = client.post(
        f"/api/bookings/{assigned.id}/transitions",
        json={"status": "ACCEPTED"},
        headers=auth_headers(technician),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "ACCEPTED"
    assert response.json()["security_pin"] is None

    as_customer = client.get(f"/api/bookings/{assigned.id}", headers=auth_headers(customer))
    pin = as_customer.json()["security_pin"]
    assert len(pin) == 6 and pin.isdigit()

    as_technician = client.get(f"/api/bookings/{assigned.id}", headers=auth_headers(technician))
    assert as_technician.json()["security_pin"] is None


def test_reject_reports_pending(client, auth_headers, technician, assigned):
    response = client.post(
        f"/api/bookings/{assigned.id}/transitions",
        json={"status": "REJECTED"},
        headers=auth_headers(technician),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "PENDING"
    assert response.json()["technician_id"] is None


def test_invalid_transition_is_problem_json(client, auth_headers, technician, assigned):
    response = client.post(
        f"/api/bookings/{assigned.id}/transitions",
        json={"status": "COMPLETED"},
        headers=auth_headers(technician),
    )
    assert response.status_code == 409
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["code"] == "INVALID_TRANSITION"
    assert body["instance"] == f"/api/bookings/{assigned.id}/transitions"
    assert body["errors"] == {"current_status": "ASSIGNED", "target_status": "COMPLETED"}


def test_unknown_target_is_validation_error(client, auth_headers, technician, assigned):
    response = client.post(
        f"/api/bookings/{assigned.id}/transitions",
        json={"status": "ON_HOLD"},
        headers=auth_headers(technician),
    )
    assert response.status_code == 400


def test_completion_errors_are_422(client, auth_headers, factory, customer, technician, category):
    booking = factory.booking(
        customer, category, status=BookingStatus.IN_PROGRESS, technician=technician, security_pin="424242"
    )
    response = client.post(
        f"/api/bookings/{booking.id}/transitions",
        json={"status": "COMPLETED", "security_pin": "424242", "part_images": ["a.jpg"], "final_amount": 650},
        headers=auth_headers(technician),
    )
    assert response.status_code == 422
    assert response.json()["code"] == "MISSING_EXTRA_REASON"

    response = client.post(
        f"/api/bookings/{booking.id}/transitions",
        json={
            "status": "COMPLETED",
            "security_pin": "424242",
            "part_images": ["a.jpg"],
            "final_amount": 650,
            "extra_reason": "New valve",
        },
        headers=auth_headers(technician),
    )
    assert response.status_code == 200
    assert response.json()["final_amount"] == 650.0
    assert response.json()["extra_reason"] == "New valve"


def test_stranger_gets_403(client, auth_headers, factory, assigned):
    from homefix.core.enums import RoleName

    stranger = factory.user(RoleName.CUSTOMER)
    response = client.get(f"/api/bookings/{assigned.id}", headers=auth_headers(stranger))
    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


def test_missing_booking_404(client, auth_headers, admin):
    response = client.get("/api/bookings/01HMISSINGBOOKINGXXXXXXXXX", headers=auth_headers(admin))
    assert response.status_code == 404


def test_reassign_admin_only(client, auth_headers, technician, technician_2, admin, assigned):
    response = client.put(
        f"/api/bookings/{assigned.id}/technician",
        json={"technician_id": technician_2.id},
        headers=auth_headers(technician),
    )
    assert response.status_code == 403

    response = client.put(
        f"/api/bookings/{assigned.id}/technician",
        json={"technician_id": technician_2.id},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["technician_id"] == technician_2.id


def test_listing_and_stats(client, auth_headers, technician, assigned):
    response = client.get("/api/bookings?status=ASSIGNED", headers=auth_headers(technician))
    assert response.status_code == 200
    assert response.json()["count"] == 1
    assert response.json()["bookings"][0]["id"] == assigned.id

    stats = client.get("/api/bookings/technician/stats", headers=auth_headers(technician))
    assert stats.status_code == 200
    assert stats.json()["completed_jobs"] == 0


@pytest.mark.parametrize("amount", ["abc", "NaN", "Infinity", ""])
def test_non_numeric_final_amount_is_a_validation_error(
    client, auth_headers, factory, customer, technician, category, amount
):
    in_progress = factory.booking(
        customer, category, status=BookingStatus.IN_PROGRESS, technician=technician, security_pin="123456"
    )
    response = client.post(
        f"/api/bookings/{in_progress.id}/transitions",
        json={
            "status": "COMPLETED",
            "security_pin": "123456",
            "final_amount": amount,
            "part_images": ["https://img.example.com/after.jpg"],
        },
        headers=auth_headers(technician),
    )
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert any("final_amount" in error["loc"] for error in body["errors"])

    follow_up = client.get(f"/api/bookings/{in_progress.id}", headers=auth_headers(customer))
    assert follow_up.json()["status"] == "IN_PROGRESS"
