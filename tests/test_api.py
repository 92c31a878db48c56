from datetime import date

from conftest import make_booking

from app.models import Customer


def _media_payload(code="SRA-RPR-001", **overrides):
    payload = {
        "code": code,
        "name": "Ring Road Unipole",
        "mediaType": "Unipole",
        "state": "Chhattisgarh",
        "district": "Raipur",
        "city": "Raipur",
        "pricePerMonth": 45000,
    }
    payload.update(overrides)
    return payload


def _booking_payload(media_id, customer_id, start="2024-01-10", end="2024-01-20", **overrides):
    payload = {
        "mediaId": media_id,
        "customerId": customer_id,
        "startDate": start,
        "endDate": end,
        "amount": 10000,
        "amountPaid": 10000,
    }
    payload.update(overrides)
    return payload


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_requests_without_token_are_rejected(client):
    response = client.get("/media")
    assert response.status_code in (401, 403)


def test_invalid_token_is_401(client):
    response = client.get("/media", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_viewer_cannot_mutate(client, viewer_headers):
    response = client.post("/media", json=_media_payload(), headers=viewer_headers)

    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


def test_media_crud(client, auth_headers):
    created = client.post("/media", json=_media_payload(code="sra-rpr-007"), headers=auth_headers)
    assert created.status_code == 201
    media = created.json()
    assert media["code"] == "SRA-RPR-007"
    assert media["status"] == "Available"

    duplicate = client.post("/media", json=_media_payload(code="SRA-RPR-007"), headers=auth_headers)
    assert duplicate.status_code == 422
    assert duplicate.json()["code"] == "validation_error"

    updated = client.patch(f"/media/{media['id']}", json={"status": "Maintenance"}, headers=auth_headers)
    assert updated.json()["status"] == "Maintenance"

    assert client.delete(f"/media/{media['id']}", headers=auth_headers).status_code == 200
    missing = client.get(f"/media/{media['id']}", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"


def test_booked_status_cannot_be_set_by_hand(client, auth_headers, media):
    response = client.patch(f"/media/{media.id}", json={"status": "Booked"}, headers=auth_headers)
    assert response.status_code == 422


def test_create_booking_and_conflict(client, auth_headers, media, customer):
    first = client.post("/bookings", json=_booking_payload(media.id, customer.id), headers=auth_headers)
    assert first.status_code == 201
    body = first.json()
    assert body["bookingRef"] == "SRA/2324/1001"
    assert body["paymentStatus"] == "Paid"
    assert body["balance"] == 0
    assert body["version"] == 1

    clash = client.post(
        "/bookings",
        json=_booking_payload(media.id, customer.id, start="2024-01-15", end="2024-01-25"),
        headers=auth_headers,
    )
    assert clash.status_code == 409
    error = clash.json()
    assert error["code"] == "booking_conflict"
    assert error["conflicting_booking_id"] == body["id"]
    assert error["conflicting_booking_ref"] == "SRA/2324/1001"


def test_inverted_dates_are_rejected(client, auth_headers, media, customer):
    response = client.post(
        "/bookings",
        json=_booking_payload(media.id, customer.id, start="2024-02-10", end="2024-02-01"),
        headers=auth_headers,
    )
    assert response.status_code == 422


def test_stale_update_returns_distinct_code(client, auth_headers, media, customer):
    booking = client.post("/bookings", json=_booking_payload(media.id, customer.id), headers=auth_headers).json()

    ok = client.patch(f"/bookings/{booking['id']}", json={"version": 1, "notes": "first"}, headers=auth_headers)
    assert ok.status_code == 200
    assert ok.json()["version"] == 2

    stale = client.patch(f"/bookings/{booking['id']}", json={"version": 1, "notes": "second"}, headers=auth_headers)
    assert stale.status_code == 409
    assert stale.json()["code"] == "stale_write"
    assert stale.json()["current_version"] == 2


def test_cancel_and_delete_booking(client, auth_headers, db, media, customer):
    booking = client.post("/bookings", json=_booking_payload(media.id, customer.id), headers=auth_headers).json()

    cancelled = client.post(f"/bookings/{booking['id']}/cancel", json={"reason": "Budget cut"}, headers=auth_headers)
    assert cancelled.json()["status"] == "Cancelled"
    assert cancelled.json()["paymentStatus"] == "Cancelled"

    assert client.delete(f"/bookings/{booking['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/bookings/{booking['id']}", headers=auth_headers).status_code == 404

    db.expire_all()
    customer_row = db.get(Customer, customer.id)
    assert (customer_row.total_bookings, customer_row.total_spent) == (0, 0)


def test_booking_lookups(client, auth_headers, db, media, customer):
    make_booking(db, media, customer, date(2024, 3, 1), date(2024, 3, 5))
    earlier = make_booking(db, media, customer, date(2024, 1, 1), date(2024, 1, 5))

    by_customer = client.get(f"/bookings/customer/{customer.id}", headers=auth_headers).json()
    assert by_customer["total"] == 2

    by_ref = client.get("/bookings/by-reference", params={"ref": "SRA/2324/1001"}, headers=auth_headers)
    assert by_ref.json()["id"] == earlier.id


def test_media_availability(client, auth_headers, db, media, customer):
    make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20))

    busy = client.get(
        f"/media/{media.id}/availability", params={"start": "2024-01-20", "end": "2024-01-25"}, headers=auth_headers
    ).json()
    free = client.get(
        f"/media/{media.id}/availability", params={"start": "2024-01-21", "end": "2024-01-25"}, headers=auth_headers
    ).json()

    assert busy["available"] is False
    assert busy["blockingBookings"] == ["SRA/2324/1001"]
    assert free["available"] is True


def test_customer_reconcile(client, auth_headers, db, media, customer):
    make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20), amount_paid=2500)
    customer.total_spent = 0
    db.commit()

    response = client.post(f"/customers/{customer.id}/reconcile", headers=auth_headers)

    assert response.json()["totalSpent"] == 2500
    assert response.json()["totalBookings"] == 1


def test_payments_endpoints(client, auth_headers, db, media, customer):
    booking = make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20), amount=10000, amount_paid=0)

    created = client.post(
        "/payments", json={"bookingId": booking.id, "amount": 4000, "mode": "Cheque"}, headers=auth_headers
    )
    assert created.status_code == 201
    assert created.json()["bookingRef"] == "SRA/2324/1001"

    stats = client.get("/payments/stats/summary", headers=auth_headers).json()
    assert stats == {"totalCollected": 4000, "pending": 6000, "overdue": 6000}


def test_compliance_endpoints(client, auth_headers):
    created = client.post(
        "/compliance/agreements",
        json={
            "tenderName": "Raipur Ring Road",
            "tenderNumber": "RMC/2024/17",
            "district": "Raipur",
            "startDate": "2024-01-01",
            "endDate": "2025-01-01",
            "taxFrequency": "Monthly",
            "licenseFee": 12000,
        },
        headers=auth_headers,
    )
    assert created.status_code == 201
    assert len(created.json()["installments"]) == 12

    tax_id = created.json()["installments"][0]["id"]
    paid = client.post(f"/compliance/taxes/{tax_id}/pay", json={}, headers=auth_headers)
    assert paid.json()["status"] == "Paid"

    overview = client.get("/compliance", headers=auth_headers).json()
    assert len(overview["tenders"]) == 1
    assert len(overview["taxes"]) == 12


def test_recycle_bin_roles(client, auth_headers, superadmin_headers, media):
    client.delete(f"/media/{media.id}", headers=auth_headers)

    listed = client.get("/recycle-bin", headers=auth_headers).json()
    assert [(i["type"], i["id"], i["daysRemaining"]) for i in listed] == [("media", media.id, 30)]

    assert client.delete("/recycle-bin", headers=auth_headers).status_code == 403
    assert client.delete("/recycle-bin", headers=superadmin_headers).status_code == 200
    assert client.get("/recycle-bin", headers=auth_headers).json() == []


def test_recycle_bin_restore_and_permanent_delete(client, auth_headers, db, media, customer):
    client.delete(f"/customers/{customer.id}", headers=auth_headers)

    restored = client.post("/recycle-bin/restore", json={"id": customer.id, "type": "customer"}, headers=auth_headers)
    assert restored.status_code == 200
    assert client.get(f"/customers/{customer.id}", headers=auth_headers).status_code == 200

    not_in_bin = client.delete(f"/recycle-bin/{customer.id}", params={"type": "customer"}, headers=auth_headers)
    assert not_in_bin.status_code == 422


def test_status_automation_endpoints(client, auth_headers, viewer_headers, db, media, customer):
    make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20))

    analytics = client.get("/status/analytics", headers=viewer_headers).json()
    assert analytics["completed"] == 1
    assert analytics["mediaAvailable"] == 1

    assert client.post("/status/automation/run", headers=viewer_headers).status_code == 403
    run = client.post("/status/automation/run", headers=auth_headers)
    assert run.status_code == 200
    assert run.json()["total_updated"] == 0
