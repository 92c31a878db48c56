from datetime import date

import pytest
from conftest import make_booking, make_media

from app.domain.maintenance.schemas import MaintenanceCreate, MaintenanceUpdate
from app.domain.maintenance.service import MaintenanceService
from app.models import BookingStatus, MaintenanceStatus, MediaStatus
from app.shared.exceptions import NotFoundError, ValidationError

TODAY = date(2024, 1, 15)


def _report(db, media, title="Flex torn at corner"):
    return MaintenanceService(db).create_record(MaintenanceCreate(mediaId=media.id, title=title))


def test_reporting_task_puts_media_under_maintenance(db, media):
    record = _report(db, media)

    db.refresh(media)
    assert record.status == MaintenanceStatus.PENDING
    assert record.priority == "Medium"
    assert media.status == MediaStatus.MAINTENANCE


def test_reporting_task_on_active_unit_keeps_it_booked(db, media, customer):
    make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20), today=TODAY)

    _report(db, media)

    db.refresh(media)
    assert media.status == MediaStatus.BOOKED


def test_completing_last_open_task_frees_media(db, media):
    record = _report(db, media)

    completed = MaintenanceService(db).complete_record(record.id)

    db.refresh(media)
    assert completed.status == MaintenanceStatus.COMPLETED
    assert completed.completed_date is not None
    assert media.status == MediaStatus.AVAILABLE


def test_completing_one_of_two_open_tasks_keeps_maintenance(db, media):
    first = _report(db, media, title="Lighting failure")
    _report(db, media, title="Structure repaint")

    MaintenanceService(db).complete_record(first.id)

    db.refresh(media)
    assert media.status == MediaStatus.MAINTENANCE


def test_completing_task_while_booking_is_active_makes_media_booked(db, customer):
    media = make_media(db, status=MediaStatus.MAINTENANCE)
    record = _report(db, media)
    # The booking turns Active while the unit is still under repair
    booking = make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20), today=TODAY)
    assert booking.status == BookingStatus.ACTIVE
    media.status = MediaStatus.MAINTENANCE
    db.commit()

    MaintenanceService(db).complete_record(record.id)

    db.refresh(media)
    assert media.status == MediaStatus.BOOKED


def test_completing_twice_is_rejected(db, media):
    record = _report(db, media)
    service = MaintenanceService(db)
    service.complete_record(record.id)

    with pytest.raises(ValidationError):
        service.complete_record(record.id)


def test_update_to_completed_goes_through_completion(db, media):
    record = _report(db, media)

    updated = MaintenanceService(db).update_record(
        record.id, MaintenanceUpdate(status="Completed", notes="Flex replaced")
    )

    db.refresh(media)
    assert updated.status == MaintenanceStatus.COMPLETED
    assert updated.notes == "Flex replaced"
    assert media.status == MediaStatus.AVAILABLE


def test_completed_task_cannot_be_reopened(db, media):
    record = _report(db, media)
    service = MaintenanceService(db)
    service.complete_record(record.id)

    with pytest.raises(ValidationError):
        service.update_record(record.id, MaintenanceUpdate(status="Pending"))


def test_unknown_media_is_not_found(db):
    with pytest.raises(NotFoundError):
        MaintenanceService(db).create_record(MaintenanceCreate(mediaId=999, title="Loose bolts"))


def test_maintenance_api_flow(client, auth_headers, media):
    created = client.post(
        "/maintenance",
        json={"mediaId": media.id, "title": "Lighting failure", "priority": "High"},
        headers=auth_headers,
    )
    assert created.status_code == 201
    body = created.json()
    assert body["mediaCode"] == media.code
    assert body["mediaStatus"] == MediaStatus.MAINTENANCE

    listed = client.get("/maintenance", params={"mediaId": media.id}, headers=auth_headers).json()
    assert listed["total"] == 1

    completed = client.post(f"/maintenance/{body['id']}/complete", headers=auth_headers)
    assert completed.status_code == 200
    assert completed.json()["status"] == MaintenanceStatus.COMPLETED
    assert completed.json()["mediaStatus"] == MediaStatus.AVAILABLE


def test_viewer_cannot_report_maintenance(client, viewer_headers, media):
    response = client.post("/maintenance", json={"mediaId": media.id, "title": "Lighting"}, headers=viewer_headers)

    assert response.status_code == 403
