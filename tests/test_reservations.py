"""Tests for booking, modifying and the front desk lifecycle of reservations."""

from datetime import date, timedelta
from typing import Callable

import pytest

from shared.core import auth
from shared.core.config import settings
from shared.models.audit_logs import AuditLog
from shared.models.staff import Staff
from shared.utils.app_status_code import AppStatusCode
from hotel_service.app.models.hospitality.rooms import Room


def _stay(room_id: int, offset: int = 5, nights: int = 2, **extra) -> dict:
    check_in = date.today() + timedelta(days=offset)
    return {
        "room_id": room_id,
        "check_in_date": check_in.isoformat(),
        "check_out_date": (check_in + timedelta(days=nights)).isoformat(),
        **extra,
    }


class TestCreateReservation:
    """POST /api/reservations/"""

    def test_guest_books_for_own_profile(self, hotel_client, db, guest_headers, guest_profile, room) -> None:
        # Act
        resp = hotel_client.post("/api/reservations/", headers=guest_headers, json=_stay(room.id))

        # Assert
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["guest_id"] == guest_profile.id
        assert data["total_amount"] == 240.0
        assert data["nights"] == 2
        assert data["status"] == "confirmed"
        assert data["payment_status"] == "pending"
        audit = db.query(AuditLog).filter(AuditLog.table_name == "reservations").one()
        assert audit.record_id == data["id"]

    def test_receptionist_books_for_walk_in(self, hotel_client, receptionist_headers,
                                           walk_in_guest, room) -> None:
        resp = hotel_client.post("/api/reservations/", headers=receptionist_headers,
                                 json=_stay(room.id, guest_id=walk_in_guest.id))

        assert resp.status_code == 201
        assert resp.json()["data"]["guest"]["first_name"] == "Walter"

    def test_staff_must_name_the_guest(self, hotel_client, receptionist_headers, room) -> None:
        resp = hotel_client.post("/api/reservations/", headers=receptionist_headers, json=_stay(room.id))

        assert resp.status_code == 400

    def test_guest_cannot_book_for_someone_else(self, hotel_client, guest_headers, guest_profile,
                                                walk_in_guest, room) -> None:
        resp = hotel_client.post("/api/reservations/", headers=guest_headers,
                                 json=_stay(room.id, guest_id=walk_in_guest.id))

        assert resp.status_code == 403

    def test_overlapping_stay_returns_409(self, hotel_client, guest_headers, guest_profile,
                                          walk_in_guest, room, make_reservation) -> None:
        # Arrange
        make_reservation(walk_in_guest, room, date.today() + timedelta(days=6))

        # Act
        resp = hotel_client.post("/api/reservations/", headers=guest_headers, json=_stay(room.id))

        # Assert
        assert resp.status_code == 409

    def test_check_out_before_check_in_returns_400(self, hotel_client, guest_headers, guest_profile, room) -> None:
        payload = _stay(room.id)
        payload["check_out_date"] = payload["check_in_date"]

        resp = hotel_client.post("/api/reservations/", headers=guest_headers, json=payload)

        assert resp.status_code == 400

    def test_past_check_in_returns_400(self, hotel_client, guest_headers, guest_profile, room) -> None:
        resp = hotel_client.post("/api/reservations/", headers=guest_headers,
                                 json=_stay(room.id, offset=-1))

        assert resp.status_code == 400

    def test_capacity_exceeded_returns_400(self, hotel_client, guest_headers, guest_profile, room) -> None:
        resp = hotel_client.post("/api/reservations/", headers=guest_headers,
                                 json=_stay(room.id, number_of_guests=3))

        assert resp.status_code == 400
        assert "capacity" in resp.json()["message"].lower()

    def test_inactive_room_returns_404(self, hotel_client, db, guest_headers, guest_profile, room) -> None:
        room.is_active = False
        db.commit()

        resp = hotel_client.post("/api/reservations/", headers=guest_headers, json=_stay(room.id))

        assert resp.status_code == 404

    def test_requires_token(self, hotel_client, room) -> None:
        resp = hotel_client.post("/api/reservations/", json=_stay(room.id))

        assert resp.status_code == 401


class TestPriceCalculation:
    """POST /api/reservations/calculate-price"""

    def test_quotes_nightly_price_times_nights(self, hotel_client, guest_headers, room) -> None:
        resp = hotel_client.post("/api/reservations/calculate-price", headers=guest_headers,
                                 json=_stay(room.id, nights=3))

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["nightly_price"] == 120.0
        assert data["total_amount"] == 360.0


class TestReadReservations:
    """Listing and access rules."""

    def test_my_bookings_only_lists_own(self, hotel_client, guest_headers, guest_profile,
                                        walk_in_guest, make_room, make_reservation) -> None:
        make_reservation(guest_profile, make_room("101"), date.today() + timedelta(days=3))
        make_reservation(walk_in_guest, make_room("102"), date.today() + timedelta(days=3))

        resp = hotel_client.get("/api/reservations/my-bookings", headers=guest_headers)

        assert resp.status_code == 200
        assert [r["guest_id"] for r in resp.json()["data"]] == [guest_profile.id]

    def test_guest_cannot_read_other_reservation(self, hotel_client, guest_headers, guest_profile,
                                                 walk_in_guest, room, make_reservation) -> None:
        other = make_reservation(walk_in_guest, room, date.today() + timedelta(days=3))

        resp = hotel_client.get(f"/api/reservations/{other.id}", headers=guest_headers)

        assert resp.status_code == 403

    def test_staff_list_filters_by_status(self, hotel_client, receptionist_headers, walk_in_guest,
                                          make_room, make_reservation) -> None:
        make_reservation(walk_in_guest, make_room("101"), date.today() + timedelta(days=3))
        make_reservation(walk_in_guest, make_room("102"), date.today() + timedelta(days=3),
                         status="cancelled")

        resp = hotel_client.get("/api/reservations/?status=cancelled", headers=receptionist_headers)

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["pagination"]["total"] == 1
        assert data["reservations"][0]["status"] == "cancelled"

    def test_guest_cannot_list_all(self, hotel_client, guest_headers) -> None:
        resp = hotel_client.get("/api/reservations/", headers=guest_headers)

        assert resp.status_code == 403


class TestModifyReservation:
    """PUT /api/reservations/{id} and /cancel"""

    def test_changing_dates_reprices(self, hotel_client, guest_headers, guest_profile, room,
                                     make_reservation) -> None:
        reservation = make_reservation(guest_profile, room, date.today() + timedelta(days=5))
        new_out = reservation.check_in_date + timedelta(days=4)

        resp = hotel_client.put(f"/api/reservations/{reservation.id}", headers=guest_headers,
                                json={"check_out_date": new_out.isoformat()})

        assert resp.status_code == 200
        assert resp.json()["data"]["total_amount"] == 480.0

    def test_own_reservation_does_not_conflict_with_itself(self, hotel_client, guest_headers,
                                                           guest_profile, room, make_reservation) -> None:
        reservation = make_reservation(guest_profile, room, date.today() + timedelta(days=5))

        resp = hotel_client.put(f"/api/reservations/{reservation.id}", headers=guest_headers,
                                json={"number_of_guests": 2})

        assert resp.status_code == 200

    def test_moving_onto_another_stay_returns_409(self, hotel_client, receptionist_headers, walk_in_guest,
                                                  room, make_reservation) -> None:
        # Arrange: two back-to-back stays in the same room
        first = make_reservation(walk_in_guest, room, date.today() + timedelta(days=5))
        make_reservation(walk_in_guest, room, date.today() + timedelta(days=7))

        # Act: stretch the first stay into the second
        resp = hotel_client.put(f"/api/reservations/{first.id}", headers=receptionist_headers, json={
            "check_out_date": (date.today() + timedelta(days=8)).isoformat()})

        # Assert
        assert resp.status_code == 409

    def test_blank_or_null_dates_keep_stored_dates(self, hotel_client, guest_headers, guest_profile, room,
                                                   make_reservation) -> None:
        reservation = make_reservation(guest_profile, room, date.today() + timedelta(days=5))

        for body in ({"check_in_date": ""}, {"check_out_date": None}):
            resp = hotel_client.put(f"/api/reservations/{reservation.id}", headers=guest_headers, json=body)

            assert resp.status_code == 200
            data = resp.json()["data"]
            assert data["check_in_date"] == reservation.check_in_date.isoformat()
            assert data["check_out_date"] == reservation.check_out_date.isoformat()
            assert data["total_amount"] == 240.0

    def test_guest_cancels_with_reason(self, hotel_client, db, guest_headers, guest_profile, room,
                                       make_reservation) -> None:
        reservation = make_reservation(guest_profile, room, date.today() + timedelta(days=5))

        resp = hotel_client.put(f"/api/reservations/{reservation.id}/cancel", headers=guest_headers,
                                json={"reason": "Change of plans"})

        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "cancelled"
        assert resp.json()["data"]["cancellation_reason"] == "Change of plans"
        db.expire_all()
        assert db.get(Room, room.id).status == "available"

    def test_cancel_without_body(self, hotel_client, receptionist_headers, walk_in_guest, room,
                                 make_reservation) -> None:
        reservation = make_reservation(walk_in_guest, room, date.today() + timedelta(days=5))

        resp = hotel_client.put(f"/api/reservations/{reservation.id}/cancel", headers=receptionist_headers)

        assert resp.status_code == 200

    def test_cancelled_reservation_cannot_be_cancelled_again(self, hotel_client, receptionist_headers,
                                                             walk_in_guest, room, make_reservation) -> None:
        reservation = make_reservation(walk_in_guest, room, date.today() + timedelta(days=5),
                                       status="cancelled")

        resp = hotel_client.put(f"/api/reservations/{reservation.id}/cancel", headers=receptionist_headers)

        assert resp.status_code == 400


class TestFrontDesk:
    """Check-in, check-out and no-show."""

    def test_check_in_then_check_out_updates_room(self, hotel_client, db, receptionist_headers,
                                                  walk_in_guest, room, make_reservation) -> None:
        # Arrange
        reservation = make_reservation(walk_in_guest, room, date.today())

        # Act: check in
        resp = hotel_client.put(f"/api/reservations/{reservation.id}/check-in",
                                headers=receptionist_headers)

        # Assert
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "checked-in"
        assert resp.json()["data"]["actual_check_in"] is not None
        db.expire_all()
        assert db.get(Room, room.id).status == "occupied"

        # Act: check out
        resp = hotel_client.put(f"/api/reservations/{reservation.id}/check-out",
                                headers=receptionist_headers)

        # Assert
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "checked-out"
        db.expire_all()
        assert db.get(Room, room.id).status == "cleaning"

    def test_check_in_before_date_returns_400(self, hotel_client, receptionist_headers,
                                              walk_in_guest, room, make_reservation) -> None:
        reservation = make_reservation(walk_in_guest, room, date.today() + timedelta(days=2))

        resp = hotel_client.put(f"/api/reservations/{reservation.id}/check-in",
                                headers=receptionist_headers)

        assert resp.status_code == 400

    def test_check_out_requires_checked_in(self, hotel_client, receptionist_headers,
                                           walk_in_guest, room, make_reservation) -> None:
        reservation = make_reservation(walk_in_guest, room, date.today())

        resp = hotel_client.put(f"/api/reservations/{reservation.id}/check-out",
                                headers=receptionist_headers)

        assert resp.status_code == 400

    def test_guest_cannot_check_in(self, hotel_client, guest_headers, guest_profile, room,
                                   make_reservation) -> None:
        reservation = make_reservation(guest_profile, room, date.today())

        resp = hotel_client.put(f"/api/reservations/{reservation.id}/check-in", headers=guest_headers)

        assert resp.status_code == 403

    def test_receptionist_outside_front_desk_departments_is_forbidden(
        self, hotel_client, db, receptionist_headers, receptionist_user, walk_in_guest, room,
        make_reservation
    ) -> None:
        # Arrange
        staff = db.query(Staff).filter(Staff.user_id == receptionist_user.id).one()
        staff.department = "Housekeeping"
        db.commit()
        reservation = make_reservation(walk_in_guest, room, date.today())

        # Act
        resp = hotel_client.put(f"/api/reservations/{reservation.id}/check-in",
                                headers=receptionist_headers)

        # Assert
        assert resp.status_code == 403

    def test_no_show_after_check_in_date(self, hotel_client, receptionist_headers, walk_in_guest,
                                         room, make_reservation) -> None:
        reservation = make_reservation(walk_in_guest, room, date.today() - timedelta(days=1))

        resp = hotel_client.put(f"/api/reservations/{reservation.id}/no-show",
                                headers=receptionist_headers)

        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "no-show"

    def test_no_show_on_arrival_day_returns_400(self, hotel_client, receptionist_headers,
                                                walk_in_guest, room, make_reservation) -> None:
        reservation = make_reservation(walk_in_guest, room, date.today())

        resp = hotel_client.put(f"/api/reservations/{reservation.id}/no-show",
                                headers=receptionist_headers)

        assert resp.status_code == 400


class TestFrontDeskHours:
    """Check-in limited to the configured front desk window."""

    @pytest.fixture
    def window(self, monkeypatch) -> Callable[[int, int, int], None]:
        """Set the front desk window and pin the clock to a given hour."""
        def _set(start: int, end: int, now: int) -> None:
            monkeypatch.setattr(settings, "CHECK_IN_START_HOUR", start)
            monkeypatch.setattr(settings, "CHECK_IN_END_HOUR", end)
            monkeypatch.setattr(auth, "current_hour", lambda: now)

        return _set

    def test_receptionist_outside_window_is_forbidden(self, hotel_client, receptionist_headers, window,
                                                      walk_in_guest, room, make_reservation) -> None:
        # Arrange
        window(9, 17, 20)
        reservation = make_reservation(walk_in_guest, room, date.today())

        # Act
        resp = hotel_client.put(f"/api/reservations/{reservation.id}/check-in",
                                headers=receptionist_headers)

        # Assert
        assert resp.status_code == 403
        assert resp.json()["status_code"] == AppStatusCode.ACCESS_OUTSIDE_ALLOWED_HOURS

    def test_admin_ignores_window(self, hotel_client, admin_headers, window, walk_in_guest, room,
                                  make_reservation) -> None:
        window(9, 17, 20)
        reservation = make_reservation(walk_in_guest, room, date.today())

        resp = hotel_client.put(f"/api/reservations/{reservation.id}/check-in", headers=admin_headers)

        assert resp.status_code == 200

    def test_receptionist_inside_window(self, hotel_client, receptionist_headers, window, walk_in_guest,
                                        room, make_reservation) -> None:
        window(9, 17, 9)
        reservation = make_reservation(walk_in_guest, room, date.today())

        resp = hotel_client.put(f"/api/reservations/{reservation.id}/check-in",
                                headers=receptionist_headers)

        assert resp.status_code == 200

    def test_window_wrapping_midnight(self, hotel_client, receptionist_headers, window, walk_in_guest,
                                      room, make_reservation) -> None:
        reservation = make_reservation(walk_in_guest, room, date.today())
        url = f"/api/reservations/{reservation.id}/check-in"

        # 22:00 -> 06:00 closes at noon
        window(22, 6, 12)
        assert hotel_client.put(url, headers=receptionist_headers).status_code == 403

        # and is open after midnight
        window(22, 6, 2)
        assert hotel_client.put(url, headers=receptionist_headers).status_code == 200
