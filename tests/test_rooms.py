"""Tests for room inventory, room types and availability search."""

from datetime import date, timedelta

from shared.models.audit_logs import AuditLog
from hotel_service.app.models.hospitality.rooms import Room


def _window(offset: int = 5, nights: int = 2) -> dict:
    start = date.today() + timedelta(days=offset)
    return {"start_date": start.isoformat(),
            "end_date": (start + timedelta(days=nights)).isoformat()}


class TestRoomBrowsing:
    """Public room listing endpoints."""

    def test_list_is_public_and_includes_final_price(self, hotel_client, room) -> None:
        resp = hotel_client.get("/api/rooms/")

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["pagination"]["total"] == 1
        listed = data["rooms"][0]
        assert listed["room_number"] == "101"
        assert listed["final_price"] == 120.0
        assert listed["room_type"]["name"] == "Standard"

    def test_price_filter_uses_final_price(self, hotel_client, make_room) -> None:
        make_room("101", price_adjustment="20")
        make_room("102", price_adjustment="-10")

        resp = hotel_client.get("/api/rooms/?max_price=100")

        assert [r["room_number"] for r in resp.json()["data"]["rooms"]] == ["102"]

    def test_inactive_rooms_are_hidden(self, hotel_client, db, make_room) -> None:
        hidden = make_room("102")
        hidden.is_active = False
        db.commit()

        resp = hotel_client.get("/api/rooms/")

        assert [r["room_number"] for r in resp.json()["data"]["rooms"]] == []

    def test_unknown_room_returns_404(self, hotel_client) -> None:
        resp = hotel_client.get("/api/rooms/999")

        assert resp.status_code == 404
        assert resp.json()["status"] == "Failure"


class TestRoomManagement:
    """Admin create/update/delete of rooms."""

    def test_admin_creates_room(self, hotel_client, db, admin_headers, room_type) -> None:
        # Act
        resp = hotel_client.post("/api/rooms/", headers=admin_headers, json={
            "room_type_id": room_type.id, "room_number": "201", "floor": 2,
            "price_adjustment": 15, "special_features": ["balcony"]})

        # Assert
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["final_price"] == 115.0
        assert data["status"] == "available"
        assert db.query(AuditLog).filter(AuditLog.table_name == "rooms").count() == 1

    def test_receptionist_cannot_create(self, hotel_client, receptionist_headers, room_type) -> None:
        resp = hotel_client.post("/api/rooms/", headers=receptionist_headers, json={
            "room_type_id": room_type.id, "room_number": "201", "floor": 2})

        assert resp.status_code == 403

    def test_duplicate_number_returns_409(self, hotel_client, admin_headers, room) -> None:
        resp = hotel_client.post("/api/rooms/", headers=admin_headers, json={
            "room_type_id": room.room_type_id, "room_number": "101", "floor": 1})

        assert resp.status_code == 409

    def test_unknown_room_type_returns_404(self, hotel_client, admin_headers) -> None:
        resp = hotel_client.post("/api/rooms/", headers=admin_headers, json={
            "room_type_id": 999, "room_number": "301", "floor": 3})

        assert resp.status_code == 404

    def test_adjustment_out_of_range_is_rejected(self, hotel_client, admin_headers, room_type) -> None:
        resp = hotel_client.post("/api/rooms/", headers=admin_headers, json={
            "room_type_id": room_type.id, "room_number": "301", "floor": 3,
            "price_adjustment": 5000})

        assert resp.status_code == 400

    def test_receptionist_updates_status(self, hotel_client, receptionist_headers, room) -> None:
        resp = hotel_client.patch(f"/api/rooms/{room.id}/status", headers=receptionist_headers,
                                  json={"status": "maintenance"})

        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "maintenance"

    def test_delete_room_without_history(self, hotel_client, db, admin_headers, room) -> None:
        resp = hotel_client.delete(f"/api/rooms/{room.id}", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json()["data"]["deleted"] is True
        db.expire_all()
        assert db.query(Room).count() == 0

    def test_delete_room_with_history_deactivates(self, hotel_client, db, admin_headers, room,
                                                  walk_in_guest, make_reservation) -> None:
        # Arrange
        make_reservation(walk_in_guest, room, date.today() - timedelta(days=10), status="checked-out")

        # Act
        resp = hotel_client.delete(f"/api/rooms/{room.id}", headers=admin_headers)

        # Assert
        assert resp.status_code == 200
        assert resp.json()["data"]["deactivated"] is True
        db.expire_all()
        assert db.get(Room, room.id).is_active is False

    def test_delete_room_with_upcoming_stay_returns_409(self, hotel_client, admin_headers, room,
                                                        walk_in_guest, make_reservation) -> None:
        make_reservation(walk_in_guest, room, date.today() + timedelta(days=3))

        resp = hotel_client.delete(f"/api/rooms/{room.id}", headers=admin_headers)

        assert resp.status_code == 409


class TestRoomTypes:
    """/api/rooms/types"""

    def test_create_and_list(self, hotel_client, admin_headers) -> None:
        created = hotel_client.post("/api/rooms/types", headers=admin_headers, json={
            "name": "Suite", "base_price": 250, "max_occupancy": 4, "amenities": ["jacuzzi"]})
        assert created.status_code == 201

        resp = hotel_client.get("/api/rooms/types")

        assert [rt["name"] for rt in resp.json()["data"]] == ["Suite"]

    def test_duplicate_name_returns_409(self, hotel_client, admin_headers, room_type) -> None:
        resp = hotel_client.post("/api/rooms/types", headers=admin_headers, json={
            "name": "standard", "base_price": 90, "max_occupancy": 2})

        assert resp.status_code == 409

    def test_delete_type_with_rooms_returns_409(self, hotel_client, admin_headers, room) -> None:
        resp = hotel_client.delete(f"/api/rooms/types/{room.room_type_id}", headers=admin_headers)

        assert resp.status_code == 409

    def test_available_types_count_free_rooms(self, hotel_client, make_room, walk_in_guest,
                                              make_reservation) -> None:
        # Arrange: three rooms, one booked, one under maintenance
        booked = make_room("101")
        make_room("102")
        make_room("103", status="maintenance")
        make_reservation(walk_in_guest, booked, date.today() + timedelta(days=5))

        # Act
        resp = hotel_client.get("/api/rooms/types/available", params=_window())

        # Assert
        assert resp.status_code == 200
        assert resp.json()["data"][0]["available_rooms"] == 1


class TestAvailability:
    """GET /api/rooms/available"""

    def test_excludes_overlapping_reservations(self, hotel_client, make_room, walk_in_guest,
                                               make_reservation) -> None:
        booked = make_room("101")
        make_room("102")
        make_reservation(walk_in_guest, booked, date.today() + timedelta(days=6))

        resp = hotel_client.get("/api/rooms/available", params=_window())

        assert resp.status_code == 200
        assert [r["room_number"] for r in resp.json()["data"]] == ["102"]

    def test_back_to_back_stay_does_not_conflict(self, hotel_client, room, walk_in_guest,
                                                 make_reservation) -> None:
        # existing stay checks out the day the new one checks in
        make_reservation(walk_in_guest, room, date.today() + timedelta(days=3), nights=2)

        resp = hotel_client.get("/api/rooms/available", params=_window(offset=5))

        assert [r["room_number"] for r in resp.json()["data"]] == ["101"]

    def test_cancelled_reservation_frees_room(self, hotel_client, room, walk_in_guest,
                                              make_reservation) -> None:
        make_reservation(walk_in_guest, room, date.today() + timedelta(days=5), status="cancelled")

        resp = hotel_client.get("/api/rooms/available", params=_window())

        assert len(resp.json()["data"]) == 1

    def test_guest_count_filters_capacity(self, hotel_client, room) -> None:
        resp = hotel_client.get("/api/rooms/available", params={**_window(), "guests": 3})

        assert resp.json()["data"] == []

    def test_end_before_start_returns_400(self, hotel_client, room) -> None:
        window = _window()
        resp = hotel_client.get("/api/rooms/available", params={
            "start_date": window["end_date"], "end_date": window["start_date"]})

        assert resp.status_code == 400


class TestOccupancy:
    """GET /api/rooms/occupancy"""

    def test_daily_rates(self, hotel_client, receptionist_headers, make_room, walk_in_guest,
                         make_reservation) -> None:
        booked = make_room("101")
        make_room("102")
        start = date.today() + timedelta(days=5)
        make_reservation(walk_in_guest, booked, start, nights=1)

        resp = hotel_client.get("/api/rooms/occupancy", headers=receptionist_headers, params={
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=1)).isoformat()})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [d["occupancy_rate"] for d in data["days"]] == [50.0, 0.0]
        assert data["average_occupancy_rate"] == 25.0

    def test_guest_is_forbidden(self, hotel_client, guest_headers) -> None:
        today = date.today().isoformat()
        resp = hotel_client.get("/api/rooms/occupancy", headers=guest_headers,
                                params={"start_date": today, "end_date": today})

        assert resp.status_code == 403
