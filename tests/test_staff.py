"""Tests for admin staff management."""

from shared.models.audit_logs import AuditLog
from shared.models.staff import Staff
from shared.models.users import Users

NEW_STAFF = {
    "email": "Night.Desk@hotel.example.com",
    "password": "secret123",
    "role": "receptionist",
    "first_name": "Nina",
    "last_name": "Night",
    "position": "Night Auditor",
    "department": "Front Office",
}


class TestStaffManagement:
    """/api/staff"""

    def test_create_staff_with_login(self, hotel_client, auth_client, admin_headers) -> None:
        # Act
        resp = hotel_client.post("/api/staff/", headers=admin_headers, json=NEW_STAFF)

        # Assert
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["email"] == "night.desk@hotel.example.com"
        assert data["role_name"] == "receptionist"
        assert data["is_active"] is True

        login = auth_client.post("/api/auth/login", json={
            "email": "night.desk@hotel.example.com", "password": "secret123"})
        assert login.status_code == 200

    def test_duplicate_email_returns_409(self, hotel_client, admin_headers, receptionist_user) -> None:
        resp = hotel_client.post("/api/staff/", headers=admin_headers,
                                 json={**NEW_STAFF, "email": "desk@hotel.example.com"})

        assert resp.status_code == 409

    def test_receptionist_is_forbidden(self, hotel_client, receptionist_headers) -> None:
        resp = hotel_client.post("/api/staff/", headers=receptionist_headers, json=NEW_STAFF)

        assert resp.status_code == 403

    def test_list_and_search(self, hotel_client, admin_headers, receptionist_user) -> None:
        listing = hotel_client.get("/api/staff/?department=front office", headers=admin_headers)
        assert listing.status_code == 200
        assert [s["first_name"] for s in listing.json()["data"]["staff"]] == ["Rita"]

        search = hotel_client.get("/api/staff/search?q=ada", headers=admin_headers)
        assert [s["last_name"] for s in search.json()["data"]] == ["Admin"]

    def test_department_stats(self, hotel_client, admin_headers, receptionist_user) -> None:
        resp = hotel_client.get("/api/staff/departments", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json()["data"] == [
            {"department": "Front Office", "total": 1, "active": 1},
            {"department": "Management", "total": 1, "active": 1},
        ]

    def test_update_staff(self, hotel_client, admin_headers) -> None:
        staff_id = hotel_client.post("/api/staff/", headers=admin_headers,
                                     json=NEW_STAFF).json()["data"]["id"]

        resp = hotel_client.put(f"/api/staff/{staff_id}", headers=admin_headers,
                                json={"position": "Shift Lead"})

        assert resp.status_code == 200
        assert resp.json()["data"]["position"] == "Shift Lead"

    def test_deactivate_blocks_login(self, hotel_client, auth_client, db, admin_headers) -> None:
        staff_id = hotel_client.post("/api/staff/", headers=admin_headers,
                                     json=NEW_STAFF).json()["data"]["id"]

        resp = hotel_client.put(f"/api/staff/{staff_id}/deactivate", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json()["data"]["is_active"] is False
        user = db.query(Users).filter(Users.email == "night.desk@hotel.example.com").one()
        assert user.is_active is False
        login = auth_client.post("/api/auth/login", json={
            "email": "night.desk@hotel.example.com", "password": "secret123"})
        assert login.status_code == 403

    def test_cannot_deactivate_self(self, hotel_client, db, admin_headers, admin_user) -> None:
        own = db.query(Staff).filter(Staff.user_id == admin_user.id).one()

        resp = hotel_client.put(f"/api/staff/{own.id}/deactivate", headers=admin_headers)

        assert resp.status_code == 400

    def test_deactivation_audits_staff_and_login(self, hotel_client, db, admin_headers) -> None:
        # Arrange
        staff_id = hotel_client.post("/api/staff/", headers=admin_headers,
                                     json=NEW_STAFF).json()["data"]["id"]

        # Act
        hotel_client.put(f"/api/staff/{staff_id}/deactivate", headers=admin_headers)

        # Assert
        updates = (db.query(AuditLog)
                   .filter(AuditLog.action == "UPDATE")
                   .order_by(AuditLog.id)
                   .all())
        assert [entry.table_name for entry in updates] == ["staff", "users"]
        user_entry = updates[1]
        assert user_entry.old_values["is_active"] is True
        assert user_entry.new_values["is_active"] is False
        assert "password_hash" not in user_entry.new_values
