"""Tests for the audit trail endpoints."""

from datetime import date, timedelta

import pytest


@pytest.fixture
def audited_guest(hotel_client, receptionist_headers) -> int:
    """Walk-in guest created and then updated through the API."""
    created = hotel_client.post("/api/guests/", headers=receptionist_headers, json={
        "first_name": "Audrey", "last_name": "Audit", "email": "audrey@example.com"})
    guest_id = created.json()["data"]["id"]
    hotel_client.put(f"/api/guests/{guest_id}", headers=receptionist_headers,
                     json={"phone": "+1 555 0199"})
    return guest_id


class TestAuditLogs:
    """/api/audit-logs"""

    def test_record_trail_is_chronological(self, hotel_client, admin_headers, audited_guest) -> None:
        resp = hotel_client.get(f"/api/audit-logs/record/guests/{audited_guest}", headers=admin_headers)

        assert resp.status_code == 200
        trail = resp.json()["data"]
        assert [entry["action"] for entry in trail] == ["INSERT", "UPDATE"]
        assert trail[0]["old_values"] is None
        assert trail[1]["old_values"]["phone"] is None
        assert trail[1]["new_values"]["phone"] == "+1 555 0199"
        assert trail[1]["user_agent"] == "testclient"

    def test_list_filters_by_action(self, hotel_client, admin_headers, audited_guest) -> None:
        resp = hotel_client.get("/api/audit-logs/?table_name=guests&action=UPDATE", headers=admin_headers)

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["pagination"]["total"] == 1
        assert data["audit_logs"][0]["record_id"] == audited_guest

    def test_delete_keeps_old_values_only(self, hotel_client, admin_headers, audited_guest) -> None:
        hotel_client.delete(f"/api/guests/{audited_guest}", headers=admin_headers)

        trail = hotel_client.get(f"/api/audit-logs/record/guests/{audited_guest}",
                                 headers=admin_headers).json()["data"]

        assert trail[-1]["action"] == "DELETE"
        assert trail[-1]["new_values"] is None
        assert trail[-1]["old_values"]["first_name"] == "Audrey"

    def test_passwords_are_never_logged(self, hotel_client, admin_headers) -> None:
        hotel_client.post("/api/staff/", headers=admin_headers, json={
            "email": "new.desk@hotel.example.com", "password": "secret123",
            "first_name": "Nina", "last_name": "Night", "department": "Front Office"})

        resp = hotel_client.get("/api/audit-logs/?table_name=users", headers=admin_headers)

        new_values = resp.json()["data"]["audit_logs"][0]["new_values"]
        assert "password_hash" not in new_values
        assert new_values["email"] == "new.desk@hotel.example.com"

    def test_recent_activity_limit(self, hotel_client, admin_headers, audited_guest) -> None:
        resp = hotel_client.get("/api/audit-logs/recent?limit=1", headers=admin_headers)

        assert resp.status_code == 200
        assert len(resp.json()["data"]) == 1

    def test_unknown_entry_returns_404(self, hotel_client, admin_headers) -> None:
        resp = hotel_client.get("/api/audit-logs/999", headers=admin_headers)

        assert resp.status_code == 404

    def test_receptionist_is_forbidden(self, hotel_client, receptionist_headers) -> None:
        resp = hotel_client.get("/api/audit-logs/", headers=receptionist_headers)

        assert resp.status_code == 403

    def test_reservation_status_changes_are_traced(self, hotel_client, admin_headers, walk_in_guest,
                                                   room, make_reservation) -> None:
        reservation = make_reservation(walk_in_guest, room, date.today() + timedelta(days=4))
        hotel_client.put(f"/api/reservations/{reservation.id}/cancel", headers=admin_headers,
                         json={"reason": "Duplicate booking"})

        trail = hotel_client.get(f"/api/audit-logs/record/reservations/{reservation.id}",
                                 headers=admin_headers).json()["data"]

        assert len(trail) == 1
        assert trail[0]["old_values"]["status"] == "confirmed"
        assert trail[0]["new_values"]["status"] == "cancelled"
