"""Tests for the admin role management endpoints."""


class TestRoleManagement:
    """/api/roles"""

    def test_requires_admin(self, auth_client, receptionist_headers) -> None:
        resp = auth_client.get("/api/roles/", headers=receptionist_headers)

        assert resp.status_code == 403

    def test_list_includes_user_counts(self, auth_client, admin_headers, guest_user) -> None:
        resp = auth_client.get("/api/roles/", headers=admin_headers)

        assert resp.status_code == 200
        data = resp.json()["data"]
        counts = {role["name"]: role["user_count"] for role in data["roles"]}
        assert counts == {"admin": 1, "guest": 1, "receptionist": 0}
        assert data["pagination"]["total"] == 3

    def test_create_update_and_delete(self, auth_client, admin_headers) -> None:
        # Create
        created = auth_client.post("/api/roles/", headers=admin_headers, json={
            "name": "housekeeping", "description": "Cleaning crew",
            "permissions": ["view_reports"]})
        assert created.status_code == 201
        role_id = created.json()["data"]["id"]

        # Update
        updated = auth_client.put(f"/api/roles/{role_id}", headers=admin_headers,
                                  json={"permissions": ["view_reports", "manage_guests"]})
        assert updated.status_code == 200
        assert updated.json()["data"]["permissions"] == ["view_reports", "manage_guests"]

        # Delete
        deleted = auth_client.delete(f"/api/roles/{role_id}", headers=admin_headers)
        assert deleted.status_code == 200
        assert auth_client.get(f"/api/roles/{role_id}", headers=admin_headers).status_code == 404

    def test_duplicate_name_returns_409(self, auth_client, admin_headers) -> None:
        resp = auth_client.post("/api/roles/", headers=admin_headers,
                                json={"name": "Admin", "permissions": []})

        assert resp.status_code == 409
        assert resp.json()["status"] == "Failure"

    def test_delete_role_with_users_returns_409(self, auth_client, admin_headers, roles) -> None:
        resp = auth_client.delete(f"/api/roles/{roles['admin'].id}", headers=admin_headers)

        assert resp.status_code == 409

    def test_lookup(self, auth_client, admin_headers) -> None:
        resp = auth_client.get("/api/roles/lookup", headers=admin_headers)

        assert resp.status_code == 200
        assert [row["name"] for row in resp.json()["data"]] == ["admin", "guest", "receptionist"]
