"""Tests for the operational and financial reports."""

from datetime import date, timedelta


class TestReports:
    """/api/reports"""

    def test_daily_report(self, hotel_client, receptionist_headers, walk_in_guest, make_room,
                          make_reservation, make_payment) -> None:
        # Arrange: one of two rooms is occupied tonight and paid for
        stay = make_reservation(walk_in_guest, make_room("101"), date.today(), status="checked-in")
        make_room("102")
        make_payment(stay, amount="120.00", status="completed")

        # Act
        resp = hotel_client.get("/api/reports/daily", headers=receptionist_headers)

        # Assert
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["report_date"] == date.today().isoformat()
        assert data["occupancy"] == {
            "total_rooms": 2, "occupied_rooms": 1, "available_rooms": 1, "occupancy_rate": 50.0}
        assert data["check_ins"] == 1
        assert data["revenue"]["total_revenue"] == 120.0

    def test_daily_report_for_given_date(self, hotel_client, receptionist_headers, room) -> None:
        day = date.today() - timedelta(days=30)

        resp = hotel_client.get("/api/reports/daily", headers=receptionist_headers,
                                params={"date": day.isoformat()})

        assert resp.status_code == 200
        assert resp.json()["data"]["report_date"] == day.isoformat()

    def test_weekly_report_starts_on_monday(self, hotel_client, receptionist_headers, room) -> None:
        resp = hotel_client.get("/api/reports/weekly", headers=receptionist_headers)

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert date.fromisoformat(data["week_start"]).weekday() == 0
        assert len(data["days"]) == 7
        assert "busiest_day" in data["summary"]

    def test_monthly_report_counts_statuses(self, hotel_client, receptionist_headers, walk_in_guest,
                                            make_room, make_reservation) -> None:
        first = date.today().replace(day=1)
        make_reservation(walk_in_guest, make_room("101"), first, status="checked-out")
        make_reservation(walk_in_guest, make_room("102"), first, status="cancelled")

        resp = hotel_client.get("/api/reports/monthly", headers=receptionist_headers,
                                params={"year": first.year, "month": first.month})

        assert resp.status_code == 200
        reservations = resp.json()["data"]["reservations"]
        assert reservations["total"] == 2
        assert reservations["checked-out"] == 1
        assert reservations["cancelled"] == 1

    def test_monthly_report_rejects_bad_month(self, hotel_client, receptionist_headers) -> None:
        resp = hotel_client.get("/api/reports/monthly", headers=receptionist_headers,
                                params={"year": 2025, "month": 13})

        assert resp.status_code == 400

    def test_custom_occupancy_report(self, hotel_client, receptionist_headers, room) -> None:
        start = date.today()
        resp = hotel_client.get("/api/reports/custom", headers=receptionist_headers, params={
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=2)).isoformat(),
            "report_type": "occupancy"})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["report_type"] == "occupancy"
        assert len(data["data"]["days"]) == 3

    def test_custom_comprehensive_report_has_all_sections(self, hotel_client, receptionist_headers) -> None:
        today = date.today().isoformat()
        resp = hotel_client.get("/api/reports/custom", headers=receptionist_headers,
                                params={"start_date": today, "end_date": today})

        assert resp.status_code == 200
        assert set(resp.json()["data"]["data"]) == {"occupancy", "financial", "guests"}

    def test_custom_report_rejects_reversed_range(self, hotel_client, receptionist_headers) -> None:
        today = date.today()
        resp = hotel_client.get("/api/reports/custom", headers=receptionist_headers, params={
            "start_date": today.isoformat(),
            "end_date": (today - timedelta(days=1)).isoformat()})

        assert resp.status_code == 400

    def test_dashboard(self, hotel_client, admin_headers, walk_in_guest, make_room,
                       make_reservation, make_payment) -> None:
        arriving = make_reservation(walk_in_guest, make_room("101"), date.today())
        make_room("102", status="occupied")
        make_payment(arriving)

        resp = hotel_client.get("/api/reports/dashboard", headers=admin_headers)

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["total_rooms"] == 2
        assert data["available_rooms"] == 1
        assert data["occupied_rooms"] == 1
        assert data["todays_check_ins"] == 1
        assert data["pending_payments"] == 1
        assert data["active_reservations"] == 1

    def test_guest_is_forbidden(self, hotel_client, guest_headers) -> None:
        resp = hotel_client.get("/api/reports/dashboard", headers=guest_headers)

        assert resp.status_code == 403
