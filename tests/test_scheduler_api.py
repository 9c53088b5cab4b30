from datetime import time, timedelta

import pytest

API = "/api/scheduler"


class TestSearchEndpoint:
    def test_closest_slots(self, client, today):
        response = client.post(f"{API}/slots", json={"date": today.isoformat(), "desired": "09:07", "count": 2})
        assert response.status_code == 200
        body = response.json()
        assert {slot["startTime"] for slot in body} == {"09:00", "09:15"}
        assert body[0]["date"] == today.isoformat()
        assert set(body[0]) == {"date", "startTime", "endTime", "booked", "client", "description", "advisor"}

    def test_date_defaults_to_today_and_count_to_five(self, client, today):
        response = client.post(f"{API}/slots", json={"desired": "12:00", "count": 0})
        assert response.status_code == 200
        body = response.json()
        assert len(body) == 5
        assert all(slot["date"] == today.isoformat() for slot in body)

    def test_null_count_uses_default(self, client):
        response = client.post(f"{API}/slots", json={"desired": "12:00", "count": None})
        assert response.status_code == 200
        assert len(response.json()) == 5

    @pytest.mark.parametrize("desired", ["12:00\n", "١٢:٠٠"])
    def test_non_ascii_or_trailing_newline_time_is_bad_request(self, client, desired):
        assert client.post(f"{API}/slots", json={"desired": desired}).status_code == 400

    def test_keys_are_case_insensitive(self, client, today):
        response = client.post(f"{API}/slots", json={"Date": today.isoformat(), "DESIRED": "20:00", "Count": 1})
        assert response.status_code == 200
        assert response.json()[0]["startTime"] == "16:45"

    @pytest.mark.parametrize("payload", [{"desired": "25:00"}, {"date": "2026-99-01", "desired": "10:00"}])
    def test_malformed_search_is_bad_request(self, client, payload):
        response = client.post(f"{API}/slots", json=payload)
        assert response.status_code == 400
        assert response.json()["status_code"] == 400

    def test_missing_desired_is_validation_error(self, client):
        response = client.post(f"{API}/slots", json={"count": 3})
        assert response.status_code == 422
        assert response.json()["error"] == "Invalid request parameters"


class TestBookEndpoint:
    def test_book_then_conflict(self, client, engine, today):
        payload = {"date": today.isoformat(), "startTime": "10:00", "client": "Alice", "description": "Demo", "advisor": "Bob"}
        response = client.post(f"{API}/book", json=payload)
        assert response.status_code == 200
        assert response.json() == {"status": "booked", "date": today.isoformat(), "startTime": "10:00"}
        assert engine.get_slot(today, time(10, 0)).client == "Alice"

        again = client.post(f"{API}/book", json={**payload, "client": "Eve"})
        assert again.status_code == 409
        assert again.json()["error"] == "Failed to book: slot not found or already booked"
        assert engine.get_slot(today, time(10, 0)).client == "Alice"

    def test_book_defaults_to_today(self, client, engine, today):
        response = client.post(f"{API}/book", json={"starttime": "09:30", "client": "Carol"})
        assert response.status_code == 200
        assert engine.get_slot(today, time(9, 30)).booked

    def test_book_snake_case_accepted(self, client, engine, today):
        tomorrow = today + timedelta(days=1)
        response = client.post(f"{API}/book", json={"date": tomorrow.isoformat(), "start_time": "09:00", "client": "Carol"})
        assert response.status_code == 200
        assert not engine.get_slot(today, time(9, 0)).booked

    def test_unknown_slot_conflicts(self, client, today):
        response = client.post(f"{API}/book", json={"date": today.isoformat(), "startTime": "08:00", "client": "Alice"})
        assert response.status_code == 409

    @pytest.mark.parametrize(
        "payload",
        [
            {"client": "Alice"},
            {"startTime": " ", "client": "Alice"},
            {"date": "9999-99-99", "startTime": "10:00", "client": "Alice"},
            {"startTime": "25:00", "client": "Alice"},
            {"startTime": "10:00\n", "client": "Alice"},
            {"startTime": "10:00", "client": "   "},
            {"startTime": "10:00"},
        ],
    )
    def test_malformed_booking_is_bad_request(self, client, engine, payload):
        before = engine.snapshot()
        assert client.post(f"{API}/book", json=payload).status_code == 400
        assert engine.snapshot() == before


class TestCancelEndpoint:
    def test_cancel_flow(self, client, engine, today):
        client.post(f"{API}/book", json={"startTime": "11:15", "client": "Alice"})

        wrong = client.post(f"{API}/cancel", json={"startTime": "11:15", "client": "Eve"})
        assert wrong.status_code == 409
        assert engine.get_slot(today, time(11, 15)).booked

        response = client.post(f"{API}/cancel", json={"date": today.isoformat(), "startTime": "11:15", "client": "Alice"})
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert not engine.get_slot(today, time(11, 15)).booked

        search = client.post(f"{API}/slots", json={"desired": "11:15", "count": 1})
        assert search.json()[0]["startTime"] == "11:15"

    def test_cancel_unbooked_conflicts(self, client):
        response = client.post(f"{API}/cancel", json={"startTime": "11:15", "client": "Alice"})
        assert response.status_code == 409

    @pytest.mark.parametrize("payload", [{"startTime": "11:15"}, {"client": "Alice"}, {"startTime": "11:15", "client": "  "}])
    def test_missing_fields(self, client, payload):
        response = client.post(f"{API}/cancel", json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == "Both startTime and client are required"


class TestSystemEndpoints:
    def test_calendar_display(self, client, today):
        client.post(f"{API}/book", json={"startTime": "09:00", "client": "Alice"})
        response = client.get(f"{API}/calendar")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert f"| {today.isoformat()} | 09:00 - 09:15   | Yes" in response.text

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_version(self, client):
        body = client.get("/version").json()
        assert body["horizon_days"] == 14
        assert body["day_start"] == "09:00"

    def test_startup_initializes_engine(self, client, engine):
        assert len(engine) == 448

    def test_metrics_exposed(self, client):
        client.post(f"{API}/book", json={"startTime": "09:00", "client": "Alice"})
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "slot_bookings_total" in response.text
