"""
HTTP surface for cash sessions: status codes and payload shapes.
"""

import pytest

from cashdesk.models import CashSession


def _open(client, counts=None, **extra):
    body = {"counts": counts if counts is not None else {"500": 2, "100": 3, "20": 1}}
    body.update(extra)
    return client.post("/api/cash-sessions/open", json=body)


CLOSE_BODY = {
    "total_cash_sales": "500",
    "total_card_sales": "120.00",
    "total_expenses": "50",
    "total_tips": "20",
    "loan_amount": "0",
}


# =============================================================================
# OPEN / ACTIVE
# =============================================================================


class TestOpenRoute:

    def test_active_is_null_before_open(self, client):
        resp = client.get("/api/cash-sessions/active")
        assert resp.status_code == 200
        assert resp.json == {"session": None}

    def test_open_returns_201_with_details(self, client):
        resp = _open(client, user_id="cashier-7")
        assert resp.status_code == 201

        session = resp.json["session"]
        assert session["status"] == "open"
        assert session["starting_cash"] == "1320.00"
        assert session["user_id"] == "cashier-7"
        assert session["calculated_difference"] is None
        assert len(session["details"]) == 3
        assert {d["type"] for d in session["details"]} == {"start"}

        active = client.get("/api/cash-sessions/active").json["session"]
        assert active["id"] == session["id"]

    def test_second_open_is_409(self, client):
        assert _open(client).status_code == 201
        resp = _open(client)
        assert resp.status_code == 409
        assert "already open" in resp.json["error"]

    @pytest.mark.parametrize(
        "counts",
        [
            {"3": 1},
            {"1e30": 1},
            {"499.999": 1},
            {"500": -2},
            {"500": 1.5},
            "500=2",
        ],
    )
    def test_bad_counts_are_400(self, client, counts):
        resp = _open(client, counts=counts)
        assert resp.status_code == 400
        assert client.get("/api/cash-sessions/active").json["session"] is None

    def test_positive_opening_policy(self, app, client):
        app.config["CASHDESK_REQUIRE_POSITIVE_OPENING"] = True
        try:
            resp = _open(client, counts={})
        finally:
            app.config["CASHDESK_REQUIRE_POSITIVE_OPENING"] = False
        assert resp.status_code == 400


# =============================================================================
# CLOSE
# =============================================================================


class TestCloseRoute:

    def test_balanced_close(self, client):
        session_id = _open(client).json["session"]["id"]

        resp = client.post(f"/api/cash-sessions/{session_id}/close", json={**CLOSE_BODY, "ending_cash": "1790"})

        assert resp.status_code == 200
        data = resp.json
        assert data["expected_cash"] == "1790.00"
        assert data["difference"] == "0.00"
        assert data["variance"] == "balanced"
        assert data["session"]["status"] == "closed"
        assert data["session"]["total_card_sales"] == "120.00"

    def test_shortage_close_with_itemized_count(self, client):
        session_id = _open(client).json["session"]["id"]

        resp = client.post(
            f"/api/cash-sessions/{session_id}/close",
            json={**CLOSE_BODY, "counts": {"500": 3, "200": 1, "50": 1}},
        )

        assert resp.status_code == 200
        assert resp.json["difference"] == "-40.00"
        assert resp.json["variance"] == "shortage"
        assert resp.json["summary"] == "Shortage of $40.00"
        end_rows = [d for d in resp.json["session"]["details"] if d["type"] == "end"]
        assert len(end_rows) == 3

    def test_second_close_is_404(self, client):
        session_id = _open(client).json["session"]["id"]
        body = {**CLOSE_BODY, "ending_cash": "1790"}
        assert client.post(f"/api/cash-sessions/{session_id}/close", json=body).status_code == 200

        resp = client.post(f"/api/cash-sessions/{session_id}/close", json=body)
        assert resp.status_code == 404

    def test_close_unknown_is_404(self, client):
        resp = client.post("/api/cash-sessions/999/close", json={**CLOSE_BODY, "ending_cash": "0"})
        assert resp.status_code == 404

    def test_loan_without_reason_is_400(self, client):
        session_id = _open(client).json["session"]["id"]
        resp = client.post(
            f"/api/cash-sessions/{session_id}/close",
            json={**CLOSE_BODY, "ending_cash": "1690", "loan_amount": "100"},
        )
        assert resp.status_code == 400
        assert client.get("/api/cash-sessions/active").json["session"]["id"] == session_id

    def test_missing_ending_is_400(self, client):
        session_id = _open(client).json["session"]["id"]
        resp = client.post(f"/api/cash-sessions/{session_id}/close", json=CLOSE_BODY)
        assert resp.status_code == 400


# =============================================================================
# READ / REPORT / HEALTH
# =============================================================================


class TestReadRoutes:

    def test_denominations(self, client):
        resp = client.get("/api/cash-sessions/denominations")
        assert resp.status_code == 200
        values = [d["value"] for d in resp.json["denominations"]]
        assert values[0] == "500.00"
        assert values[-1] == "0.50"

    def test_get_and_list(self, client):
        session_id = _open(client).json["session"]["id"]

        resp = client.get(f"/api/cash-sessions/{session_id}")
        assert resp.status_code == 200
        assert resp.json["session"]["id"] == session_id

        assert client.get("/api/cash-sessions/4242").status_code == 404

        listed = client.get("/api/cash-sessions?status=open").json["sessions"]
        assert [s["id"] for s in listed] == [session_id]
        assert client.get("/api/cash-sessions?status=closed").json["sessions"] == []
        assert client.get("/api/cash-sessions?status=weird").status_code == 400

    def test_report_for_closed_session(self, client, db_session):
        session_id = _open(client, user_id="cashier-7").json["session"]["id"]
        client.post(f"/api/cash-sessions/{session_id}/close", json={**CLOSE_BODY, "ending_cash": "1790"})
        started = db_session.get(CashSession, session_id).start_time

        resp = client.post(
            f"/api/cash-sessions/{session_id}/report",
            json={
                "business_name": "Taqueria",
                "orders": [
                    {"id": "a", "total": "500", "payment_method": "cash", "status": "completed",
                     "created_at": started.isoformat()},
                ],
            },
        )

        assert resp.status_code == 200
        report = resp.json["report"]
        assert report["business_name"] == "Taqueria"
        assert report["user"] == "cashier-7"
        assert report["expected_cash_in_register"] == "1790.00"
        assert report["variance"] == "balanced"
        assert report["total_sales"] == "500.00"
        assert len(report["sales_history"]) == 1

    def test_report_with_numeric_created_at_is_400(self, client):
        session_id = _open(client).json["session"]["id"]
        client.post(f"/api/cash-sessions/{session_id}/close", json={**CLOSE_BODY, "ending_cash": "1790"})

        resp = client.post(
            f"/api/cash-sessions/{session_id}/report",
            json={"orders": [{"id": "a", "total": "10", "payment_method": "cash", "status": "completed",
                              "created_at": 12345}]},
        )
        assert resp.status_code == 400
        assert "created_at" in resp.json["error"]

    def test_report_for_open_session_is_400(self, client):
        session_id = _open(client).json["session"]["id"]
        resp = client.post(f"/api/cash-sessions/{session_id}/report", json={"orders": []})
        assert resp.status_code == 400

    def test_health(self, client):
        _open(client)
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json["database"]["details"] == {"cash_sessions": 1, "open_sessions": 1}
