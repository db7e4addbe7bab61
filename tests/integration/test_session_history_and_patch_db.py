from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from parlor.api.main import app


def test_history_pages_and_closed_session_patch_rules() -> None:
    with TestClient(app) as client:
        session_ids = []
        for index in range(3):
            started = client.post("/v1/tables/4/start", json={"customerName": f"guest-{index}"})
            assert started.status_code == 201
            session_ids.append(started.json()["session"]["sessionId"])
            assert client.post("/v1/tables/4/stop").status_code == 200

        first = client.get("/v1/tables/4/sessions", params={"limit": 2})
        assert first.status_code == 200
        first_page = first.json()
        assert [item["sessionId"] for item in first_page["sessions"]] == session_ids[:0:-1]
        assert first_page["nextCursor"]

        second = client.get(
            "/v1/tables/4/sessions",
            params={"limit": 2, "cursor": first_page["nextCursor"]},
        ).json()
        assert session_ids[0] in [item["sessionId"] for item in second["sessions"]]

        invalid = client.get("/v1/tables/4/sessions", params={"cursor": "%%%"})
        assert invalid.status_code == 400
        assert invalid.json()["error"]["code"] == "INVALID_CURSOR"

        patched = client.patch(f"/v1/sessions/{session_ids[-1]}", json={"notes": "settled"})
        assert patched.status_code == 200
        assert patched.json()["notes"] == "settled"

        locked = client.patch(f"/v1/sessions/{session_ids[-1]}", json={"discountPercent": 50})
        assert locked.status_code == 409
        assert locked.json()["error"]["code"] == "INVALID_TRANSITION"


def test_open_session_patch_changes_final_bill() -> None:
    with TestClient(app) as client:
        session_id = client.post("/v1/tables/7/start").json()["session"]["sessionId"]

        patched = client.patch(
            f"/v1/sessions/{session_id}",
            json={"isFriendly": True, "customerPhone": "+91-90000-00000"},
        )
        assert patched.status_code == 200
        assert patched.json()["isFriendly"] is True

        stopped = client.post("/v1/tables/7/stop").json()
        assert stopped["receipt"]["amount"] == 0
        assert stopped["session"]["customerPhone"] == "+91-90000-00000"


def test_sessions_listed_across_tables_by_phone_and_date() -> None:
    phone = "+91-98888-00008"
    with TestClient(app) as client:
        session_ids = []
        for _ in range(2):
            started = client.post("/v1/tables/8/start", json={"customerPhone": phone})
            session_ids.append(started.json()["session"]["sessionId"])
            assert client.post("/v1/tables/8/stop").status_code == 200

        first = client.get("/v1/sessions", params={"customerPhone": phone, "limit": 1}).json()
        second = client.get(
            "/v1/sessions",
            params={"customerPhone": phone, "limit": 1, "cursor": first["nextCursor"]},
        ).json()
        assert [item["sessionId"] for item in first["sessions"]] == [session_ids[1]]
        assert [item["sessionId"] for item in second["sessions"]] == [session_ids[0]]
        assert second["nextCursor"] is None

        today = datetime.now(timezone.utc).date().isoformat()
        todays = client.get("/v1/sessions", params={"date": today, "limit": 200}).json()
        assert set(session_ids) <= {item["sessionId"] for item in todays["sessions"]}

        long_ago = client.get("/v1/sessions", params={"date": "2001-01-01"}).json()
        assert long_ago["sessions"] == []
