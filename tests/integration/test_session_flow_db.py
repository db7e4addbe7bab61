from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from parlor.api.main import app


def test_start_pause_resume_stop_persists_and_updates_daily_totals() -> None:
    with TestClient(app) as client:
        before = client.get("/v1/summary/daily").json()

        started = client.post("/v1/tables/1/start", json={"paymentMethod": "UPI"})
        assert started.status_code == 201
        session_id = started.json()["session"]["sessionId"]

        detail = client.get("/v1/tables/1").json()
        assert detail["table"]["status"] == "OCCUPIED"
        assert detail["session"]["sessionId"] == session_id

        assert client.post("/v1/tables/1/pause").json()["session"]["breakCount"] == 1
        assert client.post("/v1/tables/1/resume").status_code == 200

        stopped = client.post("/v1/tables/1/stop")
        assert stopped.status_code == 200
        receipt = stopped.json()["receipt"]
        assert stopped.json()["session"]["paymentStatus"] == "PAID"
        assert stopped.json()["session"]["endTime"] is not None

        after = client.get("/v1/summary/daily").json()
        assert after["sessionCount"] == before["sessionCount"] + 1
        assert after["totalAmount"] == before["totalAmount"] + receipt["amount"]
        assert after["paymentMethodTotals"].get("UPI", 0) == (
            before["paymentMethodTotals"].get("UPI", 0) + receipt["amount"]
        )

        again = client.post("/v1/tables/1/stop")
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "NO_ACTIVE_SESSION"
        assert client.get("/v1/tables/1").json()["table"]["status"] == "AVAILABLE"


def test_seeded_tables_are_listed() -> None:
    with TestClient(app) as client:
        tables = client.get("/v1/tables").json()["tables"]

    by_id = {item["table"]["tableId"]: item["table"] for item in tables}
    assert set(range(1, 9)) <= set(by_id)
    assert by_id[1]["category"] == "ENGLISH"
    assert by_id[1]["hourlyRate"] == 300
    assert by_id[5]["category"] == "FRENCH"
    assert by_id[5]["hourlyRate"] == 200
