from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from parlor.api.main import app


def test_maintenance_blocks_sessions_until_table_is_available() -> None:
    with TestClient(app) as client:
        maintenance = client.patch("/v1/tables/6/status", json={"status": "MAINTENANCE"})
        assert maintenance.status_code == 200
        assert maintenance.json()["status"] == "MAINTENANCE"
        assert maintenance.json()["lastMaintenanceAt"] is not None

        blocked = client.post("/v1/tables/6/start")
        assert blocked.status_code == 409
        assert blocked.json()["error"]["code"] == "TABLE_UNDER_MAINTENANCE"

        available = client.patch("/v1/tables/6/status", json={"status": "AVAILABLE"})
        assert available.status_code == 200
        assert available.json()["lastMaintenanceAt"] is not None

        assert client.post("/v1/tables/6/start").status_code == 201
        busy_status = client.patch("/v1/tables/6/status", json={"status": "MAINTENANCE"})
        assert busy_status.status_code == 409
        assert client.post("/v1/tables/6/stop").status_code == 200
