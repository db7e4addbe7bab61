from __future__ import annotations

import queue
import sys
import threading
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from parlor.api.main import app


def test_websocket_receives_session_events_in_order() -> None:
    events: "queue.Queue[dict]" = queue.Queue()
    errors: "queue.Queue[Exception]" = queue.Queue()

    with TestClient(app) as client:
        with client.websocket_connect("/ws") as websocket:

            def _reader() -> None:
                try:
                    for _ in range(5):
                        events.put(websocket.receive_json())
                except Exception as exc:
                    errors.put(exc)

            reader = threading.Thread(target=_reader, daemon=True)
            reader.start()

            assert client.post("/v1/tables/2/start").status_code == 201
            assert client.post("/v1/tables/2/pause").status_code == 200
            assert client.post("/v1/tables/2/resume").status_code == 200
            assert client.post("/v1/tables/2/stop").status_code == 200

            reader.join(timeout=5.0)
            assert not reader.is_alive(), "timed out waiting for websocket events"
            assert errors.empty(), "unexpected websocket read error"

    messages = [events.get_nowait() for _ in range(5)]
    assert [message["type"] for message in messages] == [
        "connected",
        "session:start",
        "session:pause",
        "session:resume",
        "session:stop",
    ]
    assert all(message["payload"]["table"]["tableId"] == 2 for message in messages[1:])
    assert messages[-1]["payload"]["receipt"]["hourlyRate"] == 300
