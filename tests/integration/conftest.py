from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Iterator

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from parlor.infrastructure.cache import redis_client
from parlor.infrastructure.db import session as db_session

PROJECT_DIR = Path(__file__).resolve().parents[2]


@pytest.fixture(scope="session", autouse=True)
def integration_environment(tmp_path_factory: pytest.TempPathFactory) -> Iterator[None]:
    database_path = tmp_path_factory.mktemp("ledger") / "parlor.db"
    database_url = os.getenv("TEST_DATABASE_URL", f"sqlite+pysqlite:///{database_path}")

    os.environ["DATABASE_URL"] = database_url
    os.environ.pop("REDIS_URL", None)
    os.environ["APP_ENV"] = "test"
    os.environ["HEARTBEAT_INTERVAL_SECONDS"] = "3600"
    os.environ["VENUE_TIMEZONE"] = "UTC"
    os.environ.pop("SEED_TABLES", None)
    os.environ.setdefault("OTEL_SERVICE_NAME", "parlor-ledger-test")
    os.environ.setdefault("OTEL_EXPORTER_OTLP_ENDPOINT", "")

    db_session._build_engine.cache_clear()
    redis_client._build_client.cache_clear()

    env = os.environ.copy()
    env["PYTHONPATH"] = f"{PROJECT_DIR / 'src'}{os.pathsep}{env.get('PYTHONPATH', '')}".rstrip(
        os.pathsep
    )

    subprocess.run(
        [sys.executable, "-m", "alembic", "-c", "alembic.ini", "upgrade", "head"],
        cwd=PROJECT_DIR,
        env=env,
        check=True,
    )
    subprocess.run(
        [sys.executable, "-m", "parlor.tools.seed"],
        cwd=PROJECT_DIR,
        env=env,
        check=True,
    )
    yield
    db_session._build_engine.cache_clear()
