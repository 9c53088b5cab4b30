import os
import tempfile
from datetime import date

# Keep test runs from writing into the working tree.
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="scheduler_logs_"))
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient

from scheduler.services import SlotEngine, SlotGridConfig

TODAY = date(2026, 10, 19)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def engine() -> SlotEngine:
    """Default 14 x 32 grid pinned to a fixed 'today'."""
    slot_engine = SlotEngine(SlotGridConfig(), clock=lambda: TODAY)
    slot_engine.initialize()
    return slot_engine


@pytest.fixture
def client(engine):
    from scheduler.main import app
    from scheduler.routers.appointments import get_slot_engine

    app.dependency_overrides[get_slot_engine] = lambda: engine
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
