"""
Latency records written by PerformanceMiddleware.
"""

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from blobstorageapi.core.structured_logger import LOGGER_NAME
from blobstorageapi.middleware.performance_middleware import PROCESS_TIME_HEADER, PerformanceMiddleware


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__(logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def records():
    # The app logger does not propagate, so capture on it directly
    logger = logging.getLogger(LOGGER_NAME)
    handler = RecordingHandler()
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    yield handler.records
    logger.removeHandler(handler)
    logger.setLevel(previous_level)


def latency_records(records):
    return [r for r in records if getattr(r, "extra_data", {}).get("latency_ms") is not None]


def test_blob_request_logged_with_sizes(client, records):
    client.post("/blob/upload", files={"file": ("a.txt", b"hello", "text/plain")})

    record = latency_records(records)[-1]
    assert record.levelno == logging.INFO
    assert record.request_id
    assert record.extra_data["route_group"] == "blob"
    assert record.extra_data["method"] == "POST"
    assert record.extra_data["status"] == 200
    assert int(record.extra_data["request_bytes"]) > 5


def test_health_requests_logged_at_debug(client, records):
    client.get("/health/live")

    record = latency_records(records)[-1]
    assert record.levelno == logging.DEBUG
    assert record.extra_data["route_group"] == "health"


def test_slow_request_warning(records):
    app = FastAPI()
    app.add_middleware(PerformanceMiddleware, slow_request_seconds=0.0)

    @app.get("/")
    async def index():
        return {"ok": True}

    response = TestClient(app).get("/")

    assert PROCESS_TIME_HEADER in response.headers
    warnings = [r for r in records if r.levelno == logging.WARNING]
    assert warnings and warnings[0].getMessage().startswith("Slow request: GET /")
    assert warnings[0].extra_data["route_group"] == "root"
