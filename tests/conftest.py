"""
Test configuration and fixtures for the influxbench test suite.
Provides fake writers, mock management clients and live-database settings.
"""

import asyncio
import os
from typing import List, Optional
from unittest.mock import MagicMock

import pytest

from influxbench.config import BenchmarkSettings
from influxbench.records import SensorSample


# Live database configuration, only used by tests marked "integration"
TEST_INFLUX_URL = os.getenv("TEST_INFLUX_URL")
TEST_INFLUX_TOKEN = os.getenv("TEST_INFLUX_TOKEN")
TEST_INFLUX_ORG = os.getenv("TEST_INFLUX_ORG", "my-org")


class RecordingWriter:
    """BatchWriter that keeps every batch it is given."""

    def __init__(self, delay: float = 0.0, fail_on_call: Optional[int] = None, error: Exception = None):
        self.delay = delay
        self.fail_on_call = fail_on_call
        self.error = error or ConnectionError("connection reset by peer")
        self.batches: List[List[SensorSample]] = []
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.cancelled = 0

    async def write(self, samples: List[SensorSample]) -> None:
        call = self.calls
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail_on_call is not None and call == self.fail_on_call:
                raise self.error
            self.batches.append(samples)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.in_flight -= 1


class FakeClock:
    """Monotonic clock that advances a fixed step on every read."""

    def __init__(self, step: float = 0.125):
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def settings() -> BenchmarkSettings:
    return BenchmarkSettings(
        host="http://localhost:8086",
        token="secret-token",
        org="acme",
        bucket="test-bucket",
    )


@pytest.fixture
def recording_writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def mock_influx_client() -> MagicMock:
    """Provide a mock management client with one org 'acme' and no buckets."""
    client = MagicMock()

    org = MagicMock()
    org.name = "acme"
    org.id = "org-1"
    client.organizations_api.return_value.find_organizations.return_value = [org]

    buckets_api = client.buckets_api.return_value
    buckets_api.find_buckets.return_value.buckets = []

    created = MagicMock()
    created.name = "test-bucket"
    created.id = "bucket-2"
    buckets_api.create_bucket.return_value = created
    return client


@pytest.fixture
def live_settings() -> BenchmarkSettings:
    if not (TEST_INFLUX_URL and TEST_INFLUX_TOKEN):
        pytest.skip("TEST_INFLUX_URL and TEST_INFLUX_TOKEN are not set")
    return BenchmarkSettings(
        host=TEST_INFLUX_URL,
        token=TEST_INFLUX_TOKEN,
        org=TEST_INFLUX_ORG,
        bucket="influxbench-test",
    )


@pytest.fixture
def writer_factory():
    """Provide the RecordingWriter class for tests that need custom behaviour."""
    return RecordingWriter


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
