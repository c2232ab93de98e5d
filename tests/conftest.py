"""Pytest configuration and fixtures."""

import pytest
from unittest.mock import Mock

from streamwright.buildlog import BuildLog
from streamwright.config import BrokerSettings
from streamwright.models import OwnershipTags
from streamwright.provider import KinesisProvider


class FakeClock:
    """Monotonic clock that only moves when slept on."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def build_log():
    return BuildLog()


@pytest.fixture
def settings():
    return BrokerSettings()


@pytest.fixture
def ownership():
    return OwnershipTags(
        sbu=("sbu", "retail"),
        org=("org", "payments"),
        app=("application", "orders-svc"),
        cluster=("cluster", "ecs-prod-1"),
    )


@pytest.fixture
def provider():
    """Mock Kinesis provider."""
    return Mock(spec=KinesisProvider)


@pytest.fixture
def definition_data():
    """Sample deployment definition."""
    return {
        "app_name": "orders-svc",
        "cluster": {"cluster_id": "ecs-prod-1", "sbu": "retail", "org": "payments"},
        "streams": [{"name": "orders-stream", "shard_count": 2}],
    }
