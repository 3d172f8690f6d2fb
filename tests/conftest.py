"""Root conftest — shared test configuration."""

import os

import pytest

# Ensure tests never target a real endpoint by accident
os.environ.setdefault("BINDWIRE_SERVICE_URL", "https://items.test/service.json")

from bindwire.config import ClientSettings  # noqa: E402
from bindwire.infrastructure.client_statistics import ClientStatisticsCache  # noqa: E402


@pytest.fixture
def settings():
    return ClientSettings(
        service_url="https://items.test/service.json",
        send_client_latencies=True,
    )


@pytest.fixture
def statistics_cache():
    """Fresh cache per test; the process-wide default is never touched."""
    return ClientStatisticsCache()
