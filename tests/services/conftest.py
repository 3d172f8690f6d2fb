"""Service test fixtures — ItemService wired to a FakeTransport.

Invariants:
    - Every service gets its own ClientStatisticsCache (no cross-test leakage)
    - make_service(...) accepts outcomes or a handler, plus settings overrides
"""

import pytest

from bindwire.config import ClientSettings
from bindwire.services.item_service import ItemService

from tests.services.fake_transport import FakeTransport


@pytest.fixture
def make_service(statistics_cache):
    def _make(outcomes=None, handler=None, **overrides):
        values = {
            "service_url": "https://items.test/service.json",
            "send_client_latencies": True,
        }
        values.update(overrides)
        transport = FakeTransport(outcomes, handler)
        service = ItemService(ClientSettings(**values), transport, statistics_cache)
        return service, transport

    return _make
