"""Integration Tests: ServiceRequestBase.emit() — validation, telemetry and failure translation.

Invariants:
    - Local validation failures happen before any transport call
    - At most one pending statistics record is attached per call, appended to an existing header
    - A telemetry record is enqueued on success, failure and cancellation
    - With send_client_latencies off the cache is neither read nor written
    - Transport failures surface as ServiceRequestError (cause chained) unless the
      fault hook specializes a status-500 fault body

Design Decisions:
    - PingRequest: minimal concrete request, so the base pipeline is tested without GetItem parsing
    - Elapsed time pinned by patching the module's `time` (asyncio keeps the real clock)
"""

import asyncio
from types import SimpleNamespace

import httpx
import pytest

from bindwire.core.errors import (
    ServerBusyError,
    ServiceLocalError,
    ServiceRequestError,
    ServiceResponseError,
)
from bindwire.infrastructure.transport import (
    TransportIOError,
    TransportProtocolError,
    TransportResponse,
    TransportStatus,
)
from bindwire.services import service_request
from bindwire.services.service_request import ServiceRequestBase

from tests.services.fake_transport import fault_error, protocol_error

STATS_HEADER = "X-ClientStatistics"


class PingRequest(ServiceRequestBase):
    def __init__(self, service, headers=None):
        super().__init__(service)
        self._headers = headers or {}

    def get_payload(self):
        return {"Operation": self.operation_name}

    def get_request_headers(self):
        return dict(self._headers)


def _ok(headers=None):
    return TransportResponse(200, httpx.Headers(headers or {}), b"{}")


def _pin_clock(monkeypatch, *readings):
    values = iter(readings)
    monkeypatch.setattr(
        service_request, "time", SimpleNamespace(monotonic=lambda: next(values)),
    )


# ==============================================================================
# Emission order and headers
# ==============================================================================


async def test_operation_name_strips_request_suffix(make_service):
    service, _ = make_service()
    assert PingRequest(service).operation_name == "Ping"


async def test_emit_returns_raw_response(make_service):
    response = _ok({"request-id": "r-1"})
    service, transport = make_service([response])

    result = await PingRequest(service).emit()

    assert result is response
    assert len(transport.calls) == 1
    assert transport.calls[0].method == "POST"
    assert transport.calls[0].url == "https://items.test/service.json"


async def test_local_validation_failure_sends_nothing(make_service, statistics_cache):
    service, transport = make_service([_ok()], service_url="")

    with pytest.raises(ServiceLocalError):
        await PingRequest(service).emit()

    assert transport.calls == []
    assert len(statistics_cache) == 0


async def test_pending_record_attached_as_header(make_service, statistics_cache):
    statistics_cache.add("MessageId=old,ResponseTime=5,SoapAction=GetItem;")
    service, transport = make_service([_ok()])

    await PingRequest(service).emit()

    assert transport.calls[0].headers[STATS_HEADER] == (
        "MessageId=old,ResponseTime=5,SoapAction=GetItem;"
    )


async def test_only_one_record_attached_per_call(make_service, statistics_cache):
    statistics_cache.add("first;")
    statistics_cache.add("second;")
    service, transport = make_service([_ok()])

    await PingRequest(service).emit()

    assert transport.calls[0].headers[STATS_HEADER] == "first;"
    assert statistics_cache.snapshot()[0] == "second;"


async def test_record_appended_to_existing_header(make_service, statistics_cache):
    statistics_cache.add("pending;")
    service, transport = make_service([_ok()])

    await PingRequest(service, headers={STATS_HEADER: "prior;"}).emit()

    assert transport.calls[0].headers[STATS_HEADER] == "prior;pending;"


async def test_no_header_when_cache_empty(make_service):
    service, transport = make_service([_ok()])
    await PingRequest(service).emit()
    assert STATS_HEADER not in transport.calls[0].headers


async def test_latencies_off_leaves_cache_untouched(make_service, statistics_cache):
    statistics_cache.add("pending;")
    service, transport = make_service([_ok({"request-id": "r-1"})], send_client_latencies=False)

    await PingRequest(service).emit()

    assert STATS_HEADER not in transport.calls[0].headers
    assert statistics_cache.snapshot() == ["pending;"]


async def test_latencies_off_records_nothing_on_failure(make_service, statistics_cache):
    service, _ = make_service([TransportIOError("reset")], send_client_latencies=False)

    with pytest.raises(ServiceRequestError):
        await PingRequest(service).emit()

    assert len(statistics_cache) == 0


# ==============================================================================
# Telemetry records
# ==============================================================================


async def test_success_enqueues_record_with_request_id(make_service, statistics_cache, monkeypatch):
    _pin_clock(monkeypatch, 10.0, 10.25)
    service, _ = make_service([_ok({"request-id": "r-42"})])

    await PingRequest(service).emit()

    assert statistics_cache.snapshot() == ["MessageId=r-42,ResponseTime=250,SoapAction=Ping;"]


async def test_request_id_header_priority(make_service, statistics_cache):
    service, _ = make_service([_ok({"RequestId": "primary", "request-id": "secondary"})])
    await PingRequest(service).emit()
    assert statistics_cache.pop_next().startswith("MessageId=primary,")


async def test_request_id_skips_empty_header(make_service, statistics_cache):
    service, _ = make_service([_ok({"RequestId": "", "request-id": "secondary"})])
    await PingRequest(service).emit()
    assert statistics_cache.pop_next().startswith("MessageId=secondary,")


async def test_configured_request_id_headers_are_used(make_service, statistics_cache):
    service, _ = make_service(
        [_ok({"request-id": "ignored", "X-Trace": "t-1"})], request_id_headers=["X-Trace"],
    )
    await PingRequest(service).emit()
    assert statistics_cache.pop_next().startswith("MessageId=t-1,")


async def test_missing_request_id_gives_empty_id(make_service, statistics_cache):
    service, _ = make_service([_ok()])
    await PingRequest(service).emit()
    assert statistics_cache.pop_next().startswith("MessageId=,")


async def test_failure_still_enqueues_record(make_service, statistics_cache, monkeypatch):
    _pin_clock(monkeypatch, 1.0, 1.5)
    service, _ = make_service([TransportIOError("connection reset")])

    with pytest.raises(ServiceRequestError):
        await PingRequest(service).emit()

    assert statistics_cache.snapshot() == ["MessageId=,ResponseTime=500,SoapAction=Ping;"]


async def test_cancellation_still_enqueues_record(make_service, statistics_cache):
    service, _ = make_service([asyncio.CancelledError()])

    with pytest.raises(asyncio.CancelledError):
        await PingRequest(service).emit()

    assert len(statistics_cache) == 1


async def test_next_call_carries_previous_record(make_service, statistics_cache):
    service, transport = make_service([_ok({"request-id": "r-1"}), _ok({"request-id": "r-2"})])

    await PingRequest(service).emit()
    await PingRequest(service).emit()

    assert transport.calls[1].headers[STATS_HEADER].startswith("MessageId=r-1,")
    assert statistics_cache.pop_next().startswith("MessageId=r-2,")


# ==============================================================================
# Failure translation
# ==============================================================================


async def test_io_error_wrapped_with_cause(make_service):
    cause = TransportIOError("ReadError: connection reset")
    service, _ = make_service([cause])

    with pytest.raises(ServiceRequestError) as exc:
        await PingRequest(service).emit()

    assert exc.value.__cause__ is cause
    assert exc.value.message == "The request failed. ReadError: connection reset"
    assert exc.value.context.operation == "Ping"


async def test_timeout_wrapped_without_invoking_hook(make_service):
    # a fault body on a timeout must not be specialized
    busy = fault_error("ErrorServerBusy", back_off_ms=1000).response
    timeout = TransportProtocolError("timed out", TransportStatus.TIMEOUT, busy)
    service, _ = make_service([timeout])

    with pytest.raises(ServiceRequestError) as exc:
        await PingRequest(service).emit()

    assert exc.value.__cause__ is timeout


async def test_connect_failure_wrapped(make_service):
    failure = TransportProtocolError("refused", TransportStatus.CONNECT_FAILURE)
    service, _ = make_service([failure])

    with pytest.raises(ServiceRequestError) as exc:
        await PingRequest(service).emit()

    assert exc.value.__cause__ is failure
    assert exc.value.context.status_code is None


async def test_server_busy_fault_specialized(make_service):
    service, _ = make_service([fault_error("ErrorServerBusy", "Server busy", back_off_ms=3000)])

    with pytest.raises(ServerBusyError) as exc:
        await PingRequest(service).emit()

    assert exc.value.back_off_ms == 3000
    assert exc.value.context.retry_after_ms == 3000
    assert exc.value.context.status_code == 500
    assert exc.value.error_code == "ErrorServerBusy"


async def test_other_fault_becomes_response_error(make_service):
    service, _ = make_service([fault_error("ErrorAccessDenied", "Access is denied.")])

    with pytest.raises(ServiceResponseError) as exc:
        await PingRequest(service).emit()

    assert not isinstance(exc.value, ServerBusyError)
    assert exc.value.error_code == "ErrorAccessDenied"
    assert exc.value.message == "Access is denied."
    assert exc.value.response.error_details == {"fault_code": "a:ErrorServer"}


async def test_non_fault_500_falls_back_to_request_error(make_service):
    error = protocol_error(500, b"<html>Internal Server Error</html>", {"request-id": "r-7"})
    service, _ = make_service([error])

    with pytest.raises(ServiceRequestError) as exc:
        await PingRequest(service).emit()

    assert exc.value.__cause__ is error
    assert exc.value.context.status_code == 500
    assert exc.value.context.request_id == "r-7"


async def test_fault_body_on_non_500_not_specialized(make_service):
    service, _ = make_service([fault_error("ErrorServerBusy", status_code=503)])

    with pytest.raises(ServiceRequestError):
        await PingRequest(service).emit()


async def test_overridden_hook_is_used(make_service):
    class StrictPing(PingRequest):
        def process_protocol_error(self, error):
            raise ServiceLocalError(f"strict: {error.response.status_code}")

    service, _ = make_service([protocol_error(503)])

    with pytest.raises(ServiceLocalError, match="strict: 503"):
        await StrictPing(service).emit()
