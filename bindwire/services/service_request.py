"""Service Request — one validated, instrumented wire round-trip with failure translation.

Invariants:
    - emit() order: validate → build request → attach pending client statistics → send
    - At most one pending statistics record is attached per call, appended to any
      existing header value, never replacing it
    - Latency is measured around the transport call only, inside a scope whose
      finally-block runs on success, failure and cancellation
    - With send_client_latencies off, the statistics cache is never touched
    - Transport failures never escape raw: the fault hook may specialize a
      protocol error carrying a response, everything else becomes ServiceRequestError
      with the transport failure as __cause__

Design Decisions:
    - Latency scope as a contextmanager: completion logic lives in one place
    - process_protocol_error is a method so operations can override the hook
    - Operation name derives from the class name (GetItemRequest → GetItem)
"""

import abc
import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from bindwire.core.errors import ErrorContext, ServiceRequestError
from bindwire.infrastructure.client_statistics import format_client_statistic
from bindwire.infrastructure.transport import (
    TransportIOError,
    TransportProtocolError,
    TransportRequest,
    TransportResponse,
    TransportStatus,
)
from bindwire.services.fault_processing import raise_for_fault

if TYPE_CHECKING:
    from bindwire.services.item_service import ItemService

logger = logging.getLogger(__name__)


class _LatencyScope:
    """Holds the response (if any) observed inside a latency scope."""
    __slots__ = ("response",)

    def __init__(self):
        self.response: TransportResponse | None = None


class ServiceRequestBase(abc.ABC):
    """Base of every service operation: validation, payload, emission."""

    def __init__(self, service: "ItemService"):
        self.service = service

    @property
    def operation_name(self) -> str:
        return type(self).__name__.replace("Request", "")

    # -- Collaborator hooks ----------------------------------------------------

    def validate(self) -> None:
        """Raise on malformed request state. Subclasses extend."""
        self.service.validate()

    @abc.abstractmethod
    def get_payload(self) -> dict[str, Any]:
        """Wire payload for this operation."""

    def get_request_headers(self) -> dict[str, str]:
        return {}

    def build_request(self) -> TransportRequest:
        return self.service.prepare_request(self.get_payload(), self.get_request_headers())

    def process_protocol_error(self, error: TransportProtocolError) -> None:
        """May raise a more specific error for a failed response; returning means no special case."""
        raise_for_fault(error.response, self.operation_name)

    # -- Emission --------------------------------------------------------------

    async def emit(self) -> TransportResponse:
        """Validate, build and send this request; returns the raw response."""
        self.validate()
        request = self.build_request()
        if self.service.send_client_latencies:
            self._attach_client_statistics(request)
        return await self._emit_internal(request)

    def _attach_client_statistics(self, request: TransportRequest) -> None:
        record = self.service.statistics_cache.pop_next()
        if not record:
            return
        header = self.service.settings.client_statistics_header
        existing = request.headers.get(header)
        if existing is not None:
            request.headers[header] = existing + record
        else:
            request.headers[header] = record

    async def _emit_internal(self, request: TransportRequest) -> TransportResponse:
        with self._latency_scope() as scope:
            scope.response = await self._get_response(request)
        return scope.response

    @contextmanager
    def _latency_scope(self) -> Iterator[_LatencyScope]:
        scope = _LatencyScope()
        start = time.monotonic()
        try:
            yield scope
        finally:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            request_id = self.find_request_id(scope.response)
            logger.info(
                f"{self.operation_name} completed in {elapsed_ms}ms"
                if scope.response is not None
                else f"{self.operation_name} failed after {elapsed_ms}ms",
                extra={
                    "operation": self.operation_name,
                    "elapsed_ms": elapsed_ms,
                    "request_id": request_id or None,
                    "status_code": scope.response.status_code if scope.response else None,
                },
            )
            if self.service.send_client_latencies:
                self.service.statistics_cache.add(
                    format_client_statistic(request_id, elapsed_ms, self.operation_name),
                )

    async def _get_response(self, request: TransportRequest) -> TransportResponse:
        try:
            return await self.service.transport.send(request)
        except TransportProtocolError as e:
            if e.status == TransportStatus.PROTOCOL_ERROR and e.response is not None:
                self.process_protocol_error(e)
            raise ServiceRequestError(str(e), self._error_context(e.response)) from e
        except TransportIOError as e:
            raise ServiceRequestError(str(e), self._error_context(None)) from e

    # -- Helpers ---------------------------------------------------------------

    def find_request_id(self, response: TransportResponse | None) -> str:
        """First non-empty value among the configured request-id headers, else ""."""
        if response is None or response.headers is None:
            return ""
        for name in self.service.settings.request_id_headers:
            value = response.headers.get(name)
            if value:
                return value
        return ""

    def _error_context(self, response: TransportResponse | None) -> ErrorContext:
        return ErrorContext(
            operation=self.operation_name,
            request_id=self.find_request_id(response) or None,
            status_code=response.status_code if response is not None else None,
        )
