"""Transport — wire request/response types, failure taxonomy and the httpx adapter.

Invariants:
    - Transport.send() raises only TransportProtocolError or TransportIOError
    - TransportProtocolError carries the response when the server answered (non-2xx)
    - Non-2xx responses are failures: send() never returns them
    - No httpx exception type escapes HttpxTransport, building the request included

Design Decisions:
    - Headers use httpx.Headers: case-insensitive lookup for request-id discovery
    - Failure status mirrors the classic web-exception split: PROTOCOL_ERROR
      (server answered), TIMEOUT, CONNECT_FAILURE; read/write breakage is I/O
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

import httpx

from bindwire.config import ClientSettings

logger = logging.getLogger(__name__)


@dataclass
class TransportRequest:
    """Transport-ready request produced by the payload-build step."""
    method: str
    url: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes = b""


@dataclass
class TransportResponse:
    """Raw response as received from the transport."""
    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes = b""

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.content)


class TransportStatus(str, Enum):
    """Why a TransportProtocolError was raised."""
    PROTOCOL_ERROR = "protocol_error"
    TIMEOUT = "timeout"
    CONNECT_FAILURE = "connect_failure"


class TransportProtocolError(Exception):
    """Protocol-level failure; `response` is set when the server answered."""

    def __init__(
        self,
        message: str,
        status: TransportStatus = TransportStatus.PROTOCOL_ERROR,
        response: TransportResponse | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.response = response


class TransportIOError(Exception):
    """I/O failure while sending or reading; no response is available."""


class Transport(Protocol):
    async def send(self, request: TransportRequest) -> TransportResponse: ...

    async def aclose(self) -> None: ...


def build_async_client(
    settings: ClientSettings,
    *,
    extra_headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create an httpx.AsyncClient with the client's timeout and default headers."""
    headers = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers=headers,
    )


class HttpxTransport:
    """Transport over httpx.AsyncClient. Owns the client unless one is supplied."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        settings: ClientSettings | None = None,
    ):
        if client is None:
            client = build_async_client(settings or ClientSettings())
            self._owns_client = True
        else:
            self._owns_client = False
        self.client = client

    async def send(self, request: TransportRequest) -> TransportResponse:
        try:
            http_request = self.client.build_request(
                request.method, request.url,
                headers=request.headers, content=request.content,
            )
            http_response = await self.client.send(http_request)
        except httpx.TimeoutException as e:
            raise TransportProtocolError(
                f"The operation has timed out: {e}", TransportStatus.TIMEOUT,
            ) from e
        except httpx.ConnectError as e:
            raise TransportProtocolError(
                f"Unable to connect to the remote server: {e}",
                TransportStatus.CONNECT_FAILURE,
            ) from e
        except httpx.TransportError as e:
            raise TransportIOError(f"{type(e).__name__}: {e}") from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            # decoding and redirect failures, malformed URLs
            raise TransportIOError(f"{type(e).__name__}: {e}") from e

        response = TransportResponse(
            status_code=http_response.status_code,
            headers=http_response.headers,
            content=http_response.content,
        )
        if not http_response.is_success:
            logger.debug(
                f"Remote server returned an error: ({response.status_code})",
                extra={"status_code": response.status_code},
            )
            raise TransportProtocolError(
                f"The remote server returned an error: ({response.status_code}) "
                f"{http_response.reason_phrase}.",
                TransportStatus.PROTOCOL_ERROR,
                response,
            )
        return response

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
