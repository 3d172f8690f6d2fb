"""Error Hierarchy — typed, categorized exceptions for every bindwire failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Transport failures never escape raw: they surface as ServiceRequestError
      with the original failure chained as __cause__
    - Remote-reported per-item errors surface as ServiceResponseError and keep
      the ServiceResponse that produced them
    - InternalConsistencyError signals client misuse, never a remote condition

Design Decisions:
    - Single hierarchy with BindwireError base: callers catch one type
    - ErrorContext as dataclass: request id / operation travel with the error
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bindwire.core.responses import ServiceResponse


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories."""
    VALIDATION = "validation"
    LOCAL = "local"
    TRANSPORT = "transport"
    REMOTE = "remote"
    DESERIALIZATION = "deserialization"
    TYPE_MISMATCH = "type_mismatch"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for logging and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    request_id: str | None = None
    status_code: int | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class BindwireError(Exception):
    """Base exception for all bindwire errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_dict(self) -> dict:
        """Flatten to a JSON-friendly dict (used in structured logs)."""
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "operation": self.context.operation,
            "request_id": self.context.request_id,
            "retry_after_ms": self.context.retry_after_ms,
        }


# ─── Local Errors (raised before any network activity) ──────────

class ArgumentValidationError(BindwireError):
    """Caller-supplied argument is missing or invalid."""
    def __init__(self, message: str, param_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"{message} (parameter: {param_name})",
            "ARGUMENT_INVALID", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.param_name = param_name


class ServiceValidationError(BindwireError):
    """Request or value object failed its own validation."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "SERVICE_VALIDATION", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )


class ServiceLocalError(BindwireError):
    """Client-side state prevents the call (e.g. missing service URL)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "SERVICE_LOCAL", ErrorCategory.LOCAL,
            ErrorSeverity.ERROR, context,
        )


class ItemTypeNotCompatibleError(BindwireError):
    """Bound item is not a variant of the requested item kind."""
    def __init__(self, actual: str, requested: str, context: ErrorContext | None = None):
        super().__init__(
            f"The item type returned by the service ({actual}) isn't compatible "
            f"with the requested item type ({requested}).",
            "ITEM_TYPE_NOT_COMPATIBLE", ErrorCategory.TYPE_MISMATCH,
            ErrorSeverity.ERROR, context,
        )
        self.actual = actual
        self.requested = requested


class InternalConsistencyError(BindwireError):
    """Internal invariant violated — indicates misuse of the client."""
    def __init__(self, caller: str, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"[{caller}] {message}",
            "INTERNAL_CONSISTENCY", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context,
        )
        self.caller = caller


# ─── Remote / Transport Errors ──────────────────────────────────

class ServiceRequestError(BindwireError):
    """Round-trip to the service failed; the transport failure is __cause__."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"The request failed. {message}",
            "SERVICE_REQUEST_FAILED", ErrorCategory.TRANSPORT,
            ErrorSeverity.CRITICAL, context,
        )


class ServiceResponseError(BindwireError):
    """Service reported an error for the request or for one item."""
    def __init__(self, response: "ServiceResponse", context: ErrorContext | None = None):
        super().__init__(
            response.error_message or response.error_code,
            "SERVICE_RESPONSE_ERROR", ErrorCategory.REMOTE,
            ErrorSeverity.ERROR, context,
        )
        self.response = response
        self.error_code = response.error_code


class ServerBusyError(ServiceResponseError):
    """Service is throttling; retry_after_ms carries the requested back-off."""
    def __init__(
        self,
        response: "ServiceResponse",
        back_off_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = back_off_ms
        super().__init__(response, ctx)
        self.severity = ErrorSeverity.WARNING
        self.back_off_ms = back_off_ms


class ServiceDeserializationError(BindwireError):
    """Response body could not be decoded into the expected envelope."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "SERVICE_DESERIALIZATION", ErrorCategory.DESERIALIZATION,
            ErrorSeverity.CRITICAL, context,
        )
