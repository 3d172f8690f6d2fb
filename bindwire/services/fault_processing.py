"""Fault Processing — specializes protocol failures whose body carries a service fault.

Invariants:
    - Only status 500 with a decodable FaultEnvelope body is specialized
    - ErrorServerBusy → ServerBusyError (back-off surfaced as retry_after_ms)
    - Any other fault → ServiceResponseError with the fault's code and message
    - Returns None when nothing applies; the caller applies the generic fallback
"""

import logging

from pydantic import ValidationError

from bindwire.core.domain_types import ServiceResult
from bindwire.core.errors import ErrorContext, ServerBusyError, ServiceResponseError
from bindwire.core.responses import ServiceResponse
from bindwire.infrastructure.transport import TransportResponse
from bindwire.schemas.wire import FaultEnvelope

logger = logging.getLogger(__name__)

INTERNAL_SERVER_ERROR = 500
SERVER_BUSY = "ErrorServerBusy"


def read_fault(response: TransportResponse) -> FaultEnvelope | None:
    """Decode a fault envelope from the body, or None if it is not one."""
    if not response.content:
        return None
    try:
        return FaultEnvelope.model_validate_json(response.content)
    except ValidationError:
        logger.debug(
            "Error response body is not a fault envelope",
            extra={"status_code": response.status_code},
        )
        return None


def raise_for_fault(response: TransportResponse, operation: str | None = None) -> None:
    if response.status_code != INTERNAL_SERVER_ERROR:
        return

    envelope = read_fault(response)
    if envelope is None:
        return

    fault = envelope.fault
    service_response = ServiceResponse(
        result=ServiceResult.ERROR,
        error_code=fault.response_code,
        error_message=fault.message,
        error_details={"fault_code": fault.fault_code} if fault.fault_code else None,
    )
    context = ErrorContext(operation=operation, status_code=response.status_code)

    logger.warning(
        f"Service fault: {fault.response_code}",
        extra={"operation": operation, "error_code": fault.response_code},
    )
    if fault.response_code == SERVER_BUSY:
        raise ServerBusyError(service_response, fault.back_off_ms, context)
    raise ServiceResponseError(service_response, context)
