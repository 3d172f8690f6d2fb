"""Multi-Response Request — runs a request that yields one response per target and applies the error handling mode.

Invariants:
    - Parsed collection preserves response-message order (== submission order)
    - Message count must equal get_expected_response_message_count(), otherwise
      ServiceDeserializationError
    - THROW_ON_ERROR: exactly one response (InternalConsistencyError otherwise),
      and an error response is raised, never returned
    - RETURN_ERRORS: the full collection is returned unfiltered
"""

import abc
import logging
from typing import TYPE_CHECKING, Generic

from pydantic import ValidationError

from bindwire.core.domain_types import ServiceErrorHandling
from bindwire.core.errors import ErrorContext, ServiceDeserializationError
from bindwire.core.responses import ServiceResponseCollection, TResponse
from bindwire.core.validation import ensure_invariant
from bindwire.infrastructure.transport import TransportResponse
from bindwire.schemas.wire import ResponseEnvelope, ResponseMessage
from bindwire.services.service_request import ServiceRequestBase

if TYPE_CHECKING:
    from bindwire.services.item_service import ItemService

logger = logging.getLogger(__name__)


class MultiResponseServiceRequest(ServiceRequestBase, Generic[TResponse]):
    """Service request whose response holds one message per requested target."""

    def __init__(self, service: "ItemService", error_handling_mode: ServiceErrorHandling):
        super().__init__(service)
        self._error_handling_mode = ServiceErrorHandling(error_handling_mode)

    @property
    def error_handling_mode(self) -> ServiceErrorHandling:
        return self._error_handling_mode

    @abc.abstractmethod
    def get_expected_response_message_count(self) -> int: ...

    @abc.abstractmethod
    def create_service_response(self, message: ResponseMessage, index: int) -> TResponse: ...

    def parse_response(self, response: TransportResponse) -> ServiceResponseCollection[TResponse]:
        try:
            envelope = ResponseEnvelope.model_validate_json(response.content)
        except ValidationError as e:
            raise ServiceDeserializationError(
                f"{self.operation_name} response body is not a valid response envelope: "
                f"{e.error_count()} validation error(s)",
                self._error_context(response),
            ) from e

        expected = self.get_expected_response_message_count()
        messages = envelope.response_messages
        if len(messages) != expected:
            raise ServiceDeserializationError(
                f"{self.operation_name} expected {expected} response message(s), "
                f"received {len(messages)}",
                self._error_context(response),
            )

        return ServiceResponseCollection(
            [self.create_service_response(m, i) for i, m in enumerate(messages)],
            self._error_handling_mode,
        )

    async def internal_execute(self) -> ServiceResponseCollection[TResponse]:
        response = await self.emit()
        return self.parse_response(response)

    async def execute(self) -> ServiceResponseCollection[TResponse]:
        responses = await self.internal_execute()

        if self._error_handling_mode == ServiceErrorHandling.THROW_ON_ERROR:
            ensure_invariant(
                len(responses) == 1,
                "MultiResponseServiceRequest.execute",
                "ServiceErrorHandling.THROW_ON_ERROR error handling is only valid for singleton request",
            )
            first = responses[0]
            if not first.succeeded:
                logger.info(
                    f"{self.operation_name} returned {first.error_code}",
                    extra={"operation": self.operation_name, "error_code": first.error_code},
                )
            first.throw_if_necessary()

        return responses

    def _error_context(self, response: TransportResponse | None) -> ErrorContext:
        ctx = super()._error_context(response)
        ctx.debug_info = {"error_handling": self._error_handling_mode.value}
        return ctx
