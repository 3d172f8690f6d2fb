"""Service Responses — per-item outcomes and the ordered collection that holds them.

Invariants:
    - One ServiceResponse per requested identifier, in submission order
    - throw_if_necessary() raises only for ServiceResult.ERROR (warnings pass)
    - ServiceResponseCollection is read-only once built
    - overall_result: ERROR if any entry errored, else WARNING if any warned, else SUCCESS
"""

from collections.abc import Iterator, Sequence
from typing import Any, Generic, TypeVar, overload

from bindwire.core.domain_types import ServiceErrorHandling, ServiceResult
from bindwire.core.errors import ServiceResponseError
from bindwire.core.items import Item

NO_ERROR = "NoError"


class ServiceResponse:
    """Outcome of one item within a multi-response request."""

    def __init__(
        self,
        result: ServiceResult = ServiceResult.SUCCESS,
        error_code: str = NO_ERROR,
        error_message: str | None = None,
        error_details: dict[str, Any] | None = None,
    ):
        self.result = result
        self.error_code = error_code
        self.error_message = error_message
        self.error_details = error_details or {}

    @property
    def succeeded(self) -> bool:
        return self.result != ServiceResult.ERROR

    def throw_if_necessary(self) -> None:
        if self.result == ServiceResult.ERROR:
            raise ServiceResponseError(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(result={self.result.value}, error_code={self.error_code})"


class GetItemResponse(ServiceResponse):
    """Per-item response of a GetItem call; `item` is None on error."""

    def __init__(self, item: Item | None = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.item = item


TResponse = TypeVar("TResponse", bound=ServiceResponse)


class ServiceResponseCollection(Sequence, Generic[TResponse]):
    """Ordered, read-only responses plus the error handling mode that produced them."""

    def __init__(
        self,
        responses: Sequence[TResponse],
        error_handling: ServiceErrorHandling,
    ):
        self._responses: tuple[TResponse, ...] = tuple(responses)
        self.error_handling = error_handling

    @overload
    def __getitem__(self, index: int) -> TResponse: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[TResponse, ...]: ...

    def __getitem__(self, index):
        return self._responses[index]

    def __len__(self) -> int:
        return len(self._responses)

    def __iter__(self) -> Iterator[TResponse]:
        return iter(self._responses)

    @property
    def overall_result(self) -> ServiceResult:
        results = {r.result for r in self._responses}
        if ServiceResult.ERROR in results:
            return ServiceResult.ERROR
        if ServiceResult.WARNING in results:
            return ServiceResult.WARNING
        return ServiceResult.SUCCESS

    def __repr__(self) -> str:
        return (
            f"ServiceResponseCollection(count={len(self)}, "
            f"overall_result={self.overall_result.value}, "
            f"error_handling={self.error_handling.value})"
        )
