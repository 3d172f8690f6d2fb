"""Parameter validation and internal assertions.

Invariants:
    - validate_param / validate_param_collection raise ArgumentValidationError only
    - With `expected` given, a value of any other type is rejected before
      its own validation runs
    - Self-validating values (anything with validate()) are validated in place;
      their ServiceValidationError is chained as __cause__
    - validate_param_collection rejects a bare string before iterating it and
      returns the entries it validated as a list
    - ensure_invariant raises InternalConsistencyError, never AssertionError
"""

from collections.abc import Iterable
from typing import Any

from bindwire.core.errors import (
    ArgumentValidationError,
    InternalConsistencyError,
    ServiceValidationError,
)


def validate_param(param: Any, param_name: str, expected: type | None = None) -> None:
    """Reject None, wrong types, empty strings and values whose own validate() fails."""
    if param is None:
        raise ArgumentValidationError("Argument cannot be null", param_name)
    if expected is not None and not isinstance(param, expected):
        raise ArgumentValidationError(
            f"Argument must be of type {expected.__name__}, got {type(param).__name__}", param_name,
        )
    if isinstance(param, str):
        if not param.strip():
            raise ArgumentValidationError("Argument cannot be empty", param_name)
        return
    validate = getattr(param, "validate", None)
    if callable(validate):
        try:
            validate()
        except ServiceValidationError as e:
            raise ArgumentValidationError(f"Validation failed: {e.message}", param_name) from e


def validate_param_collection(
    collection: Iterable[Any] | None,
    param_name: str,
    expected: type | None = None,
) -> list[Any]:
    """Reject a missing, string or empty collection; validate and return every entry."""
    if collection is None:
        raise ArgumentValidationError("Argument cannot be null", param_name)
    if isinstance(collection, (str, bytes)):
        raise ArgumentValidationError("Argument must be a collection, not a string", param_name)
    if not isinstance(collection, Iterable):
        raise ArgumentValidationError("Argument must be a collection", param_name)

    entries = []
    for index, entry in enumerate(collection):
        validate_param(entry, f"{param_name}[{index}]", expected)
        entries.append(entry)

    if not entries:
        raise ArgumentValidationError("The collection is empty", param_name)
    return entries


def ensure_invariant(condition: bool, caller: str, message: str) -> None:
    if not condition:
        raise InternalConsistencyError(caller, message)
