"""Shared domain building blocks.

- Result type for explicit error handling
- Typed failures and the storage exception

Example usage:
    >>> from trellis.domain.shared import Err, Ok, TrellisFailure
    >>>
    >>> def find(object_id: str):
    ...     if object_id == "missing":
    ...         return Err(TrellisFailure.not_found(object_id))
    ...     return Ok(object_id)
"""

from trellis.domain.shared.errors import (
    VALIDATION_KINDS,
    ErrorKind,
    StorageError,
    TrellisFailure,
)
from trellis.domain.shared.result import Err, Ok, Result, flat_map, is_err, is_ok

__all__ = [
    # Result
    "Ok",
    "Err",
    "Result",
    "is_ok",
    "is_err",
    "flat_map",
    # Failures
    "ErrorKind",
    "TrellisFailure",
    "StorageError",
    "VALIDATION_KINDS",
]
