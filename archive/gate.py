"""Request gate.

Checks the request method and payload shape before any network call is
made. Nothing here has side effects beyond reading the request.
"""

from typing import Any

from pydantic import ValidationError

from archive.errors import EmptyBatchError, InvalidBatchError, MethodNotAllowedError
from archive.models import ArchiveBatch
from core.observability.logging import get_logger

logger = get_logger(__name__)

ALLOWED_METHOD = "POST"


def check_method(method: str) -> None:
    """Raise MethodNotAllowedError unless ``method`` is POST."""
    if (method or "").upper() != ALLOWED_METHOD:
        raise MethodNotAllowedError()


def extract_batch(payload: Any) -> ArchiveBatch:
    """Pull the record batch out of a request body.

    Args:
        payload: Decoded JSON body, or None when the body was absent or
            not JSON

    Raises:
        EmptyBatchError: ``data`` is missing, null, empty or another falsy
            value ("", 0, false)
        InvalidBatchError: ``data`` is not a list of valid records
    """
    data = payload.get("data") if isinstance(payload, dict) else None
    if not data and not isinstance(data, dict):
        raise EmptyBatchError()

    if not isinstance(data, list):
        logger.warning(f"Rejected archive payload: 'data' is {type(data).__name__}, not a list")
        raise InvalidBatchError(detail=f"expected a list, got {type(data).__name__}")

    try:
        return ArchiveBatch.model_validate(data)
    except ValidationError as e:
        logger.warning(
            "Rejected archive payload: record validation failed",
            extra_fields={"error_count": e.error_count(), "errors": e.errors(include_input=False)},
        )
        raise InvalidBatchError(detail=str(e)) from e
