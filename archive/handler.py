"""Archive request handling.

Maps a request (method + decoded JSON body) to a status code and JSON
body. Gate failures are answered before the pipeline is touched; any
failure after that is reported as a generic 500 carrying the error text.
"""

from dataclasses import dataclass
from typing import Any, Dict

from archive.errors import ArchiveError
from archive.gate import check_method, extract_batch
from archive.pipeline import ArchivePipeline
from core.observability.logging import get_logger

logger = get_logger(__name__)

ERROR_MESSAGE = "An error occurred."


@dataclass
class ArchiveResponse:
    """Status code and JSON body returned to the caller."""
    status_code: int
    body: Dict[str, Any]


async def handle_archive_request(
    method: str,
    payload: Any,
    pipeline: ArchivePipeline,
) -> ArchiveResponse:
    """Run one archive request.

    Args:
        method: HTTP method of the request
        payload: Decoded JSON body (None if absent or not JSON)
        pipeline: Pipeline to run once the request passes the gate
    """
    try:
        check_method(method)
        batch = extract_batch(payload)
    except ArchiveError as e:
        return ArchiveResponse(e.status_code, {"message": e.message})

    try:
        result = await pipeline.run(batch)
    except Exception as e:
        logger.exception(f"Archive failed: {type(e).__name__}")
        return ArchiveResponse(500, {"message": ERROR_MESSAGE, "error": str(e)})

    logger.info(
        f"Successfully uploaded {result.artifact.file_name}.",
        extra_fields={"rows": result.row_count, "site_id": result.site_id},
    )
    return ArchiveResponse(200, {"message": result.message})
