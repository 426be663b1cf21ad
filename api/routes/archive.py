"""Archive endpoint.

POST /api/archive with ``{"data": [...]}`` writes the records to SharePoint
as a CSV file. The route accepts every common method so that anything
other than POST gets the service's own 405 body.
"""

import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from archive.handler import handle_archive_request
from archive.pipeline import ArchivePipeline

router = APIRouter()

ARCHIVE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def get_pipeline(request: Request) -> ArchivePipeline:
    """Build a pipeline for this request from app-level settings."""
    return ArchivePipeline(
        request.app.state.settings,
        token_cache=request.app.state.token_cache,
    )


async def _read_json(request: Request) -> Any:
    """Decode the request body; None if empty or not JSON."""
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


@router.api_route("/archive", methods=ARCHIVE_METHODS)
async def archive_records(
    request: Request,
    pipeline: ArchivePipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Archive a batch of stock-take reconciliation records.

    **Request body:**
    ```json
    {"data": [{"itemId": "A1", "systemQty": 10, "initialPhysicalQty": 8,
               "finalPhysicalQty": 10, "difference": 0, "status": "MATCH",
               "recountHistory": [8, 10]}]}
    ```

    **Responses:**
    - 200: `{"message": "Successfully archived <file> to SharePoint."}`
    - 400: no (or invalid) data
    - 405: method other than POST
    - 500: `{"message": "An error occurred.", "error": "<detail>"}`
    """
    payload = await _read_json(request) if request.method == "POST" else None
    response = await handle_archive_request(request.method, payload, pipeline)
    return JSONResponse(status_code=response.status_code, content=response.body)
