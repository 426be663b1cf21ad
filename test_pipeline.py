"""
Archive Pipeline Tests

Drives the pipeline and request handler against mocked Graph boundaries:
1. A successful run authenticates, resolves, serializes and uploads once
2. A failing step stops every later step
3. The handler answers gate failures without touching the pipeline
4. Downstream failures map to the generic 500 body
"""

import asyncio
import re
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from archive.errors import (
    AmbiguousCollectionError,
    AuthError,
    CollectionNotFoundError,
    ResolutionError,
    WriteError,
)
from archive.handler import handle_archive_request
from archive.models import ArchiveBatch, ArchiveResult, ArtifactName
from archive.pipeline import ArchivePipeline
from connectors.sharepoint.graph_auth import GraphAuthConfig, GraphAuthProvider, GraphToken
from connectors.sharepoint.graph_client import (
    GraphApiClient,
    GraphApiConfig,
    GraphApiError,
    GraphAuthenticationError,
    GraphNotFoundError,
)
from core.config import ArchiveSettings

ARTIFACT_FILE = re.compile(r"^Inventory-Comparison-\d{4}-\d{2}-\d{2}-[0-9a-z]{9}\.csv$")

RECORDS = [
    {
        "itemId": "A1",
        "systemQty": 10,
        "initialPhysicalQty": 8,
        "finalPhysicalQty": 10,
        "difference": 0,
        "status": "MATCH",
        "recountHistory": [8, 10],
    },
    {
        "itemId": "B7",
        "systemQty": 4,
        "initialPhysicalQty": 3,
        "finalPhysicalQty": 3,
        "difference": -1,
        "status": "DISCREPANCY",
        "recountHistory": [],
    },
]

EXPECTED_CSV = (
    "ItemID,SystemBalance,InitialPhysical,FinalPhysical,Difference,Status,RecountHistory\n"
    '"A1",10,8,10,0,"MATCH","8|10"\n'
    '"B7",4,3,3,-1,"DISCREPANCY",""'
)


def make_settings(**overrides) -> ArchiveSettings:
    values = dict(tenant_id="tenant-1", client_id="client-1", client_secret="s3cret")
    values.update(overrides)
    return ArchiveSettings(**values)


def make_auth(error=None):
    auth = MagicMock()
    if error:
        auth.authenticate = AsyncMock(side_effect=error)
    else:
        auth.authenticate = AsyncMock(
            return_value=GraphToken(access_token="abc", token_type="Bearer", expires_in=3600)
        )
    return auth


def make_client(sites=None, upload_error=None, lookup_error=None):
    client = MagicMock()
    client.connect = AsyncMock()
    client.disconnect = AsyncMock()
    if lookup_error:
        client.list_sites = AsyncMock(side_effect=lookup_error)
    else:
        client.list_sites = AsyncMock(
            return_value=[{"id": "site-1"}] if sites is None else sites
        )
    if upload_error:
        client.upload_content = AsyncMock(side_effect=upload_error)
    else:
        client.upload_content = AsyncMock(return_value={"id": "item-1", "size": 120})
    return client


def make_pipeline(settings=None, auth=None, client=None):
    auth = auth or make_auth()
    client = client or make_client()
    pipeline = ArchivePipeline(settings or make_settings(), auth_provider=auth, api_client=client)
    return pipeline, auth, client


def graph_response(body: str, status: int = 200):
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=body)
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)
    return context


def batch() -> ArchiveBatch:
    return ArchiveBatch.model_validate(RECORDS)


class TestArchivePipeline:
    """End-to-end pipeline behaviour with mocked Graph calls."""

    def test_successful_run(self):
        pipeline, auth, client = make_pipeline()

        result = asyncio.run(pipeline.run(batch()))

        assert ARTIFACT_FILE.match(result.artifact.file_name)
        assert result.site_id == "site-1"
        assert result.row_count == 2
        assert result.message == f"Successfully archived {result.artifact.file_name} to SharePoint."

        auth.authenticate.assert_awaited_once()
        client.list_sites.assert_awaited_once_with(
            filter="displayName eq 'Operations Stock Count'"
        )
        client.upload_content.assert_awaited_once_with(
            "site-1",
            "Documents",
            result.artifact.file_name,
            EXPECTED_CSV.encode("utf-8"),
            content_type="text/csv",
        )
        client.disconnect.assert_awaited_once()

    def test_configured_site_and_library(self):
        settings = make_settings(site_name="Stock Count Test", library_name="Archive")
        pipeline, _, client = make_pipeline(settings=settings)

        asyncio.run(pipeline.run(batch()))

        client.list_sites.assert_awaited_once_with(filter="displayName eq 'Stock Count Test'")
        assert client.upload_content.await_args.args[1] == "Archive"

    def test_short_lived_token_sent_on_every_call(self):
        token = GraphToken(access_token="short", token_type="Bearer", expires_in=240)
        auth = GraphAuthProvider(GraphAuthConfig(
            tenant_id="tenant-1", client_id="client-1", client_secret="s3cret"
        ))
        session = MagicMock()
        session.request.side_effect = [
            graph_response('{"value": [{"id": "site-1"}]}'),
            graph_response('{"id": "item-1"}', status=201),
        ]
        session.close = AsyncMock()
        pipeline = ArchivePipeline(
            make_settings(),
            auth_provider=auth,
            api_client=GraphApiClient(auth, GraphApiConfig()),
        )

        with patch.object(GraphAuthProvider, "_fetch_token", AsyncMock(return_value=token)), \
                patch("connectors.sharepoint.graph_client.aiohttp.ClientSession", return_value=session):
            result = asyncio.run(pipeline.run(batch()))

        assert result.site_id == "site-1"
        headers = [c.kwargs["headers"]["Authorization"] for c in session.request.call_args_list]
        assert headers == ["Bearer short", "Bearer short"]
        session.close.assert_awaited_once()

    def test_token_exchange_failure_stops_pipeline(self):
        auth = make_auth(error=GraphAuthenticationError("Token request failed: 401 - invalid_client"))
        pipeline, _, client = make_pipeline(auth=auth)

        with pytest.raises(AuthError, match="invalid_client"):
            asyncio.run(pipeline.run(batch()))

        client.connect.assert_not_awaited()
        client.list_sites.assert_not_awaited()
        client.upload_content.assert_not_awaited()

    def test_missing_credentials(self):
        settings = make_settings(client_secret="", tenant_id="")
        pipeline, auth, client = make_pipeline(settings=settings)

        with pytest.raises(AuthError) as exc_info:
            asyncio.run(pipeline.run(batch()))

        assert "SHAREPOINT_TENANT_ID" in str(exc_info.value)
        assert "SHAREPOINT_CLIENT_SECRET" in str(exc_info.value)
        auth.authenticate.assert_not_awaited()
        client.list_sites.assert_not_awaited()

    def test_site_not_found_stops_before_write(self):
        pipeline, _, client = make_pipeline(client=make_client(sites=[]))

        with pytest.raises(CollectionNotFoundError) as exc_info:
            asyncio.run(pipeline.run(batch()))

        assert str(exc_info.value) == "SharePoint site 'Operations Stock Count' not found."
        client.upload_content.assert_not_awaited()
        client.disconnect.assert_awaited_once()

    def test_lookup_transport_failure(self):
        client = make_client(lookup_error=GraphApiError("Request failed: timed out"))
        pipeline, _, _ = make_pipeline(client=client)

        with pytest.raises(ResolutionError, match="timed out"):
            asyncio.run(pipeline.run(batch()))
        client.upload_content.assert_not_awaited()

    def test_multiple_sites_first_wins(self):
        client = make_client(sites=[{"id": "site-a"}, {"id": "site-b"}])
        pipeline, _, _ = make_pipeline(client=client)

        result = asyncio.run(pipeline.run(batch()))

        assert result.site_id == "site-a"
        assert client.upload_content.await_args.args[0] == "site-a"

    def test_multiple_sites_strict(self):
        client = make_client(sites=[{"id": "site-a"}, {"id": "site-b"}])
        pipeline, _, _ = make_pipeline(settings=make_settings(strict_site_match=True), client=client)

        with pytest.raises(AmbiguousCollectionError) as exc_info:
            asyncio.run(pipeline.run(batch()))

        assert exc_info.value.match_count == 2
        client.upload_content.assert_not_awaited()

    def test_upload_failure_becomes_write_error(self):
        client = make_client(
            upload_error=GraphNotFoundError("Resource not found: Item not found", 404)
        )
        pipeline, _, _ = make_pipeline(client=client)

        with pytest.raises(WriteError, match="Item not found"):
            asyncio.run(pipeline.run(batch()))
        client.disconnect.assert_awaited_once()

    def test_escape_quotes_setting(self):
        records = [dict(RECORDS[0], itemId='3/4" valve')]
        pipeline, _, client = make_pipeline(settings=make_settings(escape_quotes=True))

        asyncio.run(pipeline.run(ArchiveBatch.model_validate(records)))

        body = client.upload_content.await_args.args[3].decode("utf-8")
        assert body.split("\n")[1].startswith('"3/4"" valve",')

    def test_custom_destination_label(self):
        pipeline, _, _ = make_pipeline(settings=make_settings(destination_label="Ops SharePoint"))

        result = asyncio.run(pipeline.run(batch()))

        assert result.message.endswith(" to Ops SharePoint.")


class TestArchiveHandler:
    """Request handling and response mapping."""

    @staticmethod
    def _pipeline(result=None, error=None):
        pipeline = MagicMock()
        if error:
            pipeline.run = AsyncMock(side_effect=error)
        else:
            pipeline.run = AsyncMock(return_value=result or ArchiveResult(
                artifact=ArtifactName("Inventory-Comparison-2024-05-01-0a1b2c3d4"),
                site_id="site-1",
                destination="SharePoint",
                row_count=2,
            ))
        return pipeline

    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
    def test_method_not_allowed(self, method):
        pipeline = self._pipeline()

        response = asyncio.run(handle_archive_request(method, {"data": RECORDS}, pipeline))

        assert response.status_code == 405
        assert response.body == {"message": "Method Not Allowed"}
        pipeline.run.assert_not_awaited()

    @pytest.mark.parametrize("payload", [None, {}, {"data": []}])
    def test_empty_batch(self, payload):
        pipeline = self._pipeline()

        response = asyncio.run(handle_archive_request("POST", payload, pipeline))

        assert response.status_code == 400
        assert response.body == {"message": "No data received to archive."}
        pipeline.run.assert_not_awaited()

    def test_invalid_records(self):
        pipeline = self._pipeline()

        response = asyncio.run(
            handle_archive_request("POST", {"data": [{"itemId": "A1"}]}, pipeline)
        )

        assert response.status_code == 400
        assert response.body == {"message": "Invalid data received to archive."}
        pipeline.run.assert_not_awaited()

    def test_success(self):
        pipeline = self._pipeline()

        response = asyncio.run(handle_archive_request("POST", {"data": RECORDS}, pipeline))

        assert response.status_code == 200
        assert response.body == {
            "message": "Successfully archived Inventory-Comparison-2024-05-01-0a1b2c3d4.csv to SharePoint."
        }
        archived = pipeline.run.await_args.args[0]
        assert [r.item_id for r in archived] == ["A1", "B7"]

    @pytest.mark.parametrize("error", [
        AuthError("Failed to acquire access token."),
        CollectionNotFoundError("Operations Stock Count"),
        WriteError("API error 507: Insufficient storage"),
        RuntimeError("unexpected"),
    ])
    def test_downstream_failure(self, error):
        pipeline = self._pipeline(error=error)

        response = asyncio.run(handle_archive_request("POST", {"data": RECORDS}, pipeline))

        assert response.status_code == 500
        assert response.body == {"message": "An error occurred.", "error": str(error)}

    def test_site_not_found_message(self):
        pipeline, _, client = make_pipeline(client=make_client(sites=[]))

        response = asyncio.run(handle_archive_request("POST", {"data": RECORDS}, pipeline))

        assert response.status_code == 500
        assert response.body["error"] == "SharePoint site 'Operations Stock Count' not found."
        client.upload_content.assert_not_awaited()
