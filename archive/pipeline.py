"""Archive pipeline.

Runs one archive invocation end to end:

    authenticate -> resolve site -> serialize -> upload

Each step either returns a usable result or raises an ``ArchiveError``;
nothing is retried and a failure aborts the remaining steps.
"""

import uuid
from contextlib import contextmanager
from typing import Optional

from archive.errors import AuthError
from archive.models import ArchiveBatch, ArchiveResult, ArtifactName
from archive.naming import create_artifact_name
from archive.resolver import CollectionResolver
from archive.serializer import serialize
from archive.writer import ArchiveWriter
from connectors.sharepoint.graph_auth import GraphAuthConfig, GraphAuthProvider
from connectors.sharepoint.graph_client import (
    GraphApiClient,
    GraphApiConfig,
    GraphAuthenticationError,
)
from core.config import ArchiveSettings
from core.observability.logging import (
    get_logger,
    log_stage_complete,
    log_stage_error,
    log_stage_start,
    with_correlation,
)
from core.security.token_cache import InMemoryTokenCache

logger = get_logger(__name__)


@contextmanager
def _stage(name: str, **fields):
    """Log start, completion or failure of a pipeline step."""
    with with_correlation(stage=name):
        started = log_stage_start(name, **fields)
        try:
            yield
        except Exception as e:
            log_stage_error(name, str(e), error_type=type(e).__name__)
            raise
        log_stage_complete(name, started)


class ArchivePipeline:
    """Archives a batch of reconciliation records to SharePoint.

    A pipeline instance holds no state between runs other than what its
    token cache (if any) shares; the auth provider and API client are
    created per pipeline and the app builds one pipeline per request.

    Usage:
        pipeline = ArchivePipeline(load_settings())
        result = await pipeline.run(batch)
        print(result.message)
    """

    def __init__(
        self,
        settings: ArchiveSettings,
        token_cache: Optional[InMemoryTokenCache] = None,
        auth_provider: Optional[GraphAuthProvider] = None,
        api_client: Optional[GraphApiClient] = None,
    ):
        """Initialize the pipeline.

        Args:
            settings: Service configuration
            token_cache: Shared token cache (fresh exchange per run if None)
            auth_provider: Override the Graph auth provider
            api_client: Override the Graph API client
        """
        self.settings = settings

        if auth_provider is None:
            auth_provider = GraphAuthProvider(
                GraphAuthConfig(
                    tenant_id=settings.tenant_id,
                    client_id=settings.client_id,
                    client_secret=settings.client_secret,
                    scope=settings.scope,
                    authority_url=settings.authority_url,
                    timeout_seconds=settings.timeout_seconds,
                ),
                token_cache=token_cache,
            )
        self._auth_provider = auth_provider

        if api_client is None:
            api_client = GraphApiClient(
                auth_provider,
                GraphApiConfig(
                    base_url=settings.graph_base_url,
                    timeout_seconds=settings.timeout_seconds,
                ),
            )
        self._api_client = api_client

    async def run(self, batch: ArchiveBatch) -> ArchiveResult:
        """Archive ``batch`` and describe where it went.

        Raises:
            AuthError: No access token
            ResolutionError: Site lookup failed or found nothing
            WriteError: Upload failed
        """
        invocation_id = uuid.uuid4().hex[:12]

        with with_correlation(invocation_id=invocation_id, site_name=self.settings.site_name):
            logger.info(f"Archiving {len(batch)} records")

            with _stage("authenticate"):
                await self._authenticate()

            await self._api_client.connect()
            try:
                with _stage("resolve"):
                    resolver = CollectionResolver(
                        self._api_client, strict=self.settings.strict_site_match
                    )
                    site_id = await resolver.resolve(self.settings.site_name)

                with _stage("serialize", rows=len(batch)):
                    body = serialize(batch, escape_quotes=self.settings.escape_quotes)

                artifact = await self._write(site_id, body)
            finally:
                await self._api_client.disconnect()

        return ArchiveResult(
            artifact=artifact,
            site_id=site_id,
            destination=self.settings.destination_label,
            row_count=len(batch),
        )

    async def _authenticate(self) -> None:
        missing = self.settings.missing_credentials()
        if missing:
            raise AuthError(f"Missing client credentials: {', '.join(missing)}")

        try:
            await self._auth_provider.authenticate()
        except GraphAuthenticationError as e:
            raise AuthError(str(e)) from e

    async def _write(self, site_id: str, body: str) -> ArtifactName:
        writer = ArchiveWriter(self._api_client, self.settings.library_name)
        name = create_artifact_name()
        with with_correlation(artifact_name=name.file_name):
            with _stage("upload", size_bytes=len(body.encode("utf-8"))):
                return await writer.write(site_id, body, name)
