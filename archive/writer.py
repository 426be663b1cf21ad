"""Archive writer.

Names the artifact and uploads the serialized body to the site's document
library in a single authenticated PUT.
"""

from typing import Optional

from archive.errors import WriteError
from archive.models import ArtifactName
from archive.naming import create_artifact_name
from connectors.sharepoint.graph_client import GraphApiClient, GraphApiError
from core.observability.logging import get_logger

logger = get_logger(__name__)


class ArchiveWriter:
    """Uploads archive bodies under ``<library_name>/`` on a site drive."""

    def __init__(self, client: GraphApiClient, library_name: str = "Documents"):
        self._client = client
        self.library_name = library_name

    async def write(
        self,
        site_id: str,
        body: str,
        name: Optional[ArtifactName] = None,
    ) -> ArtifactName:
        """Upload ``body`` and return the name it was stored under.

        Args:
            site_id: Resolved Graph site id
            body: Serialized CSV text
            name: Artifact name to use (a fresh one is generated if omitted)

        Raises:
            WriteError: Graph rejected the upload or it could not be sent
        """
        name = name or create_artifact_name()

        try:
            item = await self._client.upload_content(
                site_id,
                self.library_name,
                name.file_name,
                body.encode("utf-8"),
                content_type="text/csv",
            )
        except GraphApiError as e:
            raise WriteError(str(e)) from e

        logger.info(
            f"Uploaded {name.file_name}",
            extra_fields={"drive_item_id": item.get("id"), "size_bytes": item.get("size")},
        )
        return name
