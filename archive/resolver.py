"""Collection resolver.

Looks up the SharePoint site whose display name equals the configured
name and returns its Graph site id.
"""

from archive.errors import AmbiguousCollectionError, CollectionNotFoundError, ResolutionError
from connectors.sharepoint.graph_client import GraphApiClient, GraphApiError, odata_literal
from core.observability.logging import get_logger

logger = get_logger(__name__)


class CollectionResolver:
    """Resolves a site display name to a site id.

    When several sites share the display name the first one Graph returns
    is used, unless ``strict`` is set, in which case the lookup fails.
    """

    def __init__(self, client: GraphApiClient, strict: bool = False):
        self._client = client
        self.strict = strict

    async def resolve(self, site_name: str) -> str:
        """Return the id of the site named ``site_name``.

        Raises:
            CollectionNotFoundError: No site has that display name
            AmbiguousCollectionError: Several do and ``strict`` is set
            ResolutionError: The lookup call itself failed
        """
        try:
            sites = await self._client.list_sites(
                filter=f"displayName eq {odata_literal(site_name)}"
            )
        except GraphApiError as e:
            raise ResolutionError(str(e)) from e

        if not sites:
            raise CollectionNotFoundError(site_name)

        if len(sites) > 1:
            if self.strict:
                raise AmbiguousCollectionError(site_name, len(sites))
            logger.warning(
                f"{len(sites)} sites named '{site_name}'; using the first",
                extra_fields={"site_ids": [s.get("id") for s in sites]},
            )

        return sites[0]["id"]
