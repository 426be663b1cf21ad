"""SharePoint Connector Package.

Talks to SharePoint Online through Microsoft Graph.
"""

from connectors.sharepoint.graph_auth import GraphAuthConfig, GraphAuthProvider, GraphToken
from connectors.sharepoint.graph_client import (
    GraphApiClient,
    GraphApiConfig,
    GraphApiError,
    GraphAuthenticationError,
    GraphNotFoundError,
    odata_literal,
)

__all__ = [
    # Client credentials auth
    "GraphAuthConfig",
    "GraphAuthProvider",
    "GraphToken",
    # HTTP client
    "GraphApiClient",
    "GraphApiConfig",
    "odata_literal",
    # Errors
    "GraphApiError",
    "GraphAuthenticationError",
    "GraphNotFoundError",
]
