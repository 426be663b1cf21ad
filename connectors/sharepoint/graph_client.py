"""Microsoft Graph HTTP Client.

Low-level HTTP client for the Graph endpoints used to archive documents
to SharePoint. Handles authentication headers and error mapping. Calls are
not retried.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp

from core.observability.logging import get_logger

if TYPE_CHECKING:
    from connectors.sharepoint.graph_auth import GraphAuthProvider

logger = get_logger(__name__)


class GraphApiError(Exception):
    """Base exception for Graph API errors."""
    def __init__(self, message: str, status_code: int = 0, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class GraphAuthenticationError(GraphApiError):
    """Authentication failed (token exchange, 401/403)."""
    pass


class GraphNotFoundError(GraphApiError):
    """Resource not found (404)."""
    pass


def _error_message(response_text: str) -> str:
    """Extract the human-readable message from a Graph error body."""
    try:
        body = json.loads(response_text)
    except ValueError:
        return response_text
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message") or response_text
    return response_text


def _success_body(response_text: str, method: str, url: str) -> Dict[str, Any]:
    """Decode a 2xx body; an empty or non-JSON body counts as no content."""
    if not response_text:
        return {}
    try:
        body = json.loads(response_text)
    except ValueError:
        logger.warning(f"{method} {url} succeeded with a non-JSON body")
        return {}
    return body if isinstance(body, dict) else {}


def odata_literal(value: str) -> str:
    """Quote a string for use inside an OData $filter expression."""
    return "'" + value.replace("'", "''") + "'"


@dataclass
class GraphApiConfig:
    """Configuration for Graph API client."""
    base_url: str = "https://graph.microsoft.com"
    api_version: str = "v1.0"
    timeout_seconds: int = 30

    def get_base_url(self) -> str:
        """Get the base URL for API calls."""
        return f"{self.base_url}/{self.api_version}"


class GraphApiClient:
    """HTTP client for Microsoft Graph.

    Provides:
    - Authenticated API calls
    - Site lookup by display name
    - Drive item content upload

    Usage:
        client = GraphApiClient(auth_provider, api_config)
        await client.connect()
        sites = await client.list_sites("displayName eq 'Operations'")
        await client.upload_content(site_id, "Documents", "file.csv", b"...")
        await client.disconnect()
    """

    def __init__(self, auth_provider: "GraphAuthProvider", api_config: GraphApiConfig):
        """Initialize API client.

        Args:
            auth_provider: GraphAuthProvider holding the bearer token
            api_config: API configuration
        """
        self.auth_provider = auth_provider
        self.api_config = api_config
        self._session: Optional[aiohttp.ClientSession] = None

    async def connect(self) -> None:
        """Initialize HTTP session."""
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.api_config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)

    async def disconnect(self) -> None:
        """Close HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _get_headers(self, content_type: str = "application/json") -> Dict[str, str]:
        """Get headers for API requests."""
        auth_header = self.auth_provider.get_authorization_header()
        if not auth_header:
            raise GraphAuthenticationError("Not authenticated")

        return {
            "Authorization": auth_header,
            "Content-Type": content_type,
            "Accept": "application/json",
        }

    def _build_url(self, path: str) -> str:
        return f"{self.api_config.get_base_url()}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        content: Optional[bytes] = None,
        content_type: str = "application/json",
    ) -> Dict[str, Any]:
        """Make an authenticated API request.

        Args:
            method: HTTP method
            path: Path relative to the versioned Graph base URL
            params: Query parameters
            content: Raw request body
            content_type: Content-Type of the body

        Returns:
            Response JSON

        Raises:
            GraphAuthenticationError: Authentication failed
            GraphNotFoundError: Resource not found
            GraphApiError: Other API or transport errors
        """
        if not self._session:
            raise GraphApiError("Not connected. Call connect() first.")

        url = self._build_url(path)
        headers = self._get_headers(content_type)

        try:
            async with self._session.request(
                method,
                url,
                headers=headers,
                params=params,
                data=content,
            ) as response:
                response_text = await response.text()

                if response.status < 400:
                    if response.status == 204:
                        return {}
                    return _success_body(response_text, method, url)

                message = _error_message(response_text)

                if response.status in (401, 403):
                    raise GraphAuthenticationError(
                        f"Authentication failed: {message}",
                        response.status,
                        response_text,
                    )

                if response.status == 404:
                    raise GraphNotFoundError(
                        f"Resource not found: {message}",
                        response.status,
                        response_text,
                    )

                raise GraphApiError(
                    f"API error {response.status}: {message}",
                    response.status,
                    response_text,
                )

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"{method} {url} failed: {type(e).__name__}")
            raise GraphApiError(f"Request failed: {str(e) or type(e).__name__}") from e

    async def list_sites(self, filter: str) -> List[Dict[str, Any]]:
        """List sites matching an OData $filter expression.

        Results are returned in the order Graph returns them.
        """
        response = await self._request("GET", "/sites", params={"$filter": filter})
        return response.get("value", [])

    async def upload_content(
        self,
        site_id: str,
        library_name: str,
        file_name: str,
        content: bytes,
        content_type: str = "text/csv",
    ) -> Dict[str, Any]:
        """Upload a file to a site's default drive in a single PUT.

        Args:
            site_id: Graph site ID
            library_name: Folder under the drive root
            file_name: Target file name
            content: File body
            content_type: MIME type of the body

        Returns:
            The created or replaced driveItem
        """
        item_path = f"{quote(library_name)}/{quote(file_name)}"
        path = f"/sites/{site_id}/drive/root:/{item_path}:/content"
        return await self._request("PUT", path, content=content, content_type=content_type)
