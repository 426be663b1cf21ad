"""Microsoft Graph Authentication Provider.

Handles OAuth2 client credentials authentication with Azure AD for
Microsoft Graph (SharePoint) API access.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import aiohttp

from connectors.sharepoint.graph_client import GraphAuthenticationError
from core.observability.logging import get_logger
from core.security.token_cache import InMemoryTokenCache

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class GraphAuthConfig:
    """Configuration for Graph authentication.

    Attributes:
        tenant_id: Azure AD tenant ID
        client_id: Application (client) ID
        client_secret: Client secret
        scope: OAuth2 scope (Graph default scope)
        authority_url: Azure AD authority host
        timeout_seconds: Token request timeout
    """
    tenant_id: str
    client_id: str
    client_secret: str
    scope: str = "https://graph.microsoft.com/.default"
    authority_url: str = "https://login.microsoftonline.com"
    timeout_seconds: int = 30

    @property
    def token_endpoint(self) -> str:
        """Get the OAuth2 token endpoint."""
        return f"{self.authority_url}/{self.tenant_id}/oauth2/v2.0/token"

    @property
    def cache_key(self) -> Tuple[str, str]:
        """Identity a cached token belongs to."""
        return (self.tenant_id, self.client_id)


@dataclass
class GraphToken:
    """OAuth2 access token with expiration tracking."""
    access_token: str
    token_type: str
    expires_in: int
    obtained_at: datetime = field(default_factory=_utcnow)

    @property
    def expires_at(self) -> datetime:
        """When the token expires."""
        return self.obtained_at + timedelta(seconds=self.expires_in)

    @property
    def is_expired(self) -> bool:
        """Check if token is expired (with 5-minute buffer)."""
        buffer = timedelta(minutes=5)
        return _utcnow() >= (self.expires_at - buffer)

    @property
    def is_valid(self) -> bool:
        """Check if token can still be sent (no buffer)."""
        return _utcnow() < self.expires_at

    @property
    def authorization_header(self) -> str:
        """Get the Authorization header value."""
        return f"{self.token_type} {self.access_token}"


class GraphAuthProvider:
    """Authentication provider for Microsoft Graph.

    Performs the client credentials exchange. Without a token cache every
    call to ``authenticate`` fetches a fresh token; with one, tokens are
    shared between providers configured for the same tenant and client.

    Usage:
        config = GraphAuthConfig(
            tenant_id="your-tenant-id",
            client_id="your-client-id",
            client_secret="your-secret"
        )
        auth = GraphAuthProvider(config)
        token = await auth.authenticate()
    """

    def __init__(self, config: GraphAuthConfig, token_cache: Optional[InMemoryTokenCache] = None):
        """Initialize auth provider.

        Args:
            config: Authentication configuration
            token_cache: Optional cache shared across invocations
        """
        self.config = config
        self.token_cache = token_cache
        self._token: Optional[GraphToken] = None

    async def authenticate(self) -> GraphToken:
        """Obtain an access token.

        Returns:
            The token now held by this provider

        Raises:
            GraphAuthenticationError: No token could be obtained
        """
        if self.token_cache is not None:
            self._token = await self.token_cache.get_or_fetch(
                self.config.cache_key, self._fetch_token
            )
        else:
            self._token = await self._fetch_token()
        return self._token

    async def _fetch_token(self) -> GraphToken:
        """Fetch a new access token from Azure AD."""
        data = {
            "grant_type": "client_credentials",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "scope": self.config.scope,
        }
        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self.config.token_endpoint,
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"}
                ) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise GraphAuthenticationError(
                            f"Token request failed: {response.status} - {error_text}",
                            response.status,
                            error_text,
                        )

                    token_data = await response.json()
        except aiohttp.ClientError as e:
            raise GraphAuthenticationError(f"Token request failed: {e}") from e

        access_token = token_data.get("access_token")
        if not access_token:
            raise GraphAuthenticationError("Failed to acquire access token.")

        logger.info(
            "Acquired Graph access token",
            extra_fields={"expires_in": token_data.get("expires_in", 3600)},
        )
        return GraphToken(
            access_token=access_token,
            token_type=token_data.get("token_type", "Bearer"),
            expires_in=int(token_data.get("expires_in", 3600)),
        )

    def get_token(self) -> Optional[GraphToken]:
        """Get the token obtained by the last ``authenticate`` call.

        The refresh buffer only governs cache reuse; a token stays usable
        here until it actually expires.

        Returns:
            GraphToken if authenticated, None otherwise
        """
        if self._token and self._token.is_valid:
            return self._token
        return None

    def get_authorization_header(self) -> Optional[str]:
        """Get the Authorization header value.

        Returns:
            Header value like "Bearer <token>" if authenticated
        """
        token = self.get_token()
        return token.authorization_header if token else None
