"""Service configuration.

Deployment-specific identifiers and secrets are read from the process
environment (optionally seeded from a project-root ``.env`` file) into an
``ArchiveSettings`` instance. The settings object is passed explicitly into
the archive pipeline; components never read the environment themselves.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv

ENV_PATH = Path(__file__).resolve().parent.parent / ".env"

CREDENTIAL_VARIABLES = {
    "tenant_id": "SHAREPOINT_TENANT_ID",
    "client_id": "SHAREPOINT_CLIENT_ID",
    "client_secret": "SHAREPOINT_CLIENT_SECRET",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _flag(value: Optional[str], default: bool = False) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class ArchiveSettings:
    """Configuration for the archive service.

    Attributes:
        tenant_id: Azure AD tenant ID
        client_id: Application (client) ID
        client_secret: Client secret
        site_name: Display name of the SharePoint site to archive to
        library_name: Document library folder under the site drive root
        destination_label: Destination name reported back to the caller
        timeout_seconds: Per-request HTTP timeout for Graph and Azure AD calls
        token_cache_enabled: Share access tokens across invocations
        strict_site_match: Fail when more than one site matches site_name
        escape_quotes: Double embedded quotes in quoted CSV fields
        log_level: Root logging level name
        log_json: Emit JSON log lines instead of human-readable ones
    """
    tenant_id: str = ""
    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    site_name: str = "Operations Stock Count"
    library_name: str = "Documents"
    destination_label: str = "SharePoint"
    authority_url: str = "https://login.microsoftonline.com"
    scope: str = "https://graph.microsoft.com/.default"
    graph_base_url: str = "https://graph.microsoft.com"
    timeout_seconds: int = 30
    token_cache_enabled: bool = False
    strict_site_match: bool = False
    escape_quotes: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    def missing_credentials(self) -> List[str]:
        """Names of credential environment variables that are unset."""
        return [
            env_name for attr, env_name in CREDENTIAL_VARIABLES.items()
            if not getattr(self, attr)
        ]

    @property
    def logging_level(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ArchiveSettings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        timeout = env.get("GRAPH_TIMEOUT_SECONDS")
        try:
            timeout_seconds = int(timeout) if timeout else defaults.timeout_seconds
        except ValueError:
            raise ValueError(f"GRAPH_TIMEOUT_SECONDS must be an integer, got {timeout!r}")

        return cls(
            tenant_id=env.get("SHAREPOINT_TENANT_ID", ""),
            client_id=env.get("SHAREPOINT_CLIENT_ID", ""),
            client_secret=env.get("SHAREPOINT_CLIENT_SECRET", ""),
            site_name=env.get("SHAREPOINT_SITE_NAME") or defaults.site_name,
            library_name=env.get("SHAREPOINT_LIBRARY_NAME") or defaults.library_name,
            destination_label=env.get("ARCHIVE_DESTINATION_LABEL") or defaults.destination_label,
            timeout_seconds=timeout_seconds,
            token_cache_enabled=_flag(env.get("ARCHIVE_TOKEN_CACHE")),
            strict_site_match=_flag(env.get("ARCHIVE_STRICT_SITE_MATCH")),
            escape_quotes=_flag(env.get("ARCHIVE_ESCAPE_QUOTES")),
            log_level=env.get("LOG_LEVEL") or defaults.log_level,
            log_json=_flag(env.get("LOG_JSON")),
        )


def load_settings(env_path: Path = ENV_PATH) -> ArchiveSettings:
    """Load .env (if present) and build settings from the environment."""
    if env_path.exists():
        load_dotenv(env_path)
    return ArchiveSettings.from_env()
