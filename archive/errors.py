"""Archive error taxonomy.

Every failure the archive pipeline reports is an ``ArchiveError`` carrying
the HTTP status it maps to. Client errors (4xx) are detected by the request
gate before any network I/O; everything else is a downstream failure
reported as 500 with its message surfaced.
"""

from typing import Optional


class ArchiveError(Exception):
    """Base exception for archive failures."""
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


# -----------------------------------------------------------------------------
# Request gate (client errors)
# -----------------------------------------------------------------------------

class MethodNotAllowedError(ArchiveError):
    """Request used a method other than POST."""
    status_code = 405

    def __init__(self, message: str = "Method Not Allowed"):
        super().__init__(message)


class EmptyBatchError(ArchiveError):
    """Request carried no records."""
    status_code = 400

    def __init__(self, message: str = "No data received to archive."):
        super().__init__(message)


class InvalidBatchError(ArchiveError):
    """Request records did not match the record schema."""
    status_code = 400

    def __init__(self, message: str = "Invalid data received to archive.", detail: str = ""):
        super().__init__(message)
        self.detail = detail


# -----------------------------------------------------------------------------
# Downstream failures
# -----------------------------------------------------------------------------

class AuthError(ArchiveError):
    """No access token could be obtained."""
    pass


class ResolutionError(ArchiveError):
    """The target site could not be resolved."""
    pass


class CollectionNotFoundError(ResolutionError):
    """No site matched the configured display name."""

    def __init__(self, site_name: str):
        super().__init__(f"SharePoint site '{site_name}' not found.")
        self.site_name = site_name


class AmbiguousCollectionError(ResolutionError):
    """More than one site matched the configured display name."""

    def __init__(self, site_name: str, match_count: int):
        super().__init__(
            f"SharePoint site name '{site_name}' matched {match_count} sites; expected exactly one."
        )
        self.site_name = site_name
        self.match_count = match_count


class WriteError(ArchiveError):
    """The serialized archive could not be uploaded."""
    pass
