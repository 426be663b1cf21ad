"""Inventory reconciliation archive.

Takes a batch of stock-take reconciliation records, serializes it to CSV
and stores it in a SharePoint document library.
"""

from archive.errors import (
    ArchiveError,
    MethodNotAllowedError,
    EmptyBatchError,
    InvalidBatchError,
    AuthError,
    ResolutionError,
    CollectionNotFoundError,
    AmbiguousCollectionError,
    WriteError,
)
from archive.models import (
    ReconciliationRecord,
    ArchiveBatch,
    ArtifactName,
    ArchiveResult,
)
from archive.serializer import serialize
from archive.naming import create_artifact_name
from archive.pipeline import ArchivePipeline
from archive.handler import ArchiveResponse, handle_archive_request

__all__ = [
    # Errors
    "ArchiveError",
    "MethodNotAllowedError",
    "EmptyBatchError",
    "InvalidBatchError",
    "AuthError",
    "ResolutionError",
    "CollectionNotFoundError",
    "AmbiguousCollectionError",
    "WriteError",
    # Models
    "ReconciliationRecord",
    "ArchiveBatch",
    "ArtifactName",
    "ArchiveResult",
    # Pipeline
    "serialize",
    "create_artifact_name",
    "ArchivePipeline",
    "ArchiveResponse",
    "handle_archive_request",
]
