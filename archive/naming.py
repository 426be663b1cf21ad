"""Artifact naming.

Names look like ``Inventory-Comparison-2024-05-01-k3j9x0q2a``: the current
UTC date plus a random base-36 suffix drawn from ``secrets``. The suffix
makes same-day collisions unlikely but does not rule them out.
"""

import re
import secrets
import string
from datetime import date, datetime, timezone
from typing import Optional

from archive.models import ArtifactName

ARTIFACT_PREFIX = "Inventory-Comparison"
ARTIFACT_EXTENSION = ".csv"
SUFFIX_LENGTH = 9

BASE36_ALPHABET = string.digits + string.ascii_lowercase

ARTIFACT_STEM_PATTERN = re.compile(
    rf"^{ARTIFACT_PREFIX}-(?P<date>\d{{4}}-\d{{2}}-\d{{2}})-(?P<suffix>[0-9a-z]+)$"
)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    """Random base-36 token."""
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def create_artifact_name(today: Optional[date] = None, suffix: Optional[str] = None) -> ArtifactName:
    """Build a fresh artifact name.

    Args:
        today: Date to stamp (defaults to the current UTC date)
        suffix: Suffix to use (defaults to a random base-36 token)
    """
    stamp = (today or utc_today()).isoformat()
    token = suffix or random_suffix()
    return ArtifactName(stem=f"{ARTIFACT_PREFIX}-{stamp}-{token}", extension=ARTIFACT_EXTENSION)
