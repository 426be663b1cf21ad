"""
Archive a saved stock-take comparison to SharePoint from the command line.

Reads a JSON file holding either the API request body (``{"data": [...]}``)
or a bare list of records and runs the same pipeline as POST /api/archive.

Usage:
    python scripts/archive_file.py comparison.json
    python scripts/archive_file.py comparison.json --dry-run
    python scripts/archive_file.py comparison.json --site-name "Stock Count Test"
"""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from archive.errors import ArchiveError
from archive.gate import extract_batch
from archive.pipeline import ArchivePipeline
from archive.serializer import serialize
from core.config import load_settings
from core.observability.logging import configure_logging


def load_payload(path: Path):
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    if isinstance(payload, list):
        payload = {"data": payload}
    return payload


async def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Archive stock-take results to SharePoint")
    parser.add_argument("input", type=Path, help="JSON file with the records to archive")
    parser.add_argument("--site-name", help="Override SHAREPOINT_SITE_NAME")
    parser.add_argument("--library", help="Override SHAREPOINT_LIBRARY_NAME")
    parser.add_argument("--dry-run", action="store_true", help="Print the CSV instead of uploading")
    args = parser.parse_args(argv)

    settings = load_settings()
    if args.site_name:
        settings = replace(settings, site_name=args.site_name)
    if args.library:
        settings = replace(settings, library_name=args.library)
    configure_logging(level=settings.logging_level, json_format=settings.log_json)

    try:
        batch = extract_batch(load_payload(args.input))
    except (OSError, ValueError) as e:
        print(f"✗ Could not read {args.input}: {e}")
        return 1
    except ArchiveError as e:
        print(f"✗ {e.message}")
        return 1

    if args.dry_run:
        print(serialize(batch, escape_quotes=settings.escape_quotes))
        return 0

    try:
        result = await ArchivePipeline(settings).run(batch)
    except ArchiveError as e:
        print(f"✗ An error occurred: {e.message}")
        return 1

    print(f"✓ {result.message}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
