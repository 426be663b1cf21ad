"""Record serializer.

Renders a batch as CSV text: a fixed header line, then one row per record
in batch order. Rows are newline-joined without a trailing newline.

``itemId`` and ``status`` are wrapped in double quotes as-is; a value that
itself contains a double quote produces a malformed row unless
``escape_quotes`` is set, in which case embedded quotes are doubled.
"""

from typing import Iterable, List

from archive.models import ArchiveBatch, Quantity, ReconciliationRecord

HEADER_COLUMNS = (
    "ItemID",
    "SystemBalance",
    "InitialPhysical",
    "FinalPhysical",
    "Difference",
    "Status",
    "RecountHistory",
)
HEADER = ",".join(HEADER_COLUMNS)

HISTORY_SEPARATOR = "|"


def format_quantity(value: Quantity) -> str:
    """Render a number the way the frontend's JSON sent it (10.0 -> "10")."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _quoted(value: str, escape_quotes: bool) -> str:
    if escape_quotes:
        value = value.replace('"', '""')
    return f'"{value}"'


def format_history(history: Iterable[Quantity]) -> str:
    """Join recount attempts in chronological order, e.g. "150|145"."""
    return HISTORY_SEPARATOR.join(format_quantity(q) for q in history)


def serialize_record(record: ReconciliationRecord, escape_quotes: bool = False) -> str:
    fields = [
        _quoted(record.item_id, escape_quotes),
        format_quantity(record.system_qty),
        format_quantity(record.initial_physical_qty),
        format_quantity(record.final_physical_qty),
        format_quantity(record.difference),
        _quoted(record.status, escape_quotes),
        _quoted(format_history(record.recount_history), escape_quotes),
    ]
    return ",".join(fields)


def serialize(batch: ArchiveBatch, escape_quotes: bool = False) -> str:
    """Serialize a batch to CSV text.

    Args:
        batch: Records in the order they should appear
        escape_quotes: Double embedded quote characters in quoted fields

    Returns:
        Header line followed by one line per record
    """
    lines: List[str] = [HEADER]
    lines.extend(serialize_record(record, escape_quotes) for record in batch)
    return "\n".join(lines)
