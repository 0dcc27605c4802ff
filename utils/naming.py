"""File naming for exported training sessions."""

import re
from datetime import datetime
from typing import Tuple

from models.session import ExportFormat, SessionRecord
from utils.errors import TimestampParseError

FILE_NAME_FORMAT = "%Y-%m-%d-%H_%M_%S"

# Fractional seconds beyond microseconds are not accepted by fromisoformat
_FRACTION_RE = re.compile(r"(\.\d+)")


def parse_session_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp with a mandatory UTC offset.

    Args:
        value: Timestamp such as ``2023-05-01T10:00:00+02:00``

    Returns:
        Timezone-aware datetime in the offset carried by ``value``

    Raises:
        TimestampParseError: If the value is malformed or has no offset
    """
    text = (value or "").strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: m.group(1)[:7].ljust(7, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise TimestampParseError(f"invalid session timestamp '{value}': {e}") from e
    if parsed.tzinfo is None:
        raise TimestampParseError(f"invalid session timestamp '{value}': missing UTC offset")
    return parsed


def derive_file_name(record: SessionRecord, fmt: ExportFormat) -> str:
    """Build the export file name for a session.

    The name is ``YYYY-MM-DD-HH_MM_SS.<ext>`` in the session's own offset, so
    names sort chronologically and never depend on the machine's time zone.
    """
    started = parse_session_timestamp(record.start_timestamp)
    return f"{started.strftime(FILE_NAME_FORMAT)}.{fmt.extension}"


def parse_file_name(name: str) -> Tuple[datetime, ExportFormat]:
    """Recover the (naive) start time and format from a derived file name."""
    stem, _, extension = name.rpartition(".")
    return datetime.strptime(stem, FILE_NAME_FORMAT), ExportFormat.parse(extension)
