# lambdas/log_summary/parser.py
import csv
import io
import logging
import re
from datetime import datetime
from typing import List, Optional

from .errors import MalformedInput
from .models import LogRow

logger = logging.getLogger(__name__)

# LogRow field -> column header of the exported CSV
LOG_COLUMNS = {
    "timestamp": "timestamp [UTC]",
    "severity": "severityLevel",
    "source": "customDimensions_Role",
    "message": "message",
    "stack_trace": "customDimensions_StackTrace",
}

# Layouts the portal export uses besides ISO-8601, e.g. "10/18/2026, 3:04:05.123 PM"
_EXPORT_TIMESTAMP_FORMATS = (
    "%m/%d/%Y, %I:%M:%S.%f %p",
    "%m/%d/%Y, %I:%M:%S %p",
    "%m/%d/%Y %I:%M:%S.%f %p",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M:%S.%f",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y, %I:%M %p",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %H:%M",
    "%Y-%m-%d %I:%M:%S.%f %p",
    "%Y-%m-%d %I:%M:%S %p",
    "%Y-%m-%d %I:%M %p",
)

# fractional seconds of any length; datetime keeps at most six digits
_FRACTION = re.compile(r"(?<=:\d\d)\.(\d+)")


def _normalize_header(name: str) -> str:
    return name.strip().lower()


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parses a log timestamp, keeping whatever offset it encodes.
    Returns None when the text is not a recognised date-time.
    """
    if not value or not value.strip():
        return None
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value.strip())
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _EXPORT_TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _resolve_columns(header: List[str], name: str) -> dict:
    """Maps each LogRow field to its position in the header row."""
    positions = {}
    for index, column in enumerate(header):
        # first occurrence wins when a header repeats a name
        positions.setdefault(_normalize_header(column), index)

    resolved, missing = {}, []
    for field_name, column in LOG_COLUMNS.items():
        index = positions.get(_normalize_header(column))
        if index is None:
            missing.append(column)
        else:
            resolved[field_name] = index

    if missing:
        raise MalformedInput(f"{name}: header is missing required column(s): {', '.join(missing)}", file_name=name)
    return resolved


def parse_log_csv(content: bytes, name: str = "<memory>") -> List[LogRow]:
    """
    Parses the raw bytes of one exported log file into LogRow records.

    Args:
        content: The CSV file as downloaded.
        name: Object name, only used in error messages.

    Returns:
        The rows in file order. Empty content yields an empty list.

    Raises:
        MalformedInput: If the file misses a required column, has a row too
            short for the header, or a non-integer severity.
    """
    # undecodable bytes become U+FFFD
    text = content.decode("utf-8-sig", errors="replace")

    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        header = next(reader, None)
        if header is None:
            return []
        columns = _resolve_columns(header, name)
        width = max(columns.values()) + 1

        rows = []
        for record in reader:
            if not any(cell.strip() for cell in record):
                continue
            if len(record) < width:
                raise MalformedInput(
                    f"{name}: line {reader.line_num} has {len(record)} field(s), expected at least {width}",
                    file_name=name, line_number=reader.line_num,
                )
            raw_severity = record[columns["severity"]]
            try:
                severity = int(raw_severity)
            except ValueError:
                raise MalformedInput(
                    f"{name}: line {reader.line_num} has non-integer severityLevel '{raw_severity}'",
                    file_name=name, line_number=reader.line_num,
                )
            rows.append(LogRow(
                timestamp=record[columns["timestamp"]],
                severity=severity,
                source=record[columns["source"]],
                message=record[columns["message"]],
                stack_trace=record[columns["stack_trace"]],
            ))
    except csv.Error as e:
        raise MalformedInput(f"{name}: invalid CSV near line {reader.line_num}: {e}", file_name=name) from e

    logger.debug(f"Parsed {len(rows)} rows from {name}")
    return rows
