# lambdas/log_summary/report_writer.py
"""
Ranks message frequencies and renders the per-source CSV artifacts.
"""
import csv
import io
from datetime import date
from typing import Iterable, List, Mapping, NamedTuple

from .models import SourceAggregate, TopMessageEntry

TOP_MESSAGES_LIMIT = 10
DATE_FORMAT = "%Y-%m-%d"


class ArtifactNames(NamedTuple):
    summary: str
    warnings: str
    errors: str


def input_prefix(log_folder_name: str, run_date: date) -> str:
    """Object name prefix of the log files exported for one day."""
    return f"{log_folder_name}{run_date.strftime(DATE_FORMAT)}_"


def artifact_names(output_folder_name: str, run_date: date, source: str) -> ArtifactNames:
    stem = f"{output_folder_name}{run_date.strftime(DATE_FORMAT)}_{source}"
    return ArtifactNames(
        summary=f"{stem}_summary.csv",
        warnings=f"{stem}_warnings.csv",
        errors=f"{stem}_errors.csv",
    )


def top_messages(frequency: Mapping[str, int], n: int = TOP_MESSAGES_LIMIT) -> List[TopMessageEntry]:
    """
    Returns the n most frequent messages, highest count first.
    Equal counts are ordered by message text so the output is deterministic.
    """
    ranked = sorted(frequency.items(), key=lambda item: (-item[1], item[0]))
    return [TopMessageEntry(message, count) for message, count in ranked[:n]]


def render_hourly_summary(aggregate: SourceAggregate) -> str:
    lines = ["Hour,Warnings,Errors"]
    lines.extend(f"{hour},{warnings},{errors}" for hour, warnings, errors in aggregate.hourly_rows())
    return "\n".join(lines) + "\n"


def render_top_messages(entries: Iterable[TopMessageEntry]) -> str:
    """
    Renders a Message,Count table. Messages are always quoted and embedded
    quotes are doubled, so commas and quotes in a message survive a CSV reader.
    """
    buffer = io.StringIO()
    buffer.write("Message,Count\n")
    # QUOTE_NONNUMERIC quotes the message and leaves the int count bare
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for entry in entries:
        writer.writerow([entry.message, entry.count])
    return buffer.getvalue()
