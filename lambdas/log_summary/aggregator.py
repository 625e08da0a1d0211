# lambdas/log_summary/aggregator.py
from typing import Dict, Iterable

from .models import ERROR_SEVERITY, WARNING_SEVERITY, LogRow, SourceAggregate
from .parser import parse_timestamp


def aggregate_rows(rows: Iterable[LogRow]) -> Dict[str, SourceAggregate]:
    """
    Groups rows by source and tallies hourly warning/error counts and message
    frequencies. Rows with an unparsable timestamp, or a severity other than
    warning/error, register their source but change no count.
    """
    aggregates: Dict[str, SourceAggregate] = {}

    for row in rows:
        aggregate = aggregates.get(row.source)
        if aggregate is None:
            aggregate = aggregates[row.source] = SourceAggregate(source=row.source)

        timestamp = parse_timestamp(row.timestamp)
        if timestamp is None:
            continue

        if row.severity == WARNING_SEVERITY:
            aggregate.record_warning(timestamp.hour, row.message)
        elif row.severity == ERROR_SEVERITY:
            aggregate.record_error(timestamp.hour, row.message)

    return aggregates


def merge_aggregates(partials: Iterable[Dict[str, SourceAggregate]]) -> Dict[str, SourceAggregate]:
    """
    Folds per-file aggregates into one mapping. Sources keep the order in
    which they are first seen; the inputs are left untouched.
    """
    merged: Dict[str, SourceAggregate] = {}
    for partial in partials:
        for source, aggregate in partial.items():
            if source not in merged:
                merged[source] = SourceAggregate(source=source)
            merged[source].merge(aggregate)
    return merged
