# lambdas/log_summary/app.py
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Tuple

from .aggregator import aggregate_rows, merge_aggregates
from .errors import GENERIC_FAILURE_MESSAGE, LogSummaryError, MalformedInput, NoInputFound
from .models import AppSettings, RunSummary, SourceAggregate, load_settings
from .parser import parse_log_csv
from .report_writer import (
    artifact_names,
    input_prefix,
    render_hourly_summary,
    render_top_messages,
    top_messages,
)
from .request_parser import parse_run_date
from .storage import LogStorage

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Summary and top messages files created successfully."


def build_response(status_code: int, body: str) -> dict:
    """Helper function to build the API Gateway proxy response."""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "text/plain"},
        "body": body,
    }


def process_log_file(storage: LogStorage, name: str) -> Tuple[Dict[str, SourceAggregate], int]:
    """Downloads, parses and aggregates one log file. Returns the aggregates and the row count."""
    logger.info(f"Processing blob: {name}")
    rows = parse_log_csv(storage.download(name), name=name)
    logger.info(f" -> {len(rows)} rows parsed from {name}")
    return aggregate_rows(rows), len(rows)


def _process_safely(storage: LogStorage, name: str, skip_malformed: bool) -> Optional[Tuple[Dict[str, SourceAggregate], int]]:
    try:
        return process_log_file(storage, name)
    except MalformedInput as e:
        if not skip_malformed:
            raise
        logger.warning(f"⚠️ Skipping malformed log file {name}: {e}")
        return None


def collect_aggregates(settings: AppSettings, storage: LogStorage, names: List[str], summary: RunSummary) -> Dict[str, SourceAggregate]:
    """
    Runs every file through the parser and aggregator, sequentially or on a
    bounded thread pool, and merges the per-file results in listing order.
    """
    skip = settings.skip_malformed_files
    if settings.max_workers > 1 and len(names) > 1:
        workers = min(settings.max_workers, len(names))
        logger.info(f"Processing {len(names)} files with {workers} workers...")
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda name: _process_safely(storage, name, skip), names))
    else:
        results = [_process_safely(storage, name, skip) for name in names]

    partials = []
    for result in results:
        if result is None:
            summary.files_skipped += 1
            continue
        aggregates, row_count = result
        summary.files_processed += 1
        summary.rows_parsed += row_count
        partials.append(aggregates)
    return merge_aggregates(partials)


def write_source_reports(settings: AppSettings, storage: LogStorage, run_date: date, aggregate: SourceAggregate) -> List[str]:
    """Uploads the hourly summary, top warnings and top errors of one source."""
    names = artifact_names(settings.output_folder_name, run_date, aggregate.source)
    reports = [
        (names.summary, render_hourly_summary(aggregate)),
        (names.warnings, render_top_messages(top_messages(aggregate.warning_frequency))),
        (names.errors, render_top_messages(top_messages(aggregate.error_frequency))),
    ]
    for name, text in reports:
        storage.upload(name, text.encode("utf-8"))
        logger.info(f"File saved to: {name}")
    return [name for name, _ in reports]


def run_log_summary(settings: AppSettings, storage: LogStorage, run_date: date) -> RunSummary:
    """
    Summarizes one day of log files into per-source report artifacts.

    Raises:
        NoInputFound: If no file matches the day's prefix or the files hold no rows.
        MalformedInput: If a file cannot be parsed (unless skipping is enabled).
        StorageUnavailable: If listing, downloading or uploading fails.
    """
    summary = RunSummary(run_date=run_date)
    prefix = input_prefix(settings.log_folder_name, run_date)

    logger.info(f"Fetching blobs with prefix '{prefix}'...")
    names = storage.list_names(prefix)
    if not names:
        raise NoInputFound(f"No log files match prefix '{prefix}'")
    logger.info(f"Found {len(names)} log file(s) for {run_date.isoformat()}")

    aggregates = collect_aggregates(settings, storage, names, summary)
    if not aggregates:
        raise NoInputFound(f"The {len(names)} file(s) under '{prefix}' contain no log rows")

    for source, aggregate in aggregates.items():
        summary.sources.append(source)
        summary.artifacts.extend(write_source_reports(settings, storage, run_date, aggregate))

    logger.info(
        f"✅ Wrote {len(summary.artifacts)} artifacts for {len(summary.sources)} source(s) "
        f"from {summary.files_processed} file(s) ({summary.files_skipped} skipped)."
    )
    return summary


def handler(event: dict, context: object) -> dict:
    """
    Main Lambda handler, triggered by an HTTP request or a daily schedule.
    Every failure is reported here and only here.
    """
    logger.info(f"LogSummary function triggered at: {datetime.now(timezone.utc).isoformat()}")

    try:
        settings = load_settings()
        logging.getLogger().setLevel(settings.log_level.upper())
        run_date = parse_run_date(event)
        storage = LogStorage.from_settings(settings)
        summary = run_log_summary(settings, storage, run_date)
        logger.info(f"Run summary: {json.dumps(summary.to_dict())}")
        return build_response(200, SUCCESS_MESSAGE)

    except NoInputFound as e:
        logger.warning(f"ℹ️ {e}")
        return build_response(e.status_code, e.public_message)

    except LogSummaryError as e:
        logger.error(f"❌ {type(e).__name__}: {e}")
        return build_response(e.status_code, e.public_message)

    except Exception as e:
        logger.exception(f"❌ An unexpected error occurred: {e}")
        return build_response(500, GENERIC_FAILURE_MESSAGE)
