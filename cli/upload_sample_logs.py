import argparse
import csv
import io
import random
from datetime import datetime, timedelta, timezone

from dotenv import load_dotenv

from lambdas.log_summary.models import load_settings
from lambdas.log_summary.parser import LOG_COLUMNS
from lambdas.log_summary.report_writer import input_prefix
from lambdas.log_summary.storage import LogStorage

# Load environment variables from a .env file for local testing
load_dotenv()

SAMPLE_SOURCES = ["api", "worker", "scheduler"]
SAMPLE_MESSAGES = {
    1: ["Request completed", "Cache refreshed", "Health probe OK"],
    2: ["Slow response from inventory service", "Retrying message delivery", "Cache miss ratio above threshold",
        "Connection pool nearly exhausted"],
    3: ["Payment gateway timeout, retrying", "Job failed: disk full", 'User "unknown" rejected by auth',
        "Deadlock detected on orders table"],
}
# info rows dominate, as in a real export
SEVERITY_WEIGHTS = {1: 70, 2: 20, 3: 10}


def generate_export_csv(run_date, rows: int = 1000, seed: int = None) -> bytes:
    """
    Builds a CSV file shaped like the portal's log export, spread over the day.
    """
    rng = random.Random(seed)
    start = datetime(run_date.year, run_date.month, run_date.day, tzinfo=timezone.utc)
    severities = list(SEVERITY_WEIGHTS)
    weights = list(SEVERITY_WEIGHTS.values())

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([LOG_COLUMNS["timestamp"], LOG_COLUMNS["message"], LOG_COLUMNS["severity"],
                     LOG_COLUMNS["source"], LOG_COLUMNS["stack_trace"]])
    for _ in range(rows):
        severity = rng.choices(severities, weights=weights)[0]
        moment = start + timedelta(seconds=rng.randrange(24 * 3600))
        stack_trace = "   at Worker.Run()\n   at Host.Start()" if severity == 3 else ""
        writer.writerow([
            moment.strftime("%m/%d/%Y, %I:%M:%S.") + f"{moment.microsecond // 1000:03d} " + moment.strftime("%p"),
            rng.choice(SAMPLE_MESSAGES[severity]),
            severity,
            rng.choice(SAMPLE_SOURCES),
            stack_trace,
        ])
    return buffer.getvalue().encode("utf-8")


def upload_samples(run_date, files: int, rows: int) -> list[str]:
    """Uploads `files` generated exports for run_date to the configured bucket."""
    settings = load_settings()
    storage = LogStorage.from_settings(settings)
    prefix = input_prefix(settings.log_folder_name, run_date)

    names = []
    for i in range(files):
        name = f"{prefix}sample_{i:03d}.csv"
        storage.upload(name, generate_export_csv(run_date, rows=rows))
        print(f"✅ Uploaded s3://{settings.log_bucket}/{name} ({rows} rows)")
        names.append(name)
    return names


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Uploads randomly generated log exports for one day.")
    parser.add_argument("--date", help="Day to generate (YYYY-MM-DD). Defaults to today (UTC).")
    parser.add_argument("--files", type=int, default=3, help="Number of export files.")
    parser.add_argument("--rows", type=int, default=1000, help="Rows per file.")
    args = parser.parse_args()

    day = datetime.strptime(args.date, "%Y-%m-%d").date() if args.date else datetime.now(timezone.utc).date()
    upload_samples(day, args.files, args.rows)
