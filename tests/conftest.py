# tests/conftest.py
import os
from datetime import date

import pytest

from lambdas.log_summary.errors import StorageUnavailable
from lambdas.log_summary.models import AppSettings

TESTS_DIR = os.path.dirname(os.path.abspath(__file__))
RUN_DATE = date(2026, 10, 18)

HEADER = "timestamp [UTC],severityLevel,customDimensions_Role,message,customDimensions_StackTrace\n"


class InMemoryStorage:
    """Stands in for LogStorage: same three operations over a dict of objects."""

    def __init__(self, objects: dict = None):
        self.objects = dict(objects or {})
        self.uploads = []
        self.fail_on_upload = None

    def list_names(self, prefix: str) -> list[str]:
        return sorted(name for name in self.objects if name.startswith(prefix))

    def download(self, name: str) -> bytes:
        return self.objects[name]

    def upload(self, name: str, data: bytes, content_type: str = "text/csv") -> None:
        if self.fail_on_upload and name == self.fail_on_upload:
            raise StorageUnavailable(f"Uploading '{name}' failed: simulated outage")
        self.objects[name] = data
        self.uploads.append(name)

    def text(self, name: str) -> str:
        return self.objects[name].decode("utf-8")


def make_csv(*rows: tuple) -> bytes:
    """Builds an export file from (timestamp, severity, source, message) tuples."""
    lines = [HEADER]
    for timestamp, severity, source, message in rows:
        lines.append(f"{timestamp},{severity},{source},{message},\n")
    return "".join(lines).encode("utf-8")


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        STORAGE_CONNECTION_STRING="Region=us-east-1",
        LOG_BUCKET="log-summary-test-bucket",
        LOG_FOLDER_NAME="logs/",
        OUTPUT_FOLDER_NAME="output/",
        MAX_WORKERS=1,
        SKIP_MALFORMED_FILES=False,
    )


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture(scope="module")
def sample_csv() -> bytes:
    path = os.path.join(TESTS_DIR, "sample_logs.csv")
    if not os.path.exists(path):
        pytest.fail(f"Sample logs file not found at: {path}")
    with open(path, "rb") as f:
        return f.read()
