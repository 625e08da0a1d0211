# lambdas/log_summary/models.py
"""
Plain-dataclass models and the pydantic settings class for the Log Summary job.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, NamedTuple

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationMissing

HOURS_PER_DAY = 24
WARNING_SEVERITY = 2
ERROR_SEVERITY = 3

# Connection string keys (lower-cased) and the boto3 client argument each one feeds.
_CONNECTION_KEYS = {
    "endpoint": "endpoint_url",
    "accesskeyid": "aws_access_key_id",
    "secretaccesskey": "aws_secret_access_key",
    "sessiontoken": "aws_session_token",
    "region": "region_name",
}


def parse_connection_string(value: str) -> Dict[str, str]:
    """
    Turns 'Endpoint=...;AccessKeyId=...;Region=...' into boto3 client keyword
    arguments. Empty segments are ignored; unknown keys are rejected.
    """
    client_kwargs = {}
    for segment in value.split(";"):
        segment = segment.strip()
        if not segment:
            continue
        key, sep, setting = segment.partition("=")
        if not sep:
            raise ValueError(f"connection string segment '{segment}' is not Key=Value")
        kwarg = _CONNECTION_KEYS.get(key.strip().lower())
        if kwarg is None:
            raise ValueError(f"unknown connection string key '{key.strip()}'")
        client_kwargs[kwarg] = setting.strip()
    return client_kwargs


class AppSettings(BaseSettings):
    """
    Reads the job configuration from environment variables (and a .env file
    when present). Built once per invocation and passed down explicitly.
    """
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    storage_connection_string: str = Field(..., min_length=1, alias="STORAGE_CONNECTION_STRING")
    log_bucket: str = Field(..., min_length=1, alias="LOG_BUCKET")
    log_folder_name: str = Field("", alias="LOG_FOLDER_NAME")
    output_folder_name: str = Field("output/", alias="OUTPUT_FOLDER_NAME")
    max_workers: int = Field(1, ge=1, alias="MAX_WORKERS")
    skip_malformed_files: bool = Field(False, alias="SKIP_MALFORMED_FILES")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator("storage_connection_string")
    @classmethod
    def _check_connection_string(cls, value: str) -> str:
        parse_connection_string(value)
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{value}'")
        return level

    @property
    def storage_client_kwargs(self) -> Dict[str, str]:
        return parse_connection_string(self.storage_connection_string)


def load_settings(env_file: str = ".env") -> AppSettings:
    """
    Validates the configuration, raising ConfigurationMissing when a required
    value is absent or a value is invalid.
    """
    try:
        return AppSettings(_env_file=env_file)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ConfigurationMissing(f"Invalid or missing settings: {', '.join(fields)}") from e


# Data models
@dataclass(frozen=True)
class LogRow:
    """One record of an exported log file."""
    timestamp: str
    severity: int
    source: str
    message: str
    stack_trace: str = ""


@dataclass
class SourceAggregate:
    """
    Hourly warning/error counts and message frequencies for one source.
    Counts only ever grow within a run.
    """
    source: str
    hourly_warnings: List[int] = field(default_factory=lambda: [0] * HOURS_PER_DAY)
    hourly_errors: List[int] = field(default_factory=lambda: [0] * HOURS_PER_DAY)
    warning_frequency: Counter = field(default_factory=Counter)
    error_frequency: Counter = field(default_factory=Counter)

    def record_warning(self, hour: int, message: str) -> None:
        self.hourly_warnings[hour] += 1
        self.warning_frequency[message] += 1

    def record_error(self, hour: int, message: str) -> None:
        self.hourly_errors[hour] += 1
        self.error_frequency[message] += 1

    def merge(self, other: "SourceAggregate") -> "SourceAggregate":
        """Adds the counts of another aggregate for the same source into this one."""
        if other.source != self.source:
            raise ValueError(f"Cannot merge source '{other.source}' into '{self.source}'")
        for hour in range(HOURS_PER_DAY):
            self.hourly_warnings[hour] += other.hourly_warnings[hour]
            self.hourly_errors[hour] += other.hourly_errors[hour]
        self.warning_frequency.update(other.warning_frequency)
        self.error_frequency.update(other.error_frequency)
        return self

    def hourly_rows(self) -> List[tuple]:
        return [(hour, self.hourly_warnings[hour], self.hourly_errors[hour]) for hour in range(HOURS_PER_DAY)]


class TopMessageEntry(NamedTuple):
    message: str
    count: int


@dataclass
class RunSummary:
    """What a completed run did. Returned by the orchestrator for logging and tests."""
    run_date: date
    files_processed: int = 0
    files_skipped: int = 0
    rows_parsed: int = 0
    sources: List[str] = field(default_factory=list)
    artifacts: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_date": self.run_date.isoformat(),
            "files_processed": self.files_processed,
            "files_skipped": self.files_skipped,
            "rows_parsed": self.rows_parsed,
            "sources": list(self.sources),
            "artifacts": list(self.artifacts),
        }
