# lambdas/log_summary/errors.py
"""
Error kinds raised by the log summary job.

Each class carries the HTTP status code and the response body the handler
returns for it, so the mapping from failure to response lives in one place.
"""

GENERIC_FAILURE_MESSAGE = "An error occurred during log processing."


class LogSummaryError(Exception):
    """Base class for every failure the handler knows how to report."""
    status_code = 500
    public_message = GENERIC_FAILURE_MESSAGE


class ConfigurationMissing(LogSummaryError):
    """Required settings are absent or invalid."""
    public_message = "Missing blob storage configuration."


class NoInputFound(LogSummaryError):
    """No log file (or no log row) exists for the requested day."""
    status_code = 404
    public_message = "No logs found for today's date."


class MalformedInput(LogSummaryError):
    """A log file could not be parsed as the expected CSV export."""

    def __init__(self, message: str, file_name: str = None, line_number: int = None):
        super().__init__(message)
        self.file_name = file_name
        self.line_number = line_number


class StorageUnavailable(LogSummaryError):
    """Listing, downloading or uploading an object failed."""


class InvalidRequestError(LogSummaryError, ValueError):
    """Custom exception for trigger validation errors."""
    status_code = 400

    @property
    def public_message(self) -> str:
        return str(self)
