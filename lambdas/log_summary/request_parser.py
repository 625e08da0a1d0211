# lambdas/log_summary/request_parser.py
import base64
import binascii
import json
import logging
from datetime import date, datetime, timezone
from typing import Optional

from .errors import InvalidRequestError
from .report_writer import DATE_FORMAT

logger = logging.getLogger(__name__)


def _body_params(event: dict) -> dict:
    """JSON object parameters of the request body; any other body is ignored."""
    body = event.get("body")
    if not body:
        return {}
    try:
        if event.get("isBase64Encoded"):
            body = base64.b64decode(body).decode("utf-8")
        params = json.loads(body)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError):
        logger.debug("Ignoring request body that is not JSON")
        return {}
    return params if isinstance(params, dict) else {}


def parse_run_date(event: Optional[dict], now: Optional[datetime] = None) -> date:
    """
    Works out which day to summarize from the trigger event.

    Args:
        event: API Gateway or EventBridge event. A 'date' query parameter
            (or JSON body field) in YYYY-MM-DD form overrides the default.
        now: Current time, injectable for tests.

    Returns:
        The requested date, or today's UTC date when none is given.

    Raises:
        InvalidRequestError: If a date is given but cannot be parsed.
    """
    event = event or {}
    query_params = event.get("queryStringParameters") or {}
    requested = query_params.get("date") or _body_params(event).get("date")

    if not requested:
        return (now or datetime.now(timezone.utc)).date()

    try:
        return datetime.strptime(str(requested).strip(), DATE_FORMAT).date()
    except ValueError:
        raise InvalidRequestError(f"Invalid parameter: date must be YYYY-MM-DD, got '{requested}'.")
