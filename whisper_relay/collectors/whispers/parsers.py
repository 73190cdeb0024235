"""JSON parsers for the Earnings Whispers results feed."""
import json
import logging
from typing import Any

from whisper_relay.models import ReportRecord

logger = logging.getLogger(__name__)


def parse_reports(body: str) -> list[ReportRecord]:
    """Parse the todaysresults response body into ReportRecords.

    The endpoint returns a bare JSON array of report objects. Objects that
    lack an epsDate or ticker are skipped; anything else that does not match
    that shape is rejected.

    Args:
        body: Raw response text

    Returns:
        Reports in feed order

    Raises:
        ValueError: If the body is not a JSON array of objects
    """
    if not body or not body.strip():
        raise ValueError("Invalid feed: empty body")

    try:
        payload: Any = json.loads(body)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid feed JSON: {e}") from e

    if not isinstance(payload, list):
        raise ValueError(f"Invalid feed: expected a JSON array, got {type(payload).__name__}")

    reports = []
    for i, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ValueError(f"Invalid feed: item {i} is {type(item).__name__}, not an object")
        try:
            reports.append(ReportRecord.from_dict(item))
        except ValueError as e:
            logger.warning(f"Skipping feed item {i}: {e}")

    return reports
