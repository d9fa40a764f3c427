"""Wire date format: ISO 8601, UTC when no offset is given."""

from __future__ import annotations

from datetime import date, datetime, timezone

from rtm_api.exceptions import RtmApiError

WIRE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def parse_datetime(text: str | None) -> datetime | None:
    """Parse a wire date.

    Args:
        text: "2012-03-14T10:00:00Z", "2012-03-14T10:00:00" or "2012-03-14".
            Empty values mean "no date".

    Returns:
        Timezone-aware datetime, or None for an empty value.

    Raises:
        RtmApiError: If the text is not a valid date.
    """
    if text is None or not text.strip():
        return None

    try:
        parsed = datetime.fromisoformat(text.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise RtmApiError(f"Malformed date: {text!r}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def require_datetime(text: str | None) -> datetime:
    """Parse a wire date that must be present."""
    parsed = parse_datetime(text)
    if parsed is None:
        raise RtmApiError("Expected a date, got an empty value")
    return parsed


def to_wire(value: datetime | date) -> str:
    """Format a date or datetime for a request parameter.

    Naive datetimes are taken as UTC; plain dates as midnight UTC.
    """
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(WIRE_FORMAT)
