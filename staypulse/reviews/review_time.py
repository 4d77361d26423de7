"""
Timestamp helpers for review records.

Ordering and filtering always work on parsed datetimes; the short labels
produced here are for display only and are never parsed back.
"""

from datetime import datetime, timezone
from typing import Optional

from .review_models import ReviewContractError

# Fixed English abbreviations so labels don't depend on the process locale.
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_SECOND = 1.0
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR

# Largest unit first; month and year are calendar approximations.
RELATIVE_UNITS = (
    ("year", 365 * _DAY),
    ("month", 30 * _DAY),
    ("week", 7 * _DAY),
    ("day", _DAY),
    ("hour", _HOUR),
    ("minute", _MINUTE),
)

_NAMED_OFFSETS = {
    ("day", -1): "yesterday",
    ("day", 0): "today",
    ("day", 1): "tomorrow",
    ("minute", 0): "this minute",
    ("hour", 0): "this hour",
}


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    A trailing "Z" is accepted; naive timestamps are taken as UTC.

    Raises:
        ReviewContractError: value is missing or not ISO-8601
    """
    if not value or not isinstance(value, str):
        raise ReviewContractError(f"Timestamp must be an ISO-8601 string, got: {value!r}")
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ReviewContractError(f"Timestamp is not ISO-8601: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_date_label(moment: datetime) -> str:
    """'Mar 5, 2024' style label, in UTC."""
    moment = moment.astimezone(timezone.utc)
    return f"{MONTH_ABBREVIATIONS[moment.month - 1]} {moment.day}, {moment.year}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_relative_time(value: Optional[str], now: Optional[datetime] = None) -> str:
    """
    Human label for the distance between a timestamp and now.

    Examples: "3 days ago", "in 2 hours", "yesterday", "last month".
    Returns "n/a" when no timestamp is given.
    """
    if not value:
        return "n/a"
    now = now or utc_now()
    diff = (parse_timestamp(value) - now).total_seconds()

    for unit, length in RELATIVE_UNITS:
        if abs(diff) >= length:
            break
    # round half away from zero, like the rating labels
    delta = int(abs(diff) / length + 0.5) * (1 if diff >= 0 else -1)
    return _relative_label(unit, delta)


def _relative_label(unit: str, delta: int) -> str:
    named = _NAMED_OFFSETS.get((unit, delta))
    if named:
        return named
    if unit in ("week", "month", "year") and abs(delta) == 1:
        return f"{'next' if delta > 0 else 'last'} {unit}"
    count = abs(delta)
    plural = unit if count == 1 else f"{unit}s"
    if delta > 0:
        return f"in {count} {plural}"
    return f"{count} {plural} ago"
