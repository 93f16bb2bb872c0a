from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from dateutil import parser

REVIEW_TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime_utc(value: Any) -> datetime | None:
    if value is None:
        return None

    if isinstance(value, datetime):
        return to_utc(value)

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            return to_utc(parser.parse(value))
        except (ValueError, TypeError, OverflowError):
            return None

    return None


def from_epoch_seconds(value: Any) -> datetime:
    """Convert epoch seconds (int or numeric string, as the Play API sends) to UTC."""
    if isinstance(value, bool):
        raise ValueError("epoch seconds must be numeric")
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def format_review_timestamp(value: datetime) -> str:
    return to_utc(value).strftime(REVIEW_TIMESTAMP_FORMAT)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
