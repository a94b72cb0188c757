"""Value coercion helpers shared by comparison, formatting, grouping and aggregation.

Cell values arrive straight from JSON, so a "number" column may hold ints,
floats, numeric strings, currency strings or garbage.  Each helper here
defines exactly one coercion rule so the callers stay consistent.
"""

import logging
import math
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any

from dateutil import parser as date_parser

from pdf_reports.tables.patterns import AGGREGATE_STRIP_RE, DATE_FORMATS, NUMERIC_PREFIX_RE, NUMERIC_RE

logger = logging.getLogger(__name__)


# ─── Missing Values & Text ───────────────────────────────────────────────────


def is_missing(value: Any) -> bool:
    """Return True for None and for empty / whitespace-only strings."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def to_text(value: Any) -> str:
    """String representation used for categories and the ``string`` column type."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    # 3.0 -> "3" so integral floats group with their int spelling
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ─── Numbers ─────────────────────────────────────────────────────────────────


def is_numeric(value: Any) -> bool:
    """Return True for finite real numbers (not bools) and strings that spell one."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    return isinstance(value, str) and bool(NUMERIC_RE.match(value))


def to_float(value: Any) -> float:
    """Coerce for numeric comparison: leading numeric prefix of strings, 0.0 otherwise."""
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        match = NUMERIC_PREFIX_RE.match(value)
        return float(match.group(0)) if match else 0.0
    return 0.0


def aggregate_number(value: Any) -> float | None:
    """Coerce for aggregation, or None when the value has no usable number.

    Strings are stripped of everything except digits, dots and minus signs
    first, so ``"€ 1200"`` becomes 1200.0 while ``"n/a"`` is discarded.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        cleaned = AGGREGATE_STRIP_RE.sub("", value)
        try:
            return float(cleaned)
        except ValueError:
            return None
    return None


# ─── Dates ───────────────────────────────────────────────────────────────────


def _naive_utc(value: datetime) -> datetime:
    """Drop timezone info after converting aware instants to UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _from_timestamp(value: float) -> datetime | None:
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)
    except (OverflowError, OSError, ValueError):
        return None


def parse_date(value: Any) -> datetime | None:
    """Parse a cell into a naive UTC datetime, or None if it is not a date.

    Order: date/datetime objects, the fixed DATE_FORMATS, free-form parsing,
    then numeric values as Unix timestamps.
    """
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, bool) or value is None:
        return None

    if isinstance(value, str):
        text = value.strip()
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        try:
            return _naive_utc(date_parser.parse(text))
        except (ValueError, OverflowError):
            logger.debug("Free-form date parse failed for %r", value)

    if is_numeric(value):
        return _from_timestamp(float(value))
    return None
