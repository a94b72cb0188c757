"""Typed value comparison used by every sort in the grouping engine.

``compare_values`` returns -1, 0 or 1 and is antisymmetric in its direction
flag: ``compare_values(a, b, True, t) == -compare_values(a, b, False, t)``.
Missing values (None, blank strings) sort before present ones when
ascending and after them when descending.
"""

from functools import cmp_to_key
from typing import Any, Callable

from pdf_reports.tables.coercion import is_missing, parse_date, to_float, to_text


def _sign(a, b) -> int:
    return (a > b) - (a < b)


def _directed(result: int, ascending: bool) -> int:
    return result if ascending else -result


def _compare_missing(a_missing: bool, b_missing: bool, ascending: bool) -> int:
    """Order a missing operand relative to a present one (or two missing ones)."""
    if a_missing and b_missing:
        return 0
    return _directed(-1 if a_missing else 1, ascending)


# ─── Per-Type Comparisons ────────────────────────────────────────────────────


def compare_strings(a: Any, b: Any, ascending: bool = True) -> int:
    """Case-sensitive ordinal comparison of the string representations."""
    return _directed(_sign(to_text(a), to_text(b)), ascending)


def compare_numeric(a: Any, b: Any, ascending: bool = True) -> int:
    """Numeric comparison after float coercion (non-numeric strings count as 0.0)."""
    return _directed(_sign(to_float(a), to_float(b)), ascending)


def compare_percentages(a: Any, b: Any, ascending: bool = True) -> int:
    """Numeric comparison after stripping a trailing '%'."""
    if isinstance(a, str):
        a = a.strip().removesuffix("%")
    if isinstance(b, str):
        b = b.strip().removesuffix("%")
    return compare_numeric(a, b, ascending)


def compare_dates(a: Any, b: Any, ascending: bool = True) -> int:
    """Compare as instants when both parse; otherwise degrade without breaking antisymmetry.

    Two unparseable values compare as strings.  When only one side parses,
    the unparseable side is ordered like a missing value.
    """
    date_a = parse_date(a)
    date_b = parse_date(b)
    if date_a is None and date_b is None:
        return compare_strings(a, b, ascending)
    if date_a is None or date_b is None:
        return _compare_missing(date_a is None, date_b is None, ascending)
    return _directed(_sign(date_a, date_b), ascending)


_COMPARATORS: dict[str, Callable[[Any, Any, bool], int]] = {
    "string": compare_strings,
    "number": compare_numeric,
    "price": compare_numeric,
    "percentage": compare_percentages,
    "date": compare_dates,
}


# ─── Public API ──────────────────────────────────────────────────────────────


def compare_values(a: Any, b: Any, ascending: bool = True, column_type: str | None = None) -> int:
    """Compare two cell values according to *column_type* (default ``string``)."""
    a_missing, b_missing = is_missing(a), is_missing(b)
    if a_missing or b_missing:
        return _compare_missing(a_missing, b_missing, ascending)
    comparator = _COMPARATORS.get(column_type or "string", compare_strings)
    return comparator(a, b, ascending)


def row_sort_key(index: int, ascending: bool = True, column_type: str | None = None):
    """Key function for ``sorted`` ordering rows by the cell at *index*."""

    def _cmp(row_a: list, row_b: list) -> int:
        return compare_values(row_a[index], row_b[index], ascending, column_type)

    return cmp_to_key(_cmp)
