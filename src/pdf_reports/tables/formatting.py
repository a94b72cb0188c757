"""Typed display formatting for table cells and computed summary values.

``format_value`` implements the per-type rules (price, percentage, number,
date, string) with a JSON-literal fallback.  ``CellFormatter`` binds those
rules to a table's column schemas and to any host-injected per-column
formatter, which fully replaces the typed rules for its column.
"""

import json
import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from pdf_reports.config import CURRENCY_SYMBOL
from pdf_reports.hooks import ValueFormatter
from pdf_reports.tables.coercion import is_numeric, to_text
from pdf_reports.tables.columns import ColumnKey, resolve_column
from pdf_reports.tables.patterns import DISPLAY_DATE_FORMAT, ISO_DATE_RE
from pdf_reports.tables.schema import ColumnSchema

logger = logging.getLogger(__name__)


# ─── Number Formatting ───────────────────────────────────────────────────────


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value).strip())


def number_format(value: Any, decimals: int = 0, decimal_point: str = ".", thousands_sep: str = ",") -> str:
    """Group thousands and fix the number of decimals (half-up rounding).

    ``number_format(1234.5, 2, ",", ".")`` -> ``"1.234,50"``
    """
    quantum = Decimal(1).scaleb(-decimals)
    number = _to_decimal(value)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the decimals
        ctx.prec = max(ctx.prec, number.adjusted() + decimals + 2)
        rounded = number.quantize(quantum, rounding=ROUND_HALF_UP)
    # Format with placeholders first so the two separators can be swapped safely
    text = f"{rounded:,.{decimals}f}"
    return text.replace(",", "\x00").replace(".", decimal_point).replace("\x00", thousands_sep)


# ─── Typed Formatting ────────────────────────────────────────────────────────


def _format_date(value: Any) -> str | None:
    if isinstance(value, (datetime, date)):
        return value.strftime(DISPLAY_DATE_FORMAT)
    if isinstance(value, str) and ISO_DATE_RE.match(value):
        try:
            return datetime.strptime(value, "%Y-%m-%d").strftime(DISPLAY_DATE_FORMAT)
        except ValueError:
            return None
    return None


def format_value(value: Any, column_type: str | None = "string", currency_symbol: str = CURRENCY_SYMBOL) -> str:
    """Convert a raw value to its display string for *column_type*.

    When the type's condition is not met (e.g. a non-numeric price), the
    default applies: non-strings are rendered as JSON literals, strings are
    returned unchanged.
    """
    if column_type == "price" and is_numeric(value):
        return f"{currency_symbol} {number_format(value, 2, ',', '.')}"
    if column_type == "percentage" and is_numeric(value):
        return number_format(value, 2) + "%"
    if column_type == "number" and is_numeric(value):
        return number_format(value, 0, ",", ".")
    if column_type == "date":
        formatted = _format_date(value)
        if formatted is not None:
            return formatted
    if column_type == "string" and not isinstance(value, str):
        return to_text(value)

    if not isinstance(value, str):
        return json.dumps(value, ensure_ascii=False, default=str)
    return value


# ─── Per-Column Binding ──────────────────────────────────────────────────────


class CellFormatter:
    """Formats cells and aggregates of one table using its schemas and injected overrides."""

    def __init__(
        self,
        columns: list[str],
        schemas: dict[int, ColumnSchema] | None = None,
        overrides: dict[ColumnKey, ValueFormatter] | None = None,
        currency_symbol: str = CURRENCY_SYMBOL,
    ):
        self.columns = columns
        self.schemas = schemas or {}
        self.currency_symbol = currency_symbol
        self.overrides = {resolve_column(columns, key): fn for key, fn in (overrides or {}).items()}

    def column_type(self, index: int) -> str:
        schema = self.schemas.get(index)
        return schema.type if schema else "string"

    def format_cell(self, value: Any, index: int) -> str:
        override = self.overrides.get(index)
        if override is not None:
            return str(override(value))
        return format_value(value, self.column_type(index), self.currency_symbol)

    def format_row(self, row: list[Any]) -> list[str]:
        return [self.format_cell(value, idx) for idx, value in enumerate(row)]

    def format_rows(self, rows: list[list[Any]]) -> list[list[str]]:
        return [self.format_row(row) for row in rows]

    def format_aggregate(self, value: Any, index: int, operation: str) -> str:
        """Display string for a computed summary value.

        Counts are plain integers regardless of the column type; an aggregate
        with no coercible input (``None``) or an unknown operation renders empty.
        """
        if value is None or value == "":
            return ""
        if operation == "count":
            return format_value(value, "number", self.currency_symbol)
        return self.format_cell(value, index)
