"""Pydantic models for tabular report data and its configuration.

``Table`` is the normalized, positional form of the request data: every row
has exactly ``len(columns)`` cells.  ``ColumnSchema`` is the closed per-column
record (type, summary operation, presentation attributes) with an ``extra``
overflow map for keys this version does not know about.  ``LevelConfig`` is
the per-depth configuration of hierarchical grouping.
"""

import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from pdf_reports.errors import MalformedRow
from pdf_reports.tables.coercion import to_text
from pdf_reports.tables.columns import ColumnKey, resolve_column

logger = logging.getLogger(__name__)

ColumnType = Literal["string", "price", "percentage", "number", "date"]
SummaryOperation = Literal["sum", "avg", "count", "min", "max", "none"]

Row = list[Any]


# ─── Column Schema ───────────────────────────────────────────────────────────


class ColumnSchema(BaseModel):
    """Per-column configuration.

    Accepts snake_case or camelCase keys (``summary_operation`` /
    ``summaryOperation``).  A bare string is shorthand for ``{"type": ...}``.
    Unknown keys are kept verbatim in ``extra`` and returned by ``to_config``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: ColumnType = "string"
    summary_operation: SummaryOperation = "none"
    summary_label: str | None = None

    # Presentation attributes: passed through untouched, interpreted only by the PDF renderer
    align: str | None = None
    width: str | int | float | None = None
    font_weight: str | None = None
    background_color: str | None = None
    text_color: str | None = None
    padding: int | float | None = None

    extra: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def split_known_keys(cls, data: Any) -> Any:
        """Route unknown keys into ``extra`` instead of rejecting or dropping them."""
        if isinstance(data, str):
            return {"type": data}
        if not isinstance(data, dict):
            return data
        known_keys = set(cls.model_fields) | {f.alias for f in cls.model_fields.values() if f.alias}
        known: dict[str, Any] = {}
        extra = dict(data.get("extra") or {})
        for key, value in data.items():
            if key == "extra":
                continue
            if key in known_keys:
                known[key] = value
            else:
                extra[key] = value
        known["extra"] = extra
        return known

    @field_validator("type", "summary_operation", mode="before")
    @classmethod
    def lowercase(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    def to_config(self) -> dict[str, Any]:
        """Serialize back to the request shape (camelCase keys, overflow keys restored)."""
        out = self.model_dump(by_alias=True, exclude_none=True, exclude={"extra"})
        out.update(self.extra)
        return out


def build_column_schemas(columns: list[str], *configs: Any) -> dict[int, ColumnSchema]:
    """Resolve one or more column configuration mappings to ``{index: ColumnSchema}``.

    Each config is a mapping ColumnKey -> schema (or type string), or a list
    indexed by position.  Later configs replace earlier ones per column.
    Keys that match no column raise ColumnNotFound.
    """
    schemas: dict[int, ColumnSchema] = {}
    for config in configs:
        if not config:
            continue
        items = enumerate(config) if isinstance(config, list) else config.items()
        for key, value in items:
            if value is None:
                continue
            schemas[resolve_column(columns, key)] = ColumnSchema.model_validate(value)
    return schemas


# ─── Summaries & Group Levels ────────────────────────────────────────────────


class SummaryDefinition(BaseModel):
    """One aggregate to compute for a column; a bare string is shorthand for the operation."""

    operation: SummaryOperation
    label: str | None = None

    @model_validator(mode="before")
    @classmethod
    def from_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"operation": data}
        return data

    @field_validator("operation", mode="before")
    @classmethod
    def lowercase(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class LevelConfig(BaseModel):
    """Rendering/aggregation configuration for one depth of a hierarchical grouping.

    Depth 0 is the outermost grouping column.  Title formatting and generated
    trailing content are host callables and live in ``ReportHooks``, not here.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page_break: bool = False
    show_summary: bool = False
    table_summary: bool = False
    summary_definitions: dict[ColumnKey, SummaryDefinition] = Field(default_factory=dict)
    content_after: str | None = None


# ─── Table ───────────────────────────────────────────────────────────────────


def normalize_row(columns: list[str], row: Any, position: int) -> Row:
    """Coerce a positional or name-keyed row to exactly ``len(columns)`` cells.

    Missing cells become ``""``; surplus positional cells are dropped.
    """
    n_cols = len(columns)
    if isinstance(row, dict):
        lowered = {str(k).casefold(): v for k, v in row.items()}
        cells = []
        for name in columns:
            if name in row:
                cells.append(row[name])
            else:
                cells.append(lowered.get(name.casefold(), ""))
        return cells
    if isinstance(row, (list, tuple)):
        cells = list(row[:n_cols])
        cells.extend([""] * (n_cols - len(cells)))
        return cells
    raise MalformedRow(position, row)


class Table(BaseModel):
    """Column names plus positional rows, immutable for one report-generation call."""

    model_config = ConfigDict(frozen=True)

    columns: list[str]
    rows: list[Row] = Field(default_factory=list)

    @field_validator("columns", mode="before")
    @classmethod
    def stringify_columns(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [to_text(c) for c in value]
        return value

    @model_validator(mode="after")
    def validate_row_widths(self) -> "Table":
        """Ensure every row has exactly len(columns) cells."""
        n_cols = len(self.columns)
        for i, row in enumerate(self.rows):
            if len(row) != n_cols:
                raise ValueError(f"Row {i} has {len(row)} cells, expected {n_cols} (matching columns)")
        return self

    @classmethod
    def from_payload(cls, columns: list[Any], rows: list[Any]) -> "Table":
        """Build a Table from raw request data, skipping rows that cannot be normalized."""
        names = [to_text(c) for c in columns]
        normalized: list[Row] = []
        for position, row in enumerate(rows):
            try:
                normalized.append(normalize_row(names, row, position))
            except MalformedRow as exc:
                logger.warning("Skipping malformed row: %s", exc)
        if len(normalized) != len(rows):
            logger.info("Normalized %d of %d rows (%d skipped)", len(normalized), len(rows), len(rows) - len(normalized))
        return cls(columns=names, rows=normalized)

    def with_rows(self, rows: list[Row]) -> "Table":
        """Return a new Table with the same columns and *rows* replaced."""
        return self.model_copy(update={"rows": list(rows)})
