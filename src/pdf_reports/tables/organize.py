"""Sorting, grouping and aggregation over a normalized Table.

Grouping produces an explicit ``Leaf | Branch`` tree: a ``Branch`` maps
category strings to child nodes, a ``Leaf`` holds the rows of one innermost
category.  Children are always ordered by ordinal string comparison of their
keys, regardless of input row order.
"""

import logging
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from pdf_reports.errors import InvalidGroupSpec
from pdf_reports.tables.coercion import aggregate_number, is_missing, to_text
from pdf_reports.tables.columns import ColumnKey, resolve_column, resolve_columns
from pdf_reports.tables.compare import row_sort_key
from pdf_reports.tables.patterns import NUMERIC_OPERATIONS, UNCATEGORIZED
from pdf_reports.tables.schema import ColumnSchema, Row, Table

logger = logging.getLogger(__name__)


# ─── Group Tree ──────────────────────────────────────────────────────────────


class Leaf(BaseModel):
    """Innermost group: the rows of one category path, in final order."""

    kind: Literal["leaf"] = "leaf"
    rows: list[Row] = Field(default_factory=list)


class Branch(BaseModel):
    """Inner group: category value -> child node, keys in ordinal order."""

    kind: Literal["branch"] = "branch"
    children: dict[str, "GroupNode"] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Plain nested mapping (leaves become row lists), e.g. for JSON dumps."""
        return {key: child.to_dict() if isinstance(child, Branch) else child.rows for key, child in self.children.items()}


GroupNode = Annotated[Leaf | Branch, Field(discriminator="kind")]

Branch.model_rebuild()


def flatten_rows(node: Leaf | Branch) -> list[Row]:
    """All rows below *node*, concatenated in traversal order (never re-sorted)."""
    if isinstance(node, Leaf):
        return list(node.rows)
    rows: list[Row] = []
    for child in node.children.values():
        rows.extend(flatten_rows(child))
    return rows


def has_content(node: Leaf | Branch) -> bool:
    """True when at least one leaf below *node* holds rows."""
    if isinstance(node, Leaf):
        return bool(node.rows)
    return any(has_content(child) for child in node.children.values())


def category_of(value: Any) -> str:
    """Category string for a grouping cell; missing values fall into UNCATEGORIZED."""
    if is_missing(value):
        return UNCATEGORIZED
    return to_text(value)


# ─── Organizer ───────────────────────────────────────────────────────────────


class DataOrganizer:
    """Sorts, groups and aggregates the rows of one Table.

    Created per report request; the Table and schemas are never mutated.
    Column types for sorting come from *schemas* (default ``string``).
    """

    def __init__(self, table: Table, schemas: dict[int, ColumnSchema] | None = None):
        self.table = table
        self.schemas = schemas or {}

    def resolve(self, key: ColumnKey) -> int:
        return resolve_column(self.table.columns, key)

    def column_type(self, index: int) -> str:
        schema = self.schemas.get(index)
        return schema.type if schema else "string"

    def sort_rows(self, rows: list[Row], index: int, ascending: bool = True) -> list[Row]:
        """Stable sort of *rows* by the cell at *index* using the column's type."""
        return sorted(rows, key=row_sort_key(index, ascending, self.column_type(index)))

    # ─── Sorting ─────────────────────────────────────────────────────────

    def sort_by_column(self, column_key: ColumnKey, ascending: bool = True) -> Table:
        """Return a new Table with rows stably sorted by *column_key*."""
        index = self.resolve(column_key)
        logger.debug("Sorting %d rows by column %d (%s)", len(self.table.rows), index, "asc" if ascending else "desc")
        return self.table.with_rows(self.sort_rows(self.table.rows, index, ascending))

    # ─── Grouping ────────────────────────────────────────────────────────

    def group_by_column(self, category_key: ColumnKey, sort_key: ColumnKey | None = None, ascending: bool = True) -> Branch:
        """Single-level grouping: category -> Leaf, each bucket optionally sorted."""
        return self.group_by_columns([category_key], sort_key, ascending)

    def group_by_columns(
        self,
        category_keys: list[ColumnKey],
        sort_key: ColumnKey | None = None,
        ascending: bool = True,
    ) -> Branch:
        """Nested grouping by *category_keys* (outermost first).

        All keys are resolved before any row is touched, so a bad key fails
        the whole call.  Leaves are stably sorted by *sort_key* when given.
        """
        if not category_keys:
            raise InvalidGroupSpec("At least one grouping column is required")
        indices = resolve_columns(self.table.columns, list(category_keys))
        sort_index = self.resolve(sort_key) if sort_key is not None else None

        tree = self._build(self.table.rows, indices, 0, sort_index, ascending)
        logger.info(
            "Grouped %d rows by %s into %d top-level categories",
            len(self.table.rows),
            [self.table.columns[i] for i in indices],
            len(tree.children),
        )
        return tree

    def _partition(self, rows: list[Row], index: int) -> dict[str, list[Row]]:
        buckets: dict[str, list[Row]] = {}
        for row in rows:
            buckets.setdefault(category_of(row[index]), []).append(row)
        return dict(sorted(buckets.items()))

    def _build(self, rows: list[Row], indices: list[int], depth: int, sort_index: int | None, ascending: bool):
        if depth == len(indices):
            if sort_index is not None:
                rows = self.sort_rows(rows, sort_index, ascending)
            return Leaf(rows=rows)
        children = {
            category: self._build(bucket, indices, depth + 1, sort_index, ascending)
            for category, bucket in self._partition(rows, indices[depth]).items()
        }
        return Branch(children=children)

    # ─── Aggregation ─────────────────────────────────────────────────────

    def compute_aggregate(self, rows: list[Row], column_key: ColumnKey, operation: str) -> Any:
        """Aggregate the column at *column_key* over *rows*.

        ``count`` counts rows regardless of their values.  The numeric
        operations skip values that cannot be coerced; over no usable values
        ``sum`` and ``avg`` give 0 while ``min`` and ``max`` give None.  Any
        other operation (including ``none``) gives an empty string.
        """
        index = self.resolve(column_key)
        operation = (operation or "").strip().lower()
        if operation == "count":
            return len(rows)
        if operation not in NUMERIC_OPERATIONS:
            return ""

        values = [number for number in (aggregate_number(row[index]) for row in rows) if number is not None]
        if operation == "sum":
            return sum(values)
        if operation == "avg":
            return sum(values) / len(values) if values else 0
        if not values:
            return None
        return min(values) if operation == "min" else max(values)
