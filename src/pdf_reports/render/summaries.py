"""Summary rows and textual summaries over a set of rows.

Which columns are summarised comes either from a level's explicit summary
definitions or, when a level defines none, from every column whose schema
carries a summary operation other than ``none``.
"""

from typing import Any

from pydantic import BaseModel

from pdf_reports.render.instructions import SummaryRow
from pdf_reports.tables.columns import ColumnKey, column_name, resolve_column
from pdf_reports.tables.formatting import CellFormatter
from pdf_reports.tables.organize import DataOrganizer
from pdf_reports.tables.patterns import OPERATION_LABELS
from pdf_reports.tables.schema import ColumnSchema, Row, SummaryDefinition


class SummaryItem(BaseModel):
    """One resolved aggregate: column index, operation and optional label."""

    index: int
    operation: str
    label: str | None = None


def default_label(operation: str, name: str) -> str:
    """``"sum", "Amount"`` -> ``"Total Amount"``."""
    return f"{OPERATION_LABELS.get(operation, operation.title())} {name}"


def resolve_summary_items(
    columns: list[str],
    schemas: dict[int, ColumnSchema],
    definitions: dict[ColumnKey, SummaryDefinition] | None = None,
) -> list[SummaryItem]:
    """Resolve the aggregates to compute, ordered by column position.

    Explicit *definitions* win; otherwise the column schemas are used.
    Entries whose operation is ``none`` are dropped.
    """
    items: dict[int, SummaryItem] = {}
    if definitions:
        for key, definition in definitions.items():
            index = resolve_column(columns, key)
            items[index] = SummaryItem(index=index, operation=definition.operation, label=definition.label)
    else:
        for index, schema in schemas.items():
            items[index] = SummaryItem(index=index, operation=schema.summary_operation, label=schema.summary_label)
    return [items[i] for i in sorted(items) if items[i].operation != "none"]


class SummaryBuilder:
    """Computes and formats aggregates for summary rows and summary text."""

    def __init__(
        self,
        organizer: DataOrganizer,
        formatter: CellFormatter,
        label_column: ColumnKey = 0,
        label: str = "Total",
    ):
        self.organizer = organizer
        self.formatter = formatter
        self.label_index = organizer.resolve(label_column)
        self.label = label

    @property
    def columns(self) -> list[str]:
        return self.organizer.table.columns

    def values(self, rows: list[Row], items: list[SummaryItem]) -> list[tuple[SummaryItem, Any, str]]:
        """``(item, raw aggregate, display string)`` for every item."""
        results = []
        for item in items:
            raw = self.organizer.compute_aggregate(rows, item.index, item.operation)
            results.append((item, raw, self.formatter.format_aggregate(raw, item.index, item.operation)))
        return results

    def summary_row(self, rows: list[Row], items: list[SummaryItem]) -> SummaryRow | None:
        """Summary row aligned to the columns, or None when nothing is aggregated.

        The label is written into the label column unless that column holds
        an aggregate itself.
        """
        if not items:
            return None
        cells = [""] * len(self.columns)
        for item, _raw, display in self.values(rows, items):
            cells[item.index] = display
        if self.label_index not in {item.index for item in items}:
            cells[self.label_index] = self.label
        return SummaryRow(cells=cells)

    def summary_lines(self, rows: list[Row], items: list[SummaryItem]) -> list[str]:
        """``"<label>: <value>"`` per aggregate, for textual summaries."""
        lines = []
        for item, _raw, display in self.values(rows, items):
            label = item.label or default_label(item.operation, column_name(self.columns, item.index))
            lines.append(f"{label}: {display}")
        return lines
