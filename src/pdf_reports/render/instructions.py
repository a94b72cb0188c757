"""Render instructions passed from the hierarchy walk to the PDF collaborator.

Every instruction is fully resolved: table cells are already display
strings and styling is already looked up, so the renderer never needs the
Table, the schemas or the hooks.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from pdf_reports.config import DEFAULT_DOCUMENT
from pdf_reports.tables.schema import ColumnSchema


class ColumnStyle(BaseModel):
    """Presentation attributes of one column, copied verbatim from its schema."""

    align: str | None = None
    width: str | int | float | None = None
    font_weight: str | None = None
    background_color: str | None = None
    text_color: str | None = None
    padding: int | float | None = None

    @classmethod
    def from_schema(cls, schema: ColumnSchema | None) -> "ColumnStyle":
        if schema is None:
            return cls()
        return cls.model_validate(schema.model_dump(include=set(cls.model_fields)))


class TableOptions(BaseModel):
    border: float = DEFAULT_DOCUMENT["table_border"]
    padding: float = DEFAULT_DOCUMENT["table_padding"]
    header_bg: str | None = DEFAULT_DOCUMENT["header_bg"]
    summary_bg: str | None = DEFAULT_DOCUMENT["summary_bg"]
    font_size: float = DEFAULT_DOCUMENT["content_font_size"]
    column_styles: list[ColumnStyle] = Field(default_factory=list)


class SummaryRow(BaseModel):
    """Formatted summary cells, one per column (blank where nothing is aggregated)."""

    cells: list[str]


# ─── Instructions ────────────────────────────────────────────────────────────


class StartPage(BaseModel):
    """Open a new page; ``forced`` marks a level page break rather than the first page."""

    kind: Literal["start_page"] = "start_page"
    orientation: str = "P"
    forced: bool = False


class WriteTitle(BaseModel):
    kind: Literal["title"] = "title"
    text: str
    font_size: float
    depth: int = 0


class WriteTable(BaseModel):
    kind: Literal["table"] = "table"
    columns: list[str]
    rows: list[list[str]] = Field(default_factory=list)
    options: TableOptions = Field(default_factory=TableOptions)
    summary: SummaryRow | None = None


class WriteText(BaseModel):
    kind: Literal["text"] = "text"
    text: str
    font_size: float = DEFAULT_DOCUMENT["content_font_size"]
    html: bool = False


class WriteSpacing(BaseModel):
    kind: Literal["spacing"] = "spacing"
    amount: float


Instruction = Annotated[StartPage | WriteTitle | WriteTable | WriteText | WriteSpacing, Field(discriminator="kind")]
