"""Report assembly: request model -> render instructions -> PDF bytes.

``ReportRequest`` validates the JSON body of a generation request.
``ReportAssembler`` wires one request to a DataOrganizer, a CellFormatter
and, for grouped reports, a HierarchyRenderer, then hands the resulting
instructions to the reportlab collaborator.

Usage:
    pdf_bytes = generate_report({"columns": ["Cat", "Val"], "rows": [["A", 1]], "group_by": "Cat"})
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pdf_reports.config import CURRENCY_SYMBOL, DEFAULT_DOCUMENT
from pdf_reports.errors import ColumnNotFound, InvalidGroupSpec, InvalidPayload, ReportError
from pdf_reports.hooks import ReportHooks
from pdf_reports.render.hierarchy import HierarchyRenderer, TraversalState, text_instruction
from pdf_reports.render.instructions import ColumnStyle, Instruction, StartPage, TableOptions, WriteTable, WriteTitle
from pdf_reports.render.pdf import RenderSettings, render_pdf
from pdf_reports.render.summaries import SummaryBuilder, resolve_summary_items
from pdf_reports.tables.columns import ColumnKey, resolve_column, resolve_columns
from pdf_reports.tables.formatting import CellFormatter
from pdf_reports.tables.organize import DataOrganizer
from pdf_reports.tables.schema import LevelConfig, Table, build_column_schemas

logger = logging.getLogger(__name__)


# ─── Request Model ───────────────────────────────────────────────────────────


class ReportRequest(BaseModel):
    """Body of ``POST /api/generate-pdf``.  Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    columns: list[Any] = Field(min_length=1)
    rows: list[Any] = Field(default_factory=list)

    # Document
    title: str | None = None
    author: str | None = None
    subject: str | None = None
    orientation: str = DEFAULT_DOCUMENT["orientation"]
    format: str = DEFAULT_DOCUMENT["format"]
    margins: list[float] | None = None
    title_font_size: float = DEFAULT_DOCUMENT["title_font_size"]
    content_font_size: float = DEFAULT_DOCUMENT["content_font_size"]

    # Columns, grouping and sorting
    column_config: dict[ColumnKey, Any] | list[Any] | None = None
    column_types: dict[ColumnKey, Any] | list[Any] | None = None
    group_by: ColumnKey | list[ColumnKey] | None = None
    group_config: dict[ColumnKey, LevelConfig] | None = None
    sort_by: ColumnKey | None = None
    sort_ascending: bool = True

    # Free-form content
    content_before: str | None = None
    content_after: str | None = None

    # Table presentation and summaries
    table_border: float = DEFAULT_DOCUMENT["table_border"]
    table_padding: float = DEFAULT_DOCUMENT["table_padding"]
    header_bg: str = DEFAULT_DOCUMENT["header_bg"]
    show_summary: bool = False
    summary_bg: str = DEFAULT_DOCUMENT["summary_bg"]
    summary_label_col: ColumnKey = 0
    summary_label: str = DEFAULT_DOCUMENT["summary_label"]

    # Output
    output_mode: str = "B64"
    filename: str | None = None

    @field_validator("orientation", mode="before")
    @classmethod
    def normalize_orientation(cls, value: Any) -> Any:
        """Accept P/L as well as portrait/landscape, in any case."""
        if not isinstance(value, str):
            return value
        letter = value.strip()[:1].upper()
        if letter not in ("P", "L"):
            raise ValueError(f"orientation must be P or L, got {value!r}")
        return letter

    @field_validator("output_mode", mode="before")
    @classmethod
    def uppercase_mode(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


# ─── Assembler ───────────────────────────────────────────────────────────────


class ReportAssembler:  # pylint: disable=too-many-instance-attributes
    """Turns one ReportRequest into render instructions and PDF bytes."""

    def __init__(self, request: ReportRequest, hooks: ReportHooks | None = None):
        self.request = request
        self.hooks = hooks or ReportHooks()
        try:
            self.table = Table.from_payload(request.columns, request.rows)
            # column_config wins over column_types for the same column
            self.schemas = build_column_schemas(self.table.columns, request.column_types, request.column_config)
        except ReportError:
            raise
        except ValueError as exc:
            raise InvalidPayload(f"Invalid table data or column configuration: {exc}") from exc
        columns = self.table.columns
        self.organizer = DataOrganizer(self.table, self.schemas)
        self.formatter = CellFormatter(columns, self.schemas, self.hooks.value_formatters, CURRENCY_SYMBOL)
        self.summaries = SummaryBuilder(self.organizer, self.formatter, request.summary_label_col, request.summary_label)
        self.table_options = TableOptions(
            border=request.table_border,
            padding=request.table_padding,
            header_bg=request.header_bg,
            summary_bg=request.summary_bg,
            font_size=request.content_font_size,
            column_styles=[ColumnStyle.from_schema(self.schemas.get(i)) for i in range(len(columns))],
        )

    # ─── Grouping Configuration ──────────────────────────────────────────

    def group_keys(self) -> list[ColumnKey]:
        group_by = self.request.group_by
        if group_by is None:
            return []
        return list(group_by) if isinstance(group_by, list) else [group_by]

    def level_depth(self, key: ColumnKey, group_indices: list[int]) -> int:
        """Depth addressed by a group_config key: a depth number or a grouping column name."""
        if isinstance(key, int) and not isinstance(key, bool):
            depth = key
        elif isinstance(key, str) and key.strip().isdigit():
            depth = int(key)
        else:
            try:
                index = resolve_column(self.table.columns, key)
            except ColumnNotFound as exc:
                raise InvalidGroupSpec(f"group_config key {key!r} is neither a depth nor a column: {exc}") from exc
            if index not in group_indices:
                raise InvalidGroupSpec(f"group_config key {key!r} is not one of the grouping columns")
            return group_indices.index(index)
        if not 0 <= depth < len(group_indices):
            raise InvalidGroupSpec(f"group_config depth {depth} is out of range for {len(group_indices)} grouping level(s)")
        return depth

    def level_configs(self, group_indices: list[int]) -> dict[int, LevelConfig]:
        """Per-depth configuration with defaults filled in.

        Depth 0 breaks pages by default; the innermost level embeds a summary
        row in its tables when the request asks for summaries.  Fields set
        explicitly in group_config override those defaults.
        """
        explicit: dict[int, LevelConfig] = {}
        for key, config in (self.request.group_config or {}).items():
            explicit[self.level_depth(key, group_indices)] = config

        innermost = len(group_indices) - 1
        levels: dict[int, LevelConfig] = {}
        for depth in range(len(group_indices)):
            defaults = LevelConfig(page_break=depth == 0, table_summary=self.request.show_summary and depth == innermost)
            config = explicit.get(depth)
            if config is not None:
                defaults = defaults.model_copy(update={name: getattr(config, name) for name in config.model_fields_set})
            levels[depth] = defaults
        return levels

    # ─── Instructions ────────────────────────────────────────────────────

    def instructions(self) -> list[Instruction]:
        if self.request.group_by is not None:
            return self._grouped_instructions()
        return self._plain_instructions()

    def _grouped_instructions(self) -> list[Instruction]:
        req = self.request
        keys = self.group_keys()
        if not keys:
            raise InvalidGroupSpec("group_by must name at least one column")
        group_indices = resolve_columns(self.table.columns, keys)
        levels = self.level_configs(group_indices)

        instructions: list[Instruction] = []
        state = TraversalState()
        if req.content_before is not None:
            # The first category continues on this page
            state.open_page()
            instructions.append(StartPage(orientation=req.orientation))
            if req.title:
                instructions.append(WriteTitle(text=req.title, font_size=req.title_font_size))
            instructions.append(text_instruction(req.content_before, req.content_font_size))

        if len(keys) == 1:
            tree = self.organizer.group_by_column(keys[0], req.sort_by, req.sort_ascending)
        else:
            tree = self.organizer.group_by_columns(keys, req.sort_by, req.sort_ascending)

        renderer = HierarchyRenderer(
            group_indices,
            self.formatter,
            self.summaries,
            levels=levels,
            hooks=self.hooks,
            table_options=self.table_options,
            title_size=req.title_font_size,
            orientation=req.orientation,
        )
        emitted, state = renderer.render(tree, state)
        instructions.extend(emitted)

        if req.content_after is not None:
            instructions.append(StartPage(orientation=req.orientation, forced=True))
            instructions.append(text_instruction(req.content_after, req.content_font_size))
        return instructions

    def _plain_instructions(self) -> list[Instruction]:
        req = self.request
        table = self.table
        if req.sort_by is not None:
            table = self.organizer.sort_by_column(req.sort_by, req.sort_ascending)

        instructions: list[Instruction] = [StartPage(orientation=req.orientation)]
        if req.title:
            instructions.append(WriteTitle(text=req.title, font_size=req.title_font_size))
        if req.content_before is not None:
            instructions.append(text_instruction(req.content_before, req.content_font_size))

        summary = None
        if req.show_summary:
            summary = self.summaries.summary_row(table.rows, resolve_summary_items(table.columns, self.schemas))
        instructions.append(
            WriteTable(
                columns=table.columns,
                rows=self.formatter.format_rows(table.rows),
                options=self.table_options,
                summary=summary,
            )
        )

        if req.content_after is not None:
            instructions.append(text_instruction(req.content_after, req.content_font_size))
        return instructions

    # ─── Rendering ───────────────────────────────────────────────────────

    def settings(self) -> RenderSettings:
        req = self.request
        return RenderSettings(
            orientation=req.orientation,
            format=req.format,
            margins=req.margins or list(DEFAULT_DOCUMENT["margins"]),
            title=req.title or DEFAULT_DOCUMENT["title"],
            author=req.author or DEFAULT_DOCUMENT["author"],
            subject=req.subject or DEFAULT_DOCUMENT["subject"],
        )

    def build(self) -> bytes:
        logger.info(
            "Assembling report: %d rows x %d columns, group_by=%s, sort_by=%s",
            len(self.table.rows),
            len(self.table.columns),
            self.request.group_by,
            self.request.sort_by,
        )
        return render_pdf(self.instructions(), self.settings())


def generate_report(payload: ReportRequest | dict, hooks: ReportHooks | None = None) -> bytes:
    """Validate *payload* (if needed) and render it to PDF bytes."""
    request = payload if isinstance(payload, ReportRequest) else ReportRequest.model_validate(payload)
    return ReportAssembler(request, hooks).build()
