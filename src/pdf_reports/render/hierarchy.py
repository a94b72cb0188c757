"""Depth-first walk of a group tree that decides what gets rendered.

For every category the walk decides whether a page break is due, builds the
title, and emits the table (leaf) or recurses (branch), followed by the
level's summaries and trailing content.  Categories with no rows anywhere
below them produce nothing at all: no title, no break, and they do not count
as an occurrence for later page-break decisions.

Traversal bookkeeping lives in a ``TraversalState`` that is handed to each
recursive call and handed back with the emitted instructions.
"""

import logging

from pdf_reports.config import DEFAULT_DOCUMENT, MIN_TITLE_FONT_SIZE, SECTION_SPACING, TITLE_FONT_STEP
from pdf_reports.hooks import ReportHooks
from pdf_reports.render.instructions import (
    Instruction,
    StartPage,
    TableOptions,
    WriteSpacing,
    WriteTable,
    WriteText,
    WriteTitle,
)
from pdf_reports.render.summaries import SummaryBuilder, SummaryItem, resolve_summary_items
from pdf_reports.tables.columns import column_name
from pdf_reports.tables.formatting import CellFormatter
from pdf_reports.tables.organize import Branch, Leaf, flatten_rows, has_content
from pdf_reports.tables.patterns import HTML_TAG_RE
from pdf_reports.tables.schema import LevelConfig, Row

logger = logging.getLogger(__name__)


def title_font_size(depth: int, base: float, step: float = TITLE_FONT_STEP, minimum: float = MIN_TITLE_FONT_SIZE) -> float:
    """Title size for a group depth: shrinks by *step* per level, never below *minimum*."""
    return max(minimum, base - depth * step)


def text_instruction(text: str, font_size: float) -> WriteText:
    """Wrap free-form content, flagging it as HTML when it contains markup."""
    return WriteText(text=text, font_size=font_size, html=bool(HTML_TAG_RE.search(text)))


# ─── Traversal State ─────────────────────────────────────────────────────────


class TraversalState:
    """Bookkeeping carried through one walk.

    occurrences counts content-bearing categories already rendered per
    ``(depth, parent path)``; page_open records whether any page exists yet.
    """

    def __init__(self, page_open: bool = False):
        self.page_open = page_open
        self.occurrences: dict[tuple[int, tuple[str, ...]], int] = {}
        self.pages = 1 if page_open else 0
        self.categories = 0

    def seen(self, depth: int, path: list[str]) -> int:
        return self.occurrences.get((depth, tuple(path)), 0)

    def record(self, depth: int, path: list[str]) -> None:
        key = (depth, tuple(path))
        self.occurrences[key] = self.occurrences.get(key, 0) + 1
        self.categories += 1

    def open_page(self) -> None:
        self.page_open = True
        self.pages += 1


# ─── Renderer ────────────────────────────────────────────────────────────────


class HierarchyRenderer:  # pylint: disable=too-many-instance-attributes
    """Turns a grouped Branch into an ordered list of render instructions."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        group_indices: list[int],
        formatter: CellFormatter,
        summaries: SummaryBuilder,
        levels: dict[int, LevelConfig] | None = None,
        hooks: ReportHooks | None = None,
        table_options: TableOptions | None = None,
        title_size: float = DEFAULT_DOCUMENT["title_font_size"],
        orientation: str = DEFAULT_DOCUMENT["orientation"],
    ):
        self.group_indices = group_indices
        self.formatter = formatter
        self.summaries = summaries
        self.levels = levels or {}
        self.hooks = hooks or ReportHooks()
        self.table_options = table_options or TableOptions()
        self.title_size = title_size
        self.orientation = orientation
        self._summary_items: dict[int, list[SummaryItem]] = {}

    @property
    def columns(self) -> list[str]:
        return self.formatter.columns

    def level(self, depth: int) -> LevelConfig:
        return self.levels.get(depth) or LevelConfig()

    def summary_items(self, depth: int) -> list[SummaryItem]:
        if depth not in self._summary_items:
            self._summary_items[depth] = resolve_summary_items(
                self.columns, self.formatter.schemas, self.level(depth).summary_definitions
            )
        return self._summary_items[depth]

    # ─── Entry Point ─────────────────────────────────────────────────────

    def render(self, tree: Branch, state: TraversalState | None = None) -> tuple[list[Instruction], TraversalState]:
        """Walk *tree* and return ``(instructions, final state)``.

        An empty tree still yields a page when none is open, so the caller
        always gets a valid document.
        """
        state = state or TraversalState()
        if not has_content(tree):
            logger.info("Grouping produced no content; rendering an empty page")
            if state.page_open:
                return [], state
            state.open_page()
            return [StartPage(orientation=self.orientation)], state

        instructions, state = self._render_children(tree, 0, [], 0, state)
        logger.info("Rendered %d categories on %d page(s)", state.categories, state.pages)
        return instructions, state

    # ─── Recursion ───────────────────────────────────────────────────────

    def _render_children(self, branch: Branch, depth: int, path: list[str], anchor: int, state: TraversalState):
        instructions: list[Instruction] = []
        first = True
        for category, child in branch.children.items():
            if not has_content(child):
                logger.debug("Skipping empty category %r at depth %d under %s", category, depth, path)
                continue
            emitted, state = self._render_category(category, child, depth, path, anchor, state, first)
            instructions.extend(emitted)
            first = False
        return instructions, state

    def _render_category(  # pylint: disable=too-many-arguments
        self,
        category: str,
        node: Leaf | Branch,
        depth: int,
        path: list[str],
        anchor: int,
        state: TraversalState,
        first_sibling: bool,
    ):
        level = self.level(depth)
        instructions: list[Instruction] = []

        if not state.page_open:
            state.open_page()
            instructions.append(StartPage(orientation=self.orientation))
        elif level.page_break and state.seen(depth, path) > 0:
            state.open_page()
            instructions.append(StartPage(orientation=self.orientation, forced=True))
            # Titles from here down only show ancestors below this level
            anchor = depth
            logger.debug("Page break before %r at depth %d", category, depth)
        elif not first_sibling:
            instructions.append(WriteSpacing(amount=SECTION_SPACING))
        state.record(depth, path)

        instructions.append(
            WriteTitle(
                text=self.title_text(category, depth, path, anchor),
                font_size=title_font_size(depth, self.title_size),
                depth=depth,
            )
        )

        if isinstance(node, Leaf):
            instructions.append(
                WriteTable(
                    columns=self.columns,
                    rows=self.formatter.format_rows(node.rows),
                    options=self.table_options,
                    summary=self._table_summary(level, depth, node.rows),
                )
            )
            rows = node.rows
        else:
            emitted, state = self._render_children(node, depth + 1, [*path, category], anchor, state)
            instructions.extend(emitted)
            rows = flatten_rows(node)
            summary = self._table_summary(level, depth, rows)
            if summary is not None:
                instructions.append(WriteTable(columns=self.columns, rows=[], options=self.table_options, summary=summary))

        instructions.extend(self._trailing(level, category, depth, path, rows))
        return instructions, state

    # ─── Titles, Summaries & Trailing Content ────────────────────────────

    def title_text(self, category: str, depth: int, path: list[str], anchor: int = 0) -> str:
        """``"<column>: <value>"``, prefixed by the ancestor values still on the page."""
        name = column_name(self.columns, self.group_indices[depth] if depth < len(self.group_indices) else -1)
        custom = self.hooks.title_formatters.get(depth)
        if custom is not None:
            return str(custom(name, category, list(path)))
        return " -> ".join([*path[anchor:], f"{name}: {category}"])

    def _table_summary(self, level: LevelConfig, depth: int, rows: list[Row]):
        if not level.table_summary:
            return None
        return self.summaries.summary_row(rows, self.summary_items(depth))

    def _trailing(self, level: LevelConfig, category: str, depth: int, path: list[str], rows: list[Row]) -> list[Instruction]:
        font_size = self.table_options.font_size
        instructions: list[Instruction] = []
        if level.show_summary:
            lines = self.summaries.summary_lines(rows, self.summary_items(depth))
            if lines:
                instructions.append(WriteText(text="\n".join(lines), font_size=font_size))

        generator = self.hooks.content_generators.get(depth)
        content = str(generator(category, rows, list(path))) if generator is not None else level.content_after
        if content:
            instructions.append(text_instruction(content, font_size))
        return instructions
