"""reportlab rendering collaborator: render instructions -> PDF bytes.

Builds a platypus story from the instruction list.  The first StartPage
opens the document, every later one becomes a PageBreak.  Presentation
attributes (colours, widths, alignment, font weight) are applied on a
best-effort basis: values reportlab cannot interpret are skipped with a
warning instead of failing the report.
"""

import html
import logging
import re
from io import BytesIO
from typing import Any

from pydantic import BaseModel, Field
from reportlab.lib import colors, pagesizes
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm, inch, mm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from pdf_reports.config import DEFAULT_DOCUMENT, TITLE_SPACING
from pdf_reports.render.instructions import (
    ColumnStyle,
    Instruction,
    StartPage,
    WriteSpacing,
    WriteTable,
    WriteText,
    WriteTitle,
)
from pdf_reports.tables.patterns import WIDTH_RE

logger = logging.getLogger(__name__)

PAGE_SIZES = {
    "A0": pagesizes.A0,
    "A1": pagesizes.A1,
    "A2": pagesizes.A2,
    "A3": pagesizes.A3,
    "A4": pagesizes.A4,
    "A5": pagesizes.A5,
    "A6": pagesizes.A6,
    "LETTER": pagesizes.LETTER,
    "LEGAL": pagesizes.LEGAL,
}

WIDTH_UNITS = {"mm": mm, "cm": cm, "in": inch, "pt": 1.0}

ALIGNMENTS = {"left": TA_LEFT, "center": TA_CENTER, "right": TA_RIGHT, "justify": TA_JUSTIFY}

BOLD_WEIGHTS = {"bold", "bolder", "600", "700", "800", "900"}

# Block-level tags that reportlab's paragraph markup does not understand
_BREAK_TAGS_RE = re.compile(r"<br\s*/?>|</(?:p|div|h[1-6]|li|tr)>", re.IGNORECASE)
_DROP_TAGS_RE = re.compile(r"</?(?:p|div|h[1-6]|ul|ol|table|tbody|thead|tr|td|th|span)(?:\s[^>]*)?>", re.IGNORECASE)
_LIST_ITEM_RE = re.compile(r"<li(?:\s[^>]*)?>", re.IGNORECASE)
_INLINE_TAGS = {"strong": "b", "em": "i"}


class RenderSettings(BaseModel):
    """Document-level settings for one render."""

    orientation: str = DEFAULT_DOCUMENT["orientation"]
    format: str = DEFAULT_DOCUMENT["format"]
    margins: list[float] = Field(default_factory=lambda: list(DEFAULT_DOCUMENT["margins"]))
    page_break_margin: float = DEFAULT_DOCUMENT["page_break_margin"]
    title: str = DEFAULT_DOCUMENT["title"]
    author: str = DEFAULT_DOCUMENT["author"]
    subject: str = DEFAULT_DOCUMENT["subject"]
    creator: str = DEFAULT_DOCUMENT["creator"]


# ─── Value Conversion ────────────────────────────────────────────────────────


def page_size(fmt: str, orientation: str) -> tuple[float, float]:
    """reportlab page size for a format name and P/L orientation (unknown formats fall back to A4)."""
    size = PAGE_SIZES.get(str(fmt).strip().upper())
    if size is None:
        logger.warning("Unknown page format %r, using A4", fmt)
        size = pagesizes.A4
    if str(orientation).strip().upper().startswith("L"):
        return pagesizes.landscape(size)
    return pagesizes.portrait(size)


def parse_width(value: Any) -> float | None:
    """Column width in points from ``"20mm"``, ``"2cm"``, ``"1in"``, ``"40pt"`` or a bare number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = WIDTH_RE.match(str(value))
    if not match:
        logger.warning("Ignoring unsupported column width %r", value)
        return None
    unit = (match.group(2) or "pt").lower()
    return float(match.group(1)) * WIDTH_UNITS[unit]


def parse_color(value: str | None):
    """reportlab colour for a hex string or colour name, or None when it cannot be read."""
    if not value:
        return None
    try:
        return colors.toColor(value)
    except ValueError:
        logger.warning("Ignoring unsupported colour %r", value)
        return None


def html_to_markup(text: str) -> str:
    """Reduce HTML to the inline markup reportlab paragraphs accept."""
    markup = _LIST_ITEM_RE.sub("• ", text)
    markup = _BREAK_TAGS_RE.sub("<br/>", markup)
    markup = _DROP_TAGS_RE.sub("", markup)
    for tag, replacement in _INLINE_TAGS.items():
        markup = re.sub(rf"<(/?){tag}>", rf"<\1{replacement}>", markup, flags=re.IGNORECASE)
    return markup.strip()


def plain_to_markup(text: str) -> str:
    return html.escape(text, quote=False).replace("\n", "<br/>")


# ─── Story Building ──────────────────────────────────────────────────────────


class StoryBuilder:
    """Accumulates platypus flowables for a sequence of render instructions."""

    def __init__(self, frame_width: float):
        self.frame_width = frame_width
        self.story: list[Any] = []
        self.styles = getSampleStyleSheet()

    def add(self, instruction: Instruction) -> None:
        if isinstance(instruction, StartPage):
            # The document's first page needs no flowable
            if self.story:
                self.story.append(PageBreak())
        elif isinstance(instruction, WriteTitle):
            self.add_title(instruction)
        elif isinstance(instruction, WriteTable):
            self.add_table(instruction)
        elif isinstance(instruction, WriteText):
            self.add_text(instruction)
        elif isinstance(instruction, WriteSpacing):
            self.story.append(Spacer(1, instruction.amount))
        else:
            raise TypeError(f"Unknown render instruction: {type(instruction).__name__}")

    def add_title(self, instruction: WriteTitle) -> None:
        style = ParagraphStyle(
            name=f"Title{instruction.font_size}",
            parent=self.styles["Heading1"],
            fontName="Helvetica-Bold",
            fontSize=instruction.font_size,
            leading=instruction.font_size * 1.2,
            alignment=TA_CENTER,
        )
        self.story.append(Paragraph(html.escape(instruction.text, quote=False), style))
        self.story.append(Spacer(1, TITLE_SPACING))

    def add_text(self, instruction: WriteText) -> None:
        style = ParagraphStyle(
            name=f"Text{instruction.font_size}",
            parent=self.styles["BodyText"],
            fontName="Helvetica",
            fontSize=instruction.font_size,
            leading=instruction.font_size * 1.3,
        )
        if instruction.html:
            try:
                self.story.append(Paragraph(html_to_markup(instruction.text), style))
                return
            except ValueError:
                logger.warning("Could not parse HTML content, rendering it as plain text")
        self.story.append(Paragraph(plain_to_markup(instruction.text), style))

    # ─── Tables ──────────────────────────────────────────────────────────

    def _cell_style(self, font_size: float, column: ColumnStyle, bold: bool = False) -> ParagraphStyle:
        weight = str(column.font_weight or "").strip().lower()
        return ParagraphStyle(
            name="TableCell",
            parent=self.styles["BodyText"],
            fontName="Helvetica-Bold" if bold or weight in BOLD_WEIGHTS else "Helvetica",
            fontSize=font_size,
            leading=font_size * 1.2,
            alignment=ALIGNMENTS.get(str(column.align or "left").strip().lower(), TA_LEFT),
            textColor=parse_color(column.text_color) or colors.black,
        )

    def column_widths(self, styles: list[ColumnStyle]) -> list[float]:
        """Explicit widths where given; the rest share the remaining frame width equally."""
        widths = [parse_width(style.width) for style in styles]
        fixed = sum(w for w in widths if w is not None)
        n_auto = sum(1 for w in widths if w is None)
        if n_auto:
            share = max(self.frame_width - fixed, 0) / n_auto or self.frame_width / len(widths)
            widths = [w if w is not None else share for w in widths]
        return widths

    def add_table(self, instruction: WriteTable) -> None:
        options = instruction.options
        n_cols = len(instruction.columns)
        if n_cols == 0:
            return
        styles = list(options.column_styles[:n_cols])
        styles.extend(ColumnStyle() for _ in range(n_cols - len(styles)))

        cell_styles = [self._cell_style(options.font_size, style) for style in styles]
        header_style = self._cell_style(options.font_size, ColumnStyle(), bold=True)
        summary_styles = [self._cell_style(options.font_size, style, bold=True) for style in styles]

        data = [[Paragraph(html.escape(name, quote=False), header_style) for name in instruction.columns]]
        for row in instruction.rows:
            data.append([Paragraph(plain_to_markup(cell), cell_styles[i]) for i, cell in enumerate(row)])
        if instruction.summary is not None:
            data.append([Paragraph(plain_to_markup(cell), summary_styles[i]) for i, cell in enumerate(instruction.summary.cells)])

        commands: list[tuple] = [
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), options.padding),
            ("RIGHTPADDING", (0, 0), (-1, -1), options.padding),
            ("TOPPADDING", (0, 0), (-1, -1), options.padding),
            ("BOTTOMPADDING", (0, 0), (-1, -1), options.padding),
        ]
        if options.border:
            commands.append(("GRID", (0, 0), (-1, -1), options.border * 0.5, colors.black))
        header_bg = parse_color(options.header_bg)
        if header_bg is not None:
            commands.append(("BACKGROUND", (0, 0), (-1, 0), header_bg))

        last_body_row = len(instruction.rows)
        for idx, style in enumerate(styles):
            column_bg = parse_color(style.background_color)
            if column_bg is not None and last_body_row > 0:
                commands.append(("BACKGROUND", (idx, 1), (idx, last_body_row), column_bg))
            if style.padding is not None:
                commands.append(("LEFTPADDING", (idx, 0), (idx, -1), style.padding))
                commands.append(("RIGHTPADDING", (idx, 0), (idx, -1), style.padding))

        if instruction.summary is not None:
            summary_bg = parse_color(options.summary_bg)
            if summary_bg is not None:
                commands.append(("BACKGROUND", (0, -1), (-1, -1), summary_bg))

        table = Table(data, colWidths=self.column_widths(styles), repeatRows=1)
        table.setStyle(TableStyle(commands))
        self.story.append(table)


# ─── Public API ──────────────────────────────────────────────────────────────


def render_pdf(instructions: list[Instruction], settings: RenderSettings | None = None) -> bytes:
    """Render *instructions* to PDF bytes.  An empty list still yields a one-page document."""
    settings = settings or RenderSettings()
    size = page_size(settings.format, settings.orientation)
    left, top, right = (list(settings.margins) + list(DEFAULT_DOCUMENT["margins"]))[:3]

    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=size,
        leftMargin=left * mm,
        topMargin=top * mm,
        rightMargin=right * mm,
        bottomMargin=settings.page_break_margin * mm,
        title=settings.title,
        author=settings.author,
        subject=settings.subject,
        creator=settings.creator,
    )

    builder = StoryBuilder(frame_width=doc.width)
    for instruction in instructions:
        builder.add(instruction)
    if not builder.story:
        builder.story.append(Spacer(1, 1))

    doc.build(builder.story)
    pdf_bytes = buf.getvalue()
    logger.info("Rendered PDF: %d instructions, %.1f KB", len(instructions), len(pdf_bytes) / 1024)
    return pdf_bytes
