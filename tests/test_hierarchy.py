"""Unit tests for the hierarchy walk: page breaks, titles, summaries, hooks."""

# pylint: disable=missing-class-docstring,missing-function-docstring

from pdf_reports.hooks import ReportHooks
from pdf_reports.render.hierarchy import HierarchyRenderer, TraversalState, title_font_size
from pdf_reports.render.instructions import StartPage, WriteSpacing, WriteTable, WriteText, WriteTitle
from pdf_reports.render.summaries import SummaryBuilder
from pdf_reports.tables.columns import resolve_columns
from pdf_reports.tables.formatting import CellFormatter
from pdf_reports.tables.organize import Branch, DataOrganizer, Leaf
from pdf_reports.tables.schema import LevelConfig, Table, build_column_schemas

COLUMNS = ["Region", "Country", "Amount"]
ROWS = [
    ["North", "Norway", 100],
    ["North", "Denmark", 50.5],
    ["South", "Italy", 200],
    ["North", "Norway", 5],
]
TYPES = {"Amount": {"type": "price", "summaryOperation": "sum"}}


def make_renderer(group_keys, levels=None, hooks=None, columns=COLUMNS, rows=ROWS, types=TYPES):
    """Build a renderer plus the grouped tree for *group_keys*."""
    table = Table.from_payload(columns, rows)
    schemas = build_column_schemas(table.columns, types)
    organizer = DataOrganizer(table, schemas)
    hooks = hooks or ReportHooks()
    formatter = CellFormatter(table.columns, schemas, hooks.value_formatters)
    renderer = HierarchyRenderer(
        resolve_columns(table.columns, group_keys),
        formatter,
        SummaryBuilder(organizer, formatter),
        levels=levels,
        hooks=hooks,
    )
    return renderer, organizer.group_by_columns(group_keys)


def kinds(instructions) -> list[str]:
    return [instruction.kind for instruction in instructions]


def titles(instructions) -> list[str]:
    return [instruction.text for instruction in instructions if isinstance(instruction, WriteTitle)]


def forced_breaks(instructions) -> int:
    return sum(1 for instruction in instructions if isinstance(instruction, StartPage) and instruction.forced)


# ===========================================================================
# Page breaks and spacing
# ===========================================================================


class TestPageBreaks:

    def test_single_level_with_page_break(self):
        renderer, tree = make_renderer(["Region"], levels={0: LevelConfig(page_break=True)})
        instructions, _ = renderer.render(tree)
        assert kinds(instructions) == ["start_page", "title", "table", "start_page", "title", "table"]
        assert instructions[0].forced is False
        assert instructions[3].forced is True

    def test_single_level_without_page_break(self):
        renderer, tree = make_renderer(["Region"])
        instructions, state = renderer.render(tree)
        assert kinds(instructions) == ["start_page", "title", "table", "spacing", "title", "table"]
        assert state.pages == 1

    def test_open_page_is_reused(self):
        renderer, tree = make_renderer(["Region"], levels={0: LevelConfig(page_break=True)})
        instructions, state = renderer.render(tree, TraversalState(page_open=True))
        assert kinds(instructions)[:2] == ["title", "table"]
        assert forced_breaks(instructions) == 1
        assert state.pages == 2

    def test_breaks_counted_per_parent_path(self):
        rows = ROWS + [["South", "Spain", 20]]
        renderer, tree = make_renderer(["Region", "Country"], levels={1: LevelConfig(page_break=True)}, rows=rows)
        instructions, state = renderer.render(tree)
        # Norway and Spain break; the first country under each region does not
        assert forced_breaks(instructions) == 2
        assert state.occurrences[(1, ("North",))] == 2
        assert state.occurrences[(1, ("South",))] == 2

    def test_spacing_between_siblings_only(self):
        renderer, tree = make_renderer(["Region", "Country"])
        instructions, _ = renderer.render(tree)
        assert sum(1 for i in instructions if isinstance(i, WriteSpacing)) == 2


# ===========================================================================
# Titles
# ===========================================================================


class TestTitles:

    def test_ancestor_prefix(self):
        renderer, tree = make_renderer(["Region", "Country"])
        instructions, _ = renderer.render(tree)
        assert titles(instructions) == [
            "Region: North",
            "North -> Country: Denmark",
            "North -> Country: Norway",
            "Region: South",
            "South -> Country: Italy",
        ]

    def test_fresh_title_after_break(self):
        renderer, tree = make_renderer(["Region", "Country"], levels={1: LevelConfig(page_break=True)})
        instructions, _ = renderer.render(tree)
        assert titles(instructions) == [
            "Region: North",
            "North -> Country: Denmark",
            "Country: Norway",
            "Region: South",
            "South -> Country: Italy",
        ]

    def test_title_formatter_hook(self):
        calls = []

        def region_title(column_name, category, path):
            calls.append((column_name, category, path))
            return f"{column_name.upper()}={category}"

        hooks = ReportHooks(title_formatters={1: region_title})
        renderer, tree = make_renderer(["Region", "Country"], hooks=hooks)
        instructions, _ = renderer.render(tree)
        assert "COUNTRY=Denmark" in titles(instructions)
        assert ("Country", "Italy", ["South"]) in calls

    def test_font_sizes_shrink_with_depth(self):
        renderer, tree = make_renderer(["Region", "Country"])
        instructions, _ = renderer.render(tree)
        sizes = {i.depth: i.font_size for i in instructions if isinstance(i, WriteTitle)}
        assert sizes == {0: 16, 1: 14}

    def test_title_font_size_floor(self):
        sizes = [title_font_size(depth, 16) for depth in range(6)]
        assert sizes == [16, 14, 12, 10, 10, 10]
        assert sizes == sorted(sizes, reverse=True)


# ===========================================================================
# Empty branches
# ===========================================================================


class TestEmptyContent:

    def test_three_level_empty_branch_renders_nothing(self):
        columns = ["L0", "L1", "L2", "Val"]
        tree = Branch(
            children={
                "A": Branch(children={"x": Branch(children={"p": Leaf(rows=[["A", "x", "p", 1]])})}),
                "B": Branch(children={"y": Branch(children={"q": Leaf()})}),
                "C": Branch(children={"z": Branch(children={"r": Leaf(rows=[["C", "z", "r", 2]])})}),
            }
        )
        renderer, _ = make_renderer(
            ["L0", "L1", "L2"], levels={0: LevelConfig(page_break=True)}, columns=columns, rows=[], types=None
        )
        instructions, state = renderer.render(tree)
        assert titles(instructions) == [
            "L0: A",
            "A -> L1: x",
            "A -> x -> L2: p",
            "L0: C",
            "C -> L1: z",
            "C -> z -> L2: r",
        ]
        assert forced_breaks(instructions) == 1
        assert sum(1 for i in instructions if isinstance(i, WriteTable)) == 2
        assert state.occurrences[(0, ())] == 2

    def test_empty_tree_still_opens_a_page(self):
        renderer, tree = make_renderer(["Region"], rows=[])
        instructions, state = renderer.render(tree)
        assert kinds(instructions) == ["start_page"]
        assert state.pages == 1

    def test_empty_tree_with_open_page(self):
        renderer, tree = make_renderer(["Region"], rows=[])
        instructions, _ = renderer.render(tree, TraversalState(page_open=True))
        assert not instructions


# ===========================================================================
# Tables, summaries and trailing content
# ===========================================================================


class TestLeafOutput:

    def test_table_rows_are_formatted(self):
        renderer, tree = make_renderer(["Region"])
        instructions, _ = renderer.render(tree)
        tables = [i for i in instructions if isinstance(i, WriteTable)]
        assert tables[0].columns == COLUMNS
        assert tables[0].rows == [["North", "Norway", "€ 100,00"], ["North", "Denmark", "€ 50,50"], ["North", "Norway", "€ 5,00"]]
        assert tables[0].summary is None

    def test_table_summary_row(self):
        renderer, tree = make_renderer(["Region"], levels={0: LevelConfig(table_summary=True)})
        instructions, _ = renderer.render(tree)
        tables = [i for i in instructions if isinstance(i, WriteTable)]
        assert tables[0].summary.cells == ["Total", "", "€ 155,50"]
        assert tables[1].summary.cells == ["Total", "", "€ 200,00"]

    def test_textual_summary(self):
        renderer, tree = make_renderer(["Region"], levels={0: LevelConfig(show_summary=True)})
        instructions, _ = renderer.render(tree)
        texts = [i.text for i in instructions if isinstance(i, WriteText)]
        assert texts == ["Total Amount: € 155,50", "Total Amount: € 200,00"]

    def test_static_content_after(self):
        renderer, tree = make_renderer(["Region"], levels={0: LevelConfig(content_after="<b>End of section</b>")})
        instructions, _ = renderer.render(tree)
        texts = [i for i in instructions if isinstance(i, WriteText)]
        assert len(texts) == 2
        assert texts[0].html is True

    def test_content_generator_hook(self):
        def count_rows(category, rows, path):
            return f"{'/'.join(path + [category])}: {len(rows)} rows"

        hooks = ReportHooks(content_generators={1: count_rows})
        renderer, tree = make_renderer(["Region", "Country"], hooks=hooks)
        instructions, _ = renderer.render(tree)
        texts = [i.text for i in instructions if isinstance(i, WriteText)]
        assert texts == ["North/Denmark: 1 rows", "North/Norway: 2 rows", "South/Italy: 1 rows"]
        assert all(not i.html for i in instructions if isinstance(i, WriteText))


class TestBranchOutput:

    def test_branch_summary_over_flattened_rows(self):
        levels = {0: LevelConfig.model_validate({"showSummary": True, "summaryDefinitions": {"Amount": "sum"}})}
        renderer, tree = make_renderer(["Region", "Country"], levels=levels)
        instructions, _ = renderer.render(tree)
        texts = [i.text for i in instructions if isinstance(i, WriteText)]
        assert texts == ["Total Amount: € 155,50", "Total Amount: € 200,00"]
        # The branch summary follows the last child table of its region
        north_summary = next(idx for idx, i in enumerate(instructions) if isinstance(i, WriteText))
        assert isinstance(instructions[north_summary - 1], WriteTable)

    def test_branch_table_summary_has_no_body_rows(self):
        levels = {0: LevelConfig(table_summary=True), 1: LevelConfig()}
        renderer, tree = make_renderer(["Region", "Country"], levels=levels)
        instructions, _ = renderer.render(tree)
        summary_tables = [i for i in instructions if isinstance(i, WriteTable) and i.summary is not None]
        assert len(summary_tables) == 2
        assert all(not t.rows for t in summary_tables)
        assert summary_tables[0].summary.cells == ["Total", "", "€ 155,50"]

    def test_summary_definitions_by_level(self):
        levels = {
            0: LevelConfig.model_validate({"showSummary": True, "summaryDefinitions": {"Country": "count"}}),
            1: LevelConfig(show_summary=True),
        }
        renderer, tree = make_renderer(["Region", "Country"], levels=levels)
        instructions, _ = renderer.render(tree)
        texts = [i.text for i in instructions if isinstance(i, WriteText)]
        assert texts == [
            "Total Amount: € 50,50",
            "Total Amount: € 105,00",
            "Count Country: 3",
            "Total Amount: € 200,00",
            "Count Country: 1",
        ]
