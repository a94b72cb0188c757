"""Unit tests for the injected host callables container."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import pytest
from pydantic import ValidationError

from pdf_reports.hooks import ContentGenerator, ReportHooks, TitleFormatter, ValueFormatter


def shout(value):
    return str(value).upper()


def region_title(column_name, category, path):
    return f"{column_name} / {category} ({len(path)})"


def row_count(category, rows, path):  # pylint: disable=unused-argument
    return f"{len(rows)} rows"


class TestProtocols:

    def test_plain_functions_satisfy_protocols(self):
        assert isinstance(shout, ValueFormatter)
        assert isinstance(region_title, TitleFormatter)
        assert isinstance(row_count, ContentGenerator)

    def test_non_callables_do_not(self):
        assert not isinstance("upper", ValueFormatter)
        assert not isinstance(None, TitleFormatter)


class TestReportHooks:

    def test_empty_by_default(self):
        hooks = ReportHooks()
        assert not hooks.value_formatters
        assert not hooks.title_formatters
        assert not hooks.content_generators

    def test_keeps_callables(self):
        hooks = ReportHooks(
            value_formatters={"Country": shout, 2: lambda value: "-"},
            title_formatters={0: region_title},
            content_generators={1: row_count},
        )
        assert hooks.value_formatters["Country"] is shout
        assert hooks.value_formatters[2](5) == "-"
        assert hooks.title_formatters[0]("Region", "North", []) == "Region / North (0)"
        assert hooks.content_generators[1]("North", [[1], [2]], ["North"]) == "2 rows"

    def test_rejects_non_callable_formatter(self):
        with pytest.raises(ValidationError):
            ReportHooks(value_formatters={"Country": "upper"})

    def test_rejects_non_callable_content(self):
        with pytest.raises(ValidationError):
            ReportHooks(content_generators={0: "static text"})
