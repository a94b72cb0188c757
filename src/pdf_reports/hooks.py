"""Host-supplied callables that customise rendering.

Configuration that arrives over the API is plain data.  Anything executable
(custom cell formatting, custom group titles, generated trailing content) is
implemented by the host application and injected through ``ReportHooks``.
"""

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from pdf_reports.tables.columns import ColumnKey


@runtime_checkable
class ValueFormatter(Protocol):
    """Turns a raw cell value into its display string (replaces typed formatting)."""

    def __call__(self, value: Any) -> str: ...


@runtime_checkable
class TitleFormatter(Protocol):
    """Builds a group title from the column name, category value, and ancestor path."""

    def __call__(self, column_name: str, category: str, path: list[str]) -> str: ...


@runtime_checkable
class ContentGenerator(Protocol):
    """Builds trailing content for a group from its category, rows, and ancestor path."""

    def __call__(self, category: str, rows: list[list[Any]], path: list[str]) -> str: ...


class ReportHooks(BaseModel):
    """Injected overrides, keyed by ColumnKey (formatters) or group depth (titles, content)."""

    # Protocols are checked with isinstance, i.e. anything callable is accepted
    model_config = ConfigDict(arbitrary_types_allowed=True)

    value_formatters: dict[ColumnKey, ValueFormatter] = Field(default_factory=dict)
    title_formatters: dict[int, TitleFormatter] = Field(default_factory=dict)
    content_generators: dict[int, ContentGenerator] = Field(default_factory=dict)
