"""ColumnKey resolution.

A ColumnKey is either a zero-based index or a case-insensitive column name.
Every public entry point resolves its keys to an index once, up front, so the
rest of the engine only ever deals with integers.
"""

from pdf_reports.errors import ColumnNotFound

ColumnKey = int | str


def resolve_column(columns: list[str], key: ColumnKey) -> int:
    """Return the index of *key* in *columns*, or raise ColumnNotFound.

    Names match case-insensitively.  A string made only of digits that does
    not name a column is read as an index, since JSON object keys are always
    strings (``{"2": "price"}`` configures the third column).
    """
    # bool is an int subclass but never a meaningful column key
    if isinstance(key, bool):
        raise ColumnNotFound(key, columns)

    if isinstance(key, int):
        if 0 <= key < len(columns):
            return key
        raise ColumnNotFound(key, columns)

    if isinstance(key, str):
        wanted = key.strip().casefold()
        for idx, name in enumerate(columns):
            if str(name).strip().casefold() == wanted:
                return idx
        # Fall back to a positional reading of numeric strings
        if key.strip().isdigit() and int(key) < len(columns):
            return int(key)

    raise ColumnNotFound(key, columns)


def resolve_columns(columns: list[str], keys: list[ColumnKey]) -> list[int]:
    """Resolve several keys, failing on the first one that does not match."""
    return [resolve_column(columns, key) for key in keys]


def column_name(columns: list[str], index: int) -> str:
    """Display name for a resolved column index."""
    if 0 <= index < len(columns):
        return str(columns[index])
    return "Category"
