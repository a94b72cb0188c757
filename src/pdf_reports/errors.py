"""Error taxonomy for report generation.

Every failure raised by the core derives from ``ReportError`` so the HTTP
layer can turn it into one descriptive message.  ``MalformedRow`` is the only
non-fatal member: the table builder logs it and skips the offending row.
"""


class ReportError(Exception):
    """Base class for all report-generation failures."""


class ColumnNotFound(ReportError, LookupError):
    """A sort/group/config column key does not resolve against the table columns."""

    def __init__(self, key, available: list[str]):
        self.key = key
        self.available = list(available)
        if isinstance(key, int):
            attempted = f"index {key}"
        else:
            attempted = f"'{key}'"
        super().__init__(f"Column {attempted} not found in: {', '.join(self.available)}")


class InvalidGroupSpec(ReportError, ValueError):
    """The grouping request cannot be satisfied (e.g. no grouping columns)."""


class MalformedRow(ReportError, ValueError):
    """A row cannot be coerced to positional form."""

    def __init__(self, position: int, row):
        self.position = position
        super().__init__(f"Row {position} is a {type(row).__name__}, expected a list or an object")


class InvalidPayload(ReportError, ValueError):
    """The request is structurally valid JSON but cannot be acted on."""


class OutputWriteError(ReportError, OSError):
    """Writing a generated file to disk failed."""
