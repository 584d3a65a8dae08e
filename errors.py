"""XM Kit - Error types.

Parse-time errors abort module construction; query-time errors are raised per
call and leave the queried object usable.
"""


class XMError(Exception):
    """Base class for every error raised by this package."""


class ModuleIOError(XMError):
    """The module file could not be opened or read."""


class FormatError(XMError):
    """Bad magic, unsupported version, truncation or a size mismatch."""


class RowOutOfRange(XMError, IndexError):
    """A query named a row at or beyond the track's row count."""

    def __init__(self, row: int, row_count: int):
        super().__init__(f"row {row} out of range (pattern has {row_count} rows)")
        self.row = row
        self.row_count = row_count


class InvalidEffect(XMError, ValueError):
    """A query named an effect identifier that is not recognized."""

    def __init__(self, identifier):
        super().__init__(f"unknown effect identifier: {identifier!r}")
        self.identifier = identifier
