"""
Exception types raised by the ASCII editor on programmer errors.
Recoverable conditions (out-of-bounds writes, empty fills) never raise.
"""


class EditorError(Exception):
    """Base class for editor errors."""


class InvalidCellError(EditorError, ValueError):
    pass


class GradientError(EditorError, ValueError):
    pass
