"""Exceptions raised while expanding URLs.

Only FileError ever reaches a caller, and then only as the ``error`` message
of a failed ProcessResult. The others are recovered where they are raised.
"""


class ExpansionError(Exception):
    """Base class for all expansion errors."""


class ClassificationError(ExpansionError):
    """A URL could not be parsed far enough to read its hostname."""


class ProbeError(ExpansionError):
    """The lightweight redirect probe produced no usable redirect."""


class NavigationError(ExpansionError):
    """The page navigator failed or timed out."""


class FileError(ExpansionError):
    """An input file could not be read or an output file could not be written."""
