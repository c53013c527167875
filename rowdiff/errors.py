"""Exceptions raised by rowdiff"""


class DiffError(Exception):
    """Base class for all rowdiff errors"""


class SchemaError(DiffError, ValueError):
    """
    Raised when the two DataFrames cannot be diffed against each other.

    This covers missing or extra columns, dtype conflicts, duplicate column
    labels and invalid id columns (unknown or repeated names).
    """


class ConfigurationError(DiffError, ValueError):
    """Raised when DiffOptions are inconsistent or produce clashing output column names"""
