"""
rowdiff - Row-level differences between two pandas DataFrames

Every row of the result is labelled as inserted, changed, deleted or
unchanged. Rows are matched on optional id columns using null-safe equality.

Basic Usage:
    >>> import pandas as pd
    >>> from rowdiff import diff, DiffOptions
    >>>
    >>> left = pd.DataFrame({'id': [1, 2, 3], 'value': ['one', 'two', 'three']})
    >>> right = pd.DataFrame({'id': [1, 2, 4], 'value': ['one', 'Two', 'four']})
    >>>
    >>> # All columns identify a row: changes show up as delete plus insert
    >>> diff(left, right)
    >>>
    >>> # Match rows on 'id', compare 'value' side by side
    >>> diff(left, right, ['id'])
    >>>
    >>> # Custom labels and a column listing the changed value columns
    >>> options = DiffOptions(insert_diff_value='+', delete_diff_value='-').with_change_column('changes')
    >>> diff(left, right, ['id'], options=options)
    >>>
    >>> # Count rows per label and export
    >>> from rowdiff import report
    >>> report(left, right, ['id']).export_to_html('diff.html')
"""

from .errors import ConfigurationError, DiffError, SchemaError
from .options import DEFAULT_OPTIONS, DiffOptions
from .diff import Diff, diff, diff_as
from .report import DiffReport, report


__version__ = "0.1.0"

__all__ = [
    # Main classes
    "Diff",
    "DiffOptions",
    "DiffReport",
    "DEFAULT_OPTIONS",

    # Errors
    "DiffError",
    "SchemaError",
    "ConfigurationError",

    # Convenience functions
    "diff",
    "diff_as",
    "report",

    # Version
    "__version__",
]
