"""
Configuration of the diff output schema.

DiffOptions is immutable. The ``with_*`` methods return a new, re-validated
instance, so options can be chained without touching the original:

    >>> options = DiffOptions().with_diff_column('action').with_change_column('changes')
"""

from dataclasses import dataclass, fields, replace, asdict
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ConfigurationError


@dataclass(frozen=True)
class DiffOptions:
    """
    Names and labels used by the diff output

    Attributes:
        diff_column: Name of the column holding the diff label
        left_column_prefix: Prefix of the left-side value columns
        right_column_prefix: Prefix of the right-side value columns
        insert_diff_value: Label of rows that exist only on the right
        change_diff_value: Label of matched rows whose values differ
        delete_diff_value: Label of rows that exist only on the left
        nochange_diff_value: Label of matched rows whose values are equal
        change_column: Optional name of a column listing the changed value columns
    """
    diff_column: str = 'diff'
    left_column_prefix: str = 'left'
    right_column_prefix: str = 'right'
    insert_diff_value: str = 'I'
    change_diff_value: str = 'C'
    delete_diff_value: str = 'D'
    nochange_diff_value: str = 'N'
    change_column: Optional[str] = None

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == 'change_column' and value is None:
                continue
            if not isinstance(value, str):
                raise TypeError(f"{f.name} must be a string, got {type(value).__name__}")
            if not value:
                raise ConfigurationError(f"{f.name} must not be empty")

        values = self.diff_values()
        if len(set(values)) != len(values):
            raise ConfigurationError(
                f"Diff values must be pairwise distinct, got insert={self.insert_diff_value!r}, "
                f"change={self.change_diff_value!r}, delete={self.delete_diff_value!r}, "
                f"nochange={self.nochange_diff_value!r}"
            )
        if self.left_column_prefix == self.right_column_prefix:
            raise ConfigurationError(
                f"Left and right column prefix must be distinct: {self.left_column_prefix!r}"
            )
        if self.change_column is not None and self.change_column == self.diff_column:
            raise ConfigurationError(
                f"Change column name must be different to diff column: {self.diff_column!r}"
            )

    def diff_values(self) -> Tuple[str, str, str, str]:
        """Labels in insert, change, delete, no-change order"""
        return (
            self.insert_diff_value,
            self.change_diff_value,
            self.delete_diff_value,
            self.nochange_diff_value,
        )

    def with_diff_column(self, diff_column: str) -> 'DiffOptions':
        return replace(self, diff_column=diff_column)

    def with_left_column_prefix(self, left_column_prefix: str) -> 'DiffOptions':
        return replace(self, left_column_prefix=left_column_prefix)

    def with_right_column_prefix(self, right_column_prefix: str) -> 'DiffOptions':
        return replace(self, right_column_prefix=right_column_prefix)

    def with_insert_diff_value(self, insert_diff_value: str) -> 'DiffOptions':
        return replace(self, insert_diff_value=insert_diff_value)

    def with_change_diff_value(self, change_diff_value: str) -> 'DiffOptions':
        return replace(self, change_diff_value=change_diff_value)

    def with_delete_diff_value(self, delete_diff_value: str) -> 'DiffOptions':
        return replace(self, delete_diff_value=delete_diff_value)

    def with_nochange_diff_value(self, nochange_diff_value: str) -> 'DiffOptions':
        return replace(self, nochange_diff_value=nochange_diff_value)

    def with_change_column(self, change_column: str) -> 'DiffOptions':
        return replace(self, change_column=change_column)

    def without_change_column(self) -> 'DiffOptions':
        return replace(self, change_column=None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return asdict(self)

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> 'DiffOptions':
        """
        Build options from a plain mapping, e.g. a parsed JSON or YAML section

        Missing keys take their default value.

        Raises:
            ConfigurationError: If the mapping contains unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(str(key) for key in config if key not in known)
        if unknown:
            raise ConfigurationError(f"Unknown diff options: {unknown}. Available options: {sorted(known)}")
        return cls(**dict(config))


DEFAULT_OPTIONS = DiffOptions()
