"""
Row-level diff of two pandas DataFrames

Rows of the left and right DataFrame are matched on the id columns using
null-safe equality (null equals null, never a non-null value). Every output
row carries a diff label:

- insert: the id exists only in the right DataFrame
- delete: the id exists only in the left DataFrame
- change: the id exists in both and at least one value column differs
- no-change: the id exists in both and all value columns are equal

Without id columns all columns identify a row, so changes show up as a
delete and an insert.
"""

import logging
import warnings
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Tuple, TypeVar, Union

import numpy as np
import pandas as pd

from .errors import ConfigurationError, SchemaError
from .options import DEFAULT_OPTIONS, DiffOptions


LOG = logging.getLogger(__name__)

U = TypeVar('U')
IdColumns = Optional[Union[str, Sequence[str]]]


class _Null:
    """Key component standing in for None, NaN, NaT and pd.NA alike"""

    def __repr__(self) -> str:
        return '<null>'


_NULL = _Null()


def _is_null(value: Any) -> bool:
    if value is None:
        return True
    if pd.api.types.is_scalar(value):
        return bool(pd.isna(value))
    return False


def _hashable(value: Any) -> Hashable:
    """Turn a cell value into a hashable join key component"""
    if _is_null(value):
        return _NULL
    if isinstance(value, np.ndarray):
        value = value.tolist()
    if isinstance(value, (list, tuple)):
        return tuple(_hashable(v) for v in value)
    if isinstance(value, dict):
        return tuple(sorted(((k, _hashable(v)) for k, v in value.items()), key=lambda kv: repr(kv[0])))
    if isinstance(value, set):
        return frozenset(_hashable(v) for v in value)
    return value


def _row_keys(frame: pd.DataFrame, columns: List[Hashable]) -> List[Tuple]:
    if not columns:
        return [()] * len(frame)
    return [
        tuple(_hashable(v) for v in row)
        for row in zip(*(frame[col].tolist() for col in columns))
    ]


def _values_equal(val1: Any, val2: Any) -> bool:
    """Null-safe equality of two individual values"""
    val1_null = _is_null(val1)
    val2_null = _is_null(val2)
    if val1_null or val2_null:
        return val1_null and val2_null

    if isinstance(val1, np.ndarray) or isinstance(val2, np.ndarray):
        return bool(np.array_equal(val1, val2))

    # Direct comparison for other types
    try:
        return bool(val1 == val2)
    except (ValueError, TypeError):
        return str(val1) == str(val2)


def _null_safe_equal(left: pd.Series, right: pd.Series) -> np.ndarray:
    """Element-wise null-safe equality of two aligned Series"""
    left_null = left.isna().to_numpy(dtype=bool)
    right_null = right.isna().to_numpy(dtype=bool)
    try:
        equal = (left == right).to_numpy(dtype=bool, na_value=False)
    except (ValueError, TypeError):
        # cells holding arrays, categoricals with different categories, ...
        equal = np.array(
            [_values_equal(a, b) for a, b in zip(left.tolist(), right.tolist())],
            dtype=bool
        )
    return np.where(left_null | right_null, left_null & right_null, equal)


def _take(frame: pd.DataFrame, positions: np.ndarray) -> pd.DataFrame:
    """Rows at the given positions, -1 yields an all-null row"""
    return frame.reindex(pd.Index(positions)).reset_index(drop=True)


class Diff:
    """
    Computes the differences between two DataFrames with the same schema.

    Both DataFrames must contain the same set of column names and dtypes.
    Column order does not matter: columns are matched by name.

    The output has the diff column first, followed by the optional change
    column, the id columns (in the given order) and finally the value
    columns. Each value column appears twice, prefixed with the left and
    the right column prefix.

    Example:
        >>> left = pd.DataFrame({'id': [1, 2, 3], 'value': ['one', 'two', 'three']})
        >>> right = pd.DataFrame({'id': [1, 2, 4], 'value': ['one', 'Two', 'four']})
        >>> Diff().of(left, right, ['id'])
          diff  id left_value right_value
        0    N   1        one         one
        1    C   2        two         Two
        2    D   3      three         NaN
        3    I   4        NaN        four
    """

    def __init__(self, options: Optional[DiffOptions] = None):
        """
        Initialize Diff

        Args:
            options: Names and labels of the output, defaults to DiffOptions()
        """
        if options is not None and not isinstance(options, DiffOptions):
            raise TypeError(f"options must be DiffOptions, got {type(options).__name__}")
        self.options = options if options is not None else DEFAULT_OPTIONS

    def of(self, left: pd.DataFrame, right: pd.DataFrame, id_columns: IdColumns = None) -> pd.DataFrame:
        """
        Diff the left DataFrame against the right DataFrame

        Args:
            left: DataFrame considered as "before"
            right: DataFrame considered as "after"
            id_columns: Columns that identify a row. If None or empty,
                        all columns are id columns.

        Returns:
            A new DataFrame with one row per matched, inserted or deleted row.
            Rows with a left side come first in left order, followed by the
            inserted rows in right order.

        Raises:
            TypeError: If inputs are not pandas DataFrames
            SchemaError: If the schemas differ or id columns are invalid
            ConfigurationError: If output column names collide
        """
        self.check_schema(left, right)
        ids, values = self.resolve_columns(left, id_columns)
        columns = self.output_columns(ids, values)
        LOG.debug("Diffing %d left rows against %d right rows, id columns %s, value columns %s",
                  len(left), len(right), ids, values)

        left_rows = left.reset_index(drop=True)
        right_rows = right.reset_index(drop=True)
        left_pos, right_pos = self._join(left_rows, right_rows, ids)
        result = self._assemble(left_rows, right_rows, ids, values, left_pos, right_pos)
        result.columns = pd.Index(columns, dtype=object)

        if LOG.isEnabledFor(logging.INFO):
            counts = result[self.options.diff_column].value_counts()
            LOG.info("Diff of %d rows: %s", len(result), counts.to_dict())
        return result

    def of_as(
        self,
        left: pd.DataFrame,
        right: pd.DataFrame,
        decoder: Callable[[Dict[Hashable, Any]], U],
        id_columns: IdColumns = None
    ) -> List[U]:
        """
        Diff the two DataFrames and map every output row through decoder

        The decoder receives one dict per row keyed by output column name;
        nulls are passed as None.

        Example:
            >>> Diff().of_as(left, right, lambda row: (row['diff'], row['id']), ['id'])
            [('N', 1), ('C', 2), ('D', 3), ('I', 4)]
        """
        result = self.of(left, right, id_columns)
        return [
            decoder({col: None if _is_null(value) else value for col, value in record.items()})
            for record in result.to_dict('records')
        ]

    def check_schema(self, left: pd.DataFrame, right: pd.DataFrame) -> None:
        """Verify both DataFrames expose the same column names with equal dtypes"""
        for name, frame in (('left', left), ('right', right)):
            if not isinstance(frame, pd.DataFrame):
                raise TypeError(f"The {name} argument must be a pandas DataFrame, got {type(frame).__name__}")
            duplicated = frame.columns[frame.columns.duplicated()].tolist()
            if duplicated:
                raise SchemaError(f"The {name} DataFrame has duplicate columns: {duplicated}")

        only_left = [col for col in left.columns if col not in right.columns]
        only_right = [col for col in right.columns if col not in left.columns]
        if only_left or only_right:
            raise SchemaError(f"The DataFrames have different columns. "
                              f"Columns only in left: {only_left}, columns only in right: {only_right}")

        dtype_changes = {}
        for col in left.columns:
            dtype1 = str(left[col].dtype)
            dtype2 = str(right[col].dtype)
            if dtype1 != dtype2:
                dtype_changes[col] = (dtype1, dtype2)
        if dtype_changes:
            details = ', '.join(f"{col}: {d1} != {d2}" for col, (d1, d2) in dtype_changes.items())
            raise SchemaError(f"The DataFrames have different column types: {details}")

    def resolve_columns(self, left: pd.DataFrame, id_columns: IdColumns = None) -> Tuple[List, List]:
        """
        Split the columns of left into id columns and value columns

        Returns:
            Tuple of (id_columns, value_columns). Id columns keep the given
            order, value columns the column order of left.
        """
        columns = list(left.columns)
        if id_columns is None:
            ids = []
        elif isinstance(id_columns, str):
            ids = [id_columns]
        else:
            ids = list(id_columns)

        if not ids:
            return columns, []

        missing = [col for col in ids if col not in columns]
        if missing:
            raise SchemaError(f"Id columns {missing} not found. Available columns: {columns}")
        duplicates = [col for i, col in enumerate(ids) if col in ids[:i]]
        if duplicates:
            raise SchemaError(f"Id columns must not contain duplicates: {sorted(set(duplicates), key=ids.index)}")

        return ids, [col for col in columns if col not in ids]

    def output_columns(self, id_columns: List, value_columns: List) -> List:
        """Column names of the diff output, in output order"""
        options = self.options
        columns = [options.diff_column]
        if options.change_column is not None:
            columns.append(options.change_column)
        columns.extend(id_columns)
        for col in value_columns:
            columns.append(f"{options.left_column_prefix}_{col}")
            columns.append(f"{options.right_column_prefix}_{col}")

        seen = set()
        clashes = []
        for col in columns:
            if col in seen and col not in clashes:
                clashes.append(col)
            seen.add(col)
        if clashes:
            raise ConfigurationError(
                f"The diff output would contain duplicate columns {clashes}. "
                f"Choose a different diff column, change column or column prefixes."
            )
        return columns

    def _join(
        self,
        left: pd.DataFrame,
        right: pd.DataFrame,
        id_columns: List
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Null-safe full outer join on the id columns

        Returns the left and right row positions of every output row, -1
        where the side is absent. Duplicate ids on both sides match each
        other pairwise.
        """
        left_keys = _row_keys(left, id_columns)
        right_keys = _row_keys(right, id_columns)
        self._warn_duplicates('Left', left_keys)
        self._warn_duplicates('Right', right_keys)

        right_lookup: Dict[Tuple, List[int]] = {}
        for pos, key in enumerate(right_keys):
            right_lookup.setdefault(key, []).append(pos)

        left_pos = []
        right_pos = []
        for pos, key in enumerate(left_keys):
            matches = right_lookup.get(key)
            if matches:
                left_pos.extend([pos] * len(matches))
                right_pos.extend(matches)
            else:
                left_pos.append(pos)
                right_pos.append(-1)

        # right rows can only be told unmatched once all left keys are known
        left_key_set = set(left_keys)
        for pos, key in enumerate(right_keys):
            if key not in left_key_set:
                left_pos.append(-1)
                right_pos.append(pos)

        return np.asarray(left_pos, dtype=np.int64), np.asarray(right_pos, dtype=np.int64)

    @staticmethod
    def _warn_duplicates(side: str, keys: List[Tuple]) -> None:
        duplicates = len(keys) - len(set(keys))
        if duplicates > 0:
            warnings.warn(f"{side} DataFrame has {duplicates} duplicate id(s). "
                          "All rows sharing an id are diffed against each other.")

    def _assemble(
        self,
        left: pd.DataFrame,
        right: pd.DataFrame,
        id_columns: List,
        value_columns: List,
        left_pos: np.ndarray,
        right_pos: np.ndarray
    ) -> pd.DataFrame:
        options = self.options
        n = len(left_pos)
        has_left = left_pos >= 0
        has_right = right_pos >= 0
        both = has_left & has_right

        # rows with a left side precede the inserted rows, see _join
        id_parts = [
            part for part in (left[id_columns].take(left_pos[has_left]),
                              right[id_columns].take(right_pos[~has_left]))
            if len(part) > 0
        ]
        if id_parts:
            ids = pd.concat(id_parts, ignore_index=True)
        else:
            ids = left[id_columns].iloc[0:0].reset_index(drop=True)

        left_values = _take(left[value_columns], left_pos)
        right_values = _take(right[value_columns], right_pos)
        unequal = [
            ~_null_safe_equal(left_values[col], right_values[col])
            for col in value_columns
        ]
        changed = np.logical_or.reduce(unequal) if unequal else np.zeros(n, dtype=bool)

        labels = np.empty(n, dtype=object)
        labels[has_left & ~has_right] = options.delete_diff_value
        labels[~has_left & has_right] = options.insert_diff_value
        labels[both & changed] = options.change_diff_value
        labels[both & ~changed] = options.nochange_diff_value

        series = [pd.Series(labels, dtype=object)]
        if options.change_column is not None:
            changes = np.empty(n, dtype=object)
            for i in range(n):
                if both[i]:
                    changes[i] = [col for col, ne in zip(value_columns, unequal) if ne[i]]
                else:
                    changes[i] = None
            series.append(pd.Series(changes, dtype=object))
        series.extend(ids[col] for col in id_columns)
        for col in value_columns:
            series.append(left_values[col])
            series.append(right_values[col])

        return pd.concat(series, axis=1, ignore_index=True)


def diff(
    left: pd.DataFrame,
    right: pd.DataFrame,
    id_columns: IdColumns = None,
    options: Optional[DiffOptions] = None
) -> pd.DataFrame:
    """
    Convenience function to diff two DataFrames.

    Args:
        left: DataFrame considered as "before"
        right: DataFrame considered as "after"
        id_columns: Columns that identify a row, all columns if None or empty
        options: Output names and labels, defaults to DiffOptions()

    Returns:
        DataFrame with the diff column first, then id and value columns

    Example:
        >>> diff(left, right)
          diff  id  value
        0    N   1    one
        1    D   2    two
        2    D   3  three
        3    I   2    Two
        4    I   4   four
    """
    return Diff(options).of(left, right, id_columns)


def diff_as(
    left: pd.DataFrame,
    right: pd.DataFrame,
    decoder: Callable[[Dict[Hashable, Any]], U],
    id_columns: IdColumns = None,
    options: Optional[DiffOptions] = None
) -> List[U]:
    """Diff two DataFrames and decode every output row, see Diff.of_as"""
    return Diff(options).of_as(left, right, decoder, id_columns)
