"""
Reporting on top of a diff DataFrame

Counts rows per diff label and exports the labelled rows to JSON, CSV,
Excel and HTML.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from .diff import IdColumns, diff
from .options import DEFAULT_OPTIONS, DiffOptions


LOG = logging.getLogger(__name__)


class DiffReport:
    """
    Container for a diff DataFrame and its per-label aggregates

    Example:
        >>> report = DiffReport(diff(left, right, ['id']))
        >>> report.summary
        {'inserted': 1, 'changed': 1, 'deleted': 1, 'unchanged': 1, 'total': 4, 'identical': False}
    """

    def __init__(self, diff_df: pd.DataFrame, options: Optional[DiffOptions] = None):
        """
        Args:
            diff_df: Output of diff() or Diff.of()
            options: The options the diff was computed with

        Raises:
            ValueError: If diff_df has no diff column
        """
        self.options = options if options is not None else DEFAULT_OPTIONS
        if not isinstance(diff_df, pd.DataFrame):
            raise TypeError(f"diff_df must be a pandas DataFrame, got {type(diff_df).__name__}")
        if self.options.diff_column not in diff_df.columns:
            raise ValueError(f"Diff column {self.options.diff_column!r} not found. "
                             f"Available columns: {list(diff_df.columns)}")
        self.diff_df = diff_df

    def __str__(self) -> str:
        s = self.summary
        return f"DiffReport(inserted: {s['inserted']}, changed: {s['changed']}, deleted: {s['deleted']})"

    def __repr__(self) -> str:
        return self.__str__()

    def counts(self) -> Dict[str, int]:
        """Number of rows per diff label, zero for labels that do not occur"""
        counts = self.diff_df.groupby(self.options.diff_column).size()
        return {label: int(counts.get(label, 0)) for label in self.options.diff_values()}

    @property
    def summary(self) -> Dict[str, Any]:
        counts = self.counts()
        o = self.options
        summary = {
            'inserted': counts[o.insert_diff_value],
            'changed': counts[o.change_diff_value],
            'deleted': counts[o.delete_diff_value],
            'unchanged': counts[o.nochange_diff_value],
            'total': len(self.diff_df),
        }
        summary['identical'] = summary['inserted'] == summary['changed'] == summary['deleted'] == 0
        return summary

    def _rows(self, label: str) -> pd.DataFrame:
        return self.diff_df[self.diff_df[self.options.diff_column] == label].copy()

    def get_inserted(self) -> pd.DataFrame:
        """Get inserted rows as a DataFrame"""
        return self._rows(self.options.insert_diff_value)

    def get_changed(self) -> pd.DataFrame:
        """Get changed rows as a DataFrame"""
        return self._rows(self.options.change_diff_value)

    def get_deleted(self) -> pd.DataFrame:
        """Get deleted rows as a DataFrame"""
        return self._rows(self.options.delete_diff_value)

    def get_unchanged(self) -> pd.DataFrame:
        """Get unchanged rows as a DataFrame"""
        return self._rows(self.options.nochange_diff_value)

    def get_differences(self) -> pd.DataFrame:
        """Get all inserted, changed and deleted rows"""
        return self.diff_df[self.diff_df[self.options.diff_column] != self.options.nochange_diff_value].copy()

    def has_changes(self) -> bool:
        """Check if the diff contains any inserted, changed or deleted row"""
        return not self.summary['identical']

    def to_dict(self) -> Dict[str, Any]:
        """Convert the entire report to a dictionary"""
        return {
            'summary': self.summary,
            'counts': self.counts(),
            'options': self.options.to_dict(),
            'rows': self.diff_df.to_dict('records'),
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert the entire report to a JSON string"""
        def json_serializer(obj):
            if isinstance(obj, (pd.Timestamp, np.datetime64)):
                return str(obj)
            if isinstance(obj, np.integer):
                return int(obj)
            if isinstance(obj, np.floating):
                return float(obj)
            if isinstance(obj, np.ndarray):
                return obj.tolist()
            if pd.api.types.is_scalar(obj) and pd.isna(obj):
                return None
            return str(obj)

        # NaN is a float and never reaches the serializer
        rows = self.diff_df.astype(object).to_dict('records')
        data = self.to_dict()
        data['rows'] = [
            {str(k): (None if isinstance(v, float) and np.isnan(v) else v) for k, v in row.items()}
            for row in rows
        ]
        return json.dumps(data, default=json_serializer, indent=indent)

    def export_to_json(self, filename: str) -> None:
        """Export the report to a JSON file"""
        with open(filename, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        LOG.info("Wrote diff report to %s", filename)

    def export_to_csv(self, base_filename: str) -> List[str]:
        """
        Export the rows of every occurring diff label to separate CSV files

        Returns:
            List of created file paths
        """
        created_files = []
        for name, rows in self._sections():
            path = f"{base_filename}_{name.lower()}.csv"
            rows.to_csv(path, index=False)
            created_files.append(path)

        summary_path = f"{base_filename}_summary.csv"
        self._summary_df().to_csv(summary_path, index=False)
        created_files.append(summary_path)

        LOG.info("Wrote %d CSV files for %s", len(created_files), base_filename)
        return created_files

    def export_to_excel(self, filename: str) -> None:
        """Export the summary and the rows of every occurring diff label to separate sheets"""
        with pd.ExcelWriter(filename, engine='openpyxl') as writer:
            self._summary_df().to_excel(writer, sheet_name='Summary', index=False)
            for name, rows in self._sections():
                rows.to_excel(writer, sheet_name=name, index=False)
        LOG.info("Wrote diff report to %s", filename)

    def export_to_html(self, filename: str, include_styles: bool = True) -> None:
        """
        Export the report to an HTML file with formatted tables

        Args:
            filename: Output HTML file path
            include_styles: Whether to include CSS styling
        """
        html_parts = []

        if include_styles:
            html_parts.append("""
<!DOCTYPE html>
<html>
<head>
    <title>Diff Report</title>
    <style>
        body { font-family: Arial, sans-serif; margin: 20px; }
        h1, h2 { color: #333; }
        table { border-collapse: collapse; margin: 10px 0 30px 0; }
        th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
        th { background-color: #4CAF50; color: white; }
        .summary { background-color: #f9f9f9; padding: 15px; border-radius: 5px; margin-bottom: 20px; }
        .inserted { background-color: #d4edda; }
        .deleted { background-color: #f8d7da; }
        .changed { background-color: #fff3cd; }
    </style>
</head>
<body>
""")
        else:
            html_parts.append("<html><body>")

        html_parts.append("<h1>Diff Report</h1>")

        html_parts.append('<div class="summary">')
        html_parts.append("<h2>Summary</h2>")
        html_parts.append("<ul>")
        for key, value in self.summary.items():
            html_parts.append(f"<li><strong>{key}:</strong> {value}</li>")
        html_parts.append("</ul></div>")

        for name, rows in self._sections():
            if name == 'Unchanged':
                continue
            html_parts.append(f'<div class="{name.lower()}">')
            html_parts.append(f"<h2>{name} Rows ({len(rows)})</h2>")
            html_parts.append(rows.to_html(index=False, classes='table'))
            html_parts.append("</div>")

        html_parts.append("</body></html>")

        with open(filename, 'w', encoding='utf-8') as f:
            f.write('\n'.join(html_parts))
        LOG.info("Wrote diff report to %s", filename)

    def _sections(self):
        sections = [
            ('Inserted', self.get_inserted()),
            ('Changed', self.get_changed()),
            ('Deleted', self.get_deleted()),
            ('Unchanged', self.get_unchanged()),
        ]
        return [(name, rows) for name, rows in sections if len(rows) > 0]

    def _summary_df(self) -> pd.DataFrame:
        return pd.DataFrame(list(self.summary.items()), columns=['Metric', 'Value'])


def report(
    left: pd.DataFrame,
    right: pd.DataFrame,
    id_columns: IdColumns = None,
    options: Optional[DiffOptions] = None
) -> DiffReport:
    """
    Diff two DataFrames and wrap the result in a DiffReport

    Example:
        >>> report(left, right, ['id']).has_changes()
        True
    """
    return DiffReport(diff(left, right, id_columns, options), options)
