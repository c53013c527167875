"""
Tests for DiffReport
"""

import json

import pytest
import pandas as pd
from rowdiff import DiffOptions, DiffReport, diff, report


@pytest.fixture
def sample_dfs():
    left = pd.DataFrame({
        'id': [1, 2, 3, 4],
        'a': [1, 2, 3, 4],
        'b': ['x', 'y', 'z', 'w']
    })
    right = pd.DataFrame({
        'id': [1, 2, 3, 5],
        'a': [1, 20, 3, 5],
        'b': ['x', 'y', 'Z', 'v']
    })
    return left, right


@pytest.fixture
def sample_report(sample_dfs):
    left, right = sample_dfs
    return report(left, right, ['id'])


class TestDiffReport:
    """Tests for counts and row selection"""

    def test_counts(self, sample_report):
        assert sample_report.counts() == {'I': 1, 'C': 2, 'D': 1, 'N': 1}

    def test_counts_include_missing_labels(self, sample_dfs):
        left, _ = sample_dfs
        assert report(left, left.copy(), ['id']).counts() == {'I': 0, 'C': 0, 'D': 0, 'N': 4}

    def test_summary(self, sample_report):
        assert sample_report.summary == {
            'inserted': 1,
            'changed': 2,
            'deleted': 1,
            'unchanged': 1,
            'total': 5,
            'identical': False,
        }
        assert sample_report.has_changes() == True

    def test_identical(self, sample_dfs):
        left, _ = sample_dfs
        result = report(left, left.copy())

        assert result.summary['identical'] == True
        assert result.has_changes() == False

    def test_get_rows(self, sample_report):
        assert sample_report.get_inserted()['id'].tolist() == [5]
        assert sample_report.get_changed()['id'].tolist() == [2, 3]
        assert sample_report.get_deleted()['id'].tolist() == [4]
        assert sample_report.get_unchanged()['id'].tolist() == [1]
        assert sorted(sample_report.get_differences()['id']) == [2, 3, 4, 5]

    def test_custom_options(self, sample_dfs):
        left, right = sample_dfs
        options = DiffOptions(diff_column='action', insert_diff_value='+', delete_diff_value='-')
        result = report(left, right, ['id'], options=options)

        assert result.counts() == {'+': 1, 'C': 2, '-': 1, 'N': 1}
        assert result.get_inserted()['id'].tolist() == [5]

    def test_missing_diff_column(self, sample_dfs):
        left, right = sample_dfs
        diff_df = diff(left, right, ['id'])

        with pytest.raises(ValueError):
            DiffReport(diff_df, DiffOptions(diff_column='action'))
        with pytest.raises(TypeError):
            DiffReport(diff_df.to_dict())

    def test_str(self, sample_report):
        assert str(sample_report) == 'DiffReport(inserted: 1, changed: 2, deleted: 1)'


class TestExport:
    """Tests for exporting reports"""

    def test_to_json(self, sample_report):
        data = json.loads(sample_report.to_json())

        assert data['summary']['changed'] == 2
        assert data['counts'] == {'I': 1, 'C': 2, 'D': 1, 'N': 1}
        assert data['options']['diff_column'] == 'diff'
        deleted = [row for row in data['rows'] if row['diff'] == 'D']
        assert deleted == [{'diff': 'D', 'id': 4, 'left_a': 4, 'right_a': None, 'left_b': 'w', 'right_b': None}]

    def test_to_json_with_change_column(self, sample_dfs):
        left, right = sample_dfs
        data = json.loads(report(left, right, ['id'], DiffOptions(change_column='changes')).to_json())

        assert [row['changes'] for row in data['rows']] == [[], ['a'], ['b'], None, None]

    def test_export_to_json(self, sample_report, tmp_path):
        path = tmp_path / 'diff.json'
        sample_report.export_to_json(str(path))

        assert json.loads(path.read_text(encoding='utf-8'))['summary']['total'] == 5

    def test_export_to_csv(self, sample_report, tmp_path):
        base = str(tmp_path / 'diff')
        files = sample_report.export_to_csv(base)

        assert files == [
            f'{base}_inserted.csv',
            f'{base}_changed.csv',
            f'{base}_deleted.csv',
            f'{base}_unchanged.csv',
            f'{base}_summary.csv',
        ]
        assert pd.read_csv(f'{base}_changed.csv')['id'].tolist() == [2, 3]

    def test_export_to_excel(self, sample_report, tmp_path):
        path = tmp_path / 'diff.xlsx'
        sample_report.export_to_excel(str(path))

        sheets = pd.read_excel(path, sheet_name=None)
        assert list(sheets) == ['Summary', 'Inserted', 'Changed', 'Deleted', 'Unchanged']
        assert sheets['Deleted']['id'].tolist() == [4]

    def test_export_to_html(self, sample_report, tmp_path):
        path = tmp_path / 'diff.html'
        sample_report.export_to_html(str(path))

        html = path.read_text(encoding='utf-8')
        assert '<h1>Diff Report</h1>' in html
        assert 'Changed Rows (2)' in html
        assert 'Unchanged Rows' not in html
