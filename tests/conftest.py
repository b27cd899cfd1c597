"""
Shared fixtures for the cangjie_db_builder tests.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


def make_line(
    char='日',
    simpchar='日',
    flags='1\t1\t0\t0\t1\t0\t0\t0\t0',
    orientation='both',
    code='a',
    short_code='',
    frequency='42'
):
    """Build one table line from its fields."""
    return '\t'.join([char, simpchar, flags, orientation, code, short_code, frequency])


@pytest.fixture
def make_table(tmp_path):
    """Write a table file and return its path."""
    def _make_table(lines, name='table-3.txt'):
        path = tmp_path / name
        path.write_text(''.join(line + '\n' for line in lines), encoding='utf-8')
        return path
    return _make_table


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep configuration environment variables out of the tests."""
    for var in ['CANGJIE_DB_CONFIG', 'BATCH_SIZE', 'WRITE_WORKERS', 'SKIP_MALFORMED', 'DB_ECHO']:
        monkeypatch.delenv(var, raising=False)
