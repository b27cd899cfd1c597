"""
Basic validation tests for the cangjie_db_builder package.

These tests verify module structure, imports and the storage adapter
lifecycle without any table data.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


def test_imports():
    """Test that all modules can be imported."""
    import cangjie_db_builder
    from cangjie_db_builder import (  # noqa: F401
        batching, cli, config, coordinator, database, exceptions,
        models, orchestrator, parser, reader,
    )

    assert cangjie_db_builder.__version__


def test_database_adapter_interface():
    """Test that the storage adapter exposes the lifecycle operations."""
    from cangjie_db_builder.database import CharacterDatabase

    for method in ['open', 'migrate_schema', 'submit_batch_write', 'close']:
        assert hasattr(CharacterDatabase, method), f"CharacterDatabase.{method} missing"


def test_database_lifecycle(tmp_path):
    """Test open, migrate and close on a fresh SQLite file."""
    from cangjie_db_builder.database import CharacterDatabase, sqlite_uri

    database = CharacterDatabase()
    database.close()  # closing an unopened database is a no-op

    database.open(sqlite_uri(tmp_path / 'lifecycle.db'))
    database.migrate_schema(3)
    assert database.get_schema_version() == 3
    database.close()
    assert not database.is_open


def test_write_before_open_fails():
    from cangjie_db_builder.batching import Batch
    from cangjie_db_builder.database import CharacterDatabase
    from cangjie_db_builder.exceptions import WriteError

    with pytest.raises(WriteError):
        CharacterDatabase().submit_batch_write(Batch(sequence=0))


def test_open_in_missing_directory_fails(tmp_path):
    from cangjie_db_builder.database import CharacterDatabase, sqlite_uri
    from cangjie_db_builder.exceptions import StorageConnectionError

    with pytest.raises(StorageConnectionError) as excinfo:
        CharacterDatabase().open(sqlite_uri(tmp_path / 'no' / 'such' / 'dir.db'))
    assert excinfo.value.exit_code != 0


def test_exit_codes():
    """Test error exit code mapping."""
    from cangjie_db_builder.exceptions import (
        EX_NOINPUT, AlreadyExistsError, ReadError, UsageError,
    )

    assert AlreadyExistsError('x.db').exit_code == 1
    assert UsageError('bad').exit_code == 2
    assert ReadError('table-3.txt', 0, FileNotFoundError(2, 'No such file')).exit_code == EX_NOINPUT
    assert ReadError('table-3.txt', 0, PermissionError(13, 'Permission denied')).exit_code == 13
    assert ReadError('table-3.txt', 4, ValueError('bad bytes')).exit_code == 1


def test_storage_exit_codes_avoid_reserved_values():
    """Test that storage error codes never read as success or usage errors."""
    import sqlite3
    from cangjie_db_builder.exceptions import StorageError

    def storage_error(code):
        cause = sqlite3.OperationalError('boom')
        cause.sqlite_errorcode = code
        return StorageError('boom', cause)

    assert storage_error(14).exit_code == 14
    # SQLITE_IOERR_WRITE (778) -> SQLITE_IOERR (10)
    assert storage_error(778).exit_code == 10
    # SQLITE_INTERNAL would collide with the usage code
    assert storage_error(2).exit_code == 1
    assert StorageError('no cause').exit_code == 1
