"""
Database operations module.

Wraps a SQLAlchemy engine for the character database. Batch writes run on a
thread pool and are reported back through futures, each batch being inserted
in a single transaction.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, Optional, Sequence

from sqlalchemy import (
    Boolean, Column, Integer, MetaData, String, Table, create_engine, insert, select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .batching import Batch
from .exceptions import CloseError, SchemaError, StorageConnectionError, WriteError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

metadata = MetaData()

chars = Table(
    'chars', metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('chchar', String, nullable=False),
    Column('simpchar', String, nullable=False),
    Column('zh', Boolean, nullable=False),
    Column('big5', Boolean, nullable=False),
    Column('hkscs', Boolean, nullable=False),
    Column('zhuyin', Boolean, nullable=False),
    Column('kanji', Boolean, nullable=False),
    Column('hiragana', Boolean, nullable=False),
    Column('katakana', Boolean, nullable=False),
    Column('punctuation', Boolean, nullable=False),
    Column('symbol', Boolean, nullable=False),
    Column('orientation', String(16), nullable=False),
    Column('version', String(16), nullable=False),
    Column('code', String, nullable=False),
    Column('short_code', String, nullable=False),
    Column('frequency', Integer, nullable=False),
)

schema_version = Table(
    'schema_version', metadata,
    Column('version', Integer, nullable=False),
)


def sqlite_uri(path) -> str:
    return f"sqlite:///{path}"


class CharacterDatabase:
    """
    Storage adapter for the character database.

    Lifecycle: ``open`` -> ``migrate_schema`` -> ``submit_batch_write``* ->
    ``close``.
    """

    def __init__(self, workers: int = 1, echo: bool = False):
        """
        Args:
            workers: Number of writer threads (SQLite allows one writer at a time)
            echo: Log every SQL statement
        """
        self.workers = workers
        self.echo = echo
        self.engine: Optional[Engine] = None
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def open(self, uri: str) -> None:
        """
        Connect to the database.

        Raises:
            StorageConnectionError: If the database cannot be opened
        """
        try:
            engine = create_engine(
                uri,
                echo=self.echo,
                connect_args={'check_same_thread': False},
            )
            with engine.connect():
                pass
        except SQLAlchemyError as e:
            logger.error(f"Failed to open database {uri}: {e}")
            raise StorageConnectionError(f"Cannot open {uri}: {e}", e) from e

        self.engine = engine
        self._executor = ThreadPoolExecutor(
            max_workers=self.workers,
            thread_name_prefix='batch-writer'
        )
        logger.info(f"Opened {uri} with {self.workers} writer thread(s)")

    def migrate_schema(
        self,
        version: int = SCHEMA_VERSION,
        tables: Optional[Sequence[Table]] = None
    ) -> None:
        """
        Create the tables and record the schema version.

        Args:
            version: Schema version to record
            tables: Tables to create (default: all known tables)

        Raises:
            SchemaError: If the tables cannot be created
        """
        if self.engine is None:
            raise SchemaError("Database is not open")
        try:
            metadata.create_all(self.engine, tables=tables)
            with self.engine.begin() as conn:
                conn.execute(schema_version.delete())
                conn.execute(insert(schema_version).values(version=version))
        except SQLAlchemyError as e:
            logger.error(f"Schema migration failed: {e}")
            raise SchemaError(f"Cannot migrate schema to version {version}: {e}", e) from e
        logger.info(f"Schema migrated to version {version}")

    def get_schema_version(self) -> Optional[int]:
        if self.engine is None:
            return None
        with self.engine.connect() as conn:
            return conn.execute(select(schema_version.c.version)).scalar()

    def submit_batch_write(self, batch: Batch) -> 'Future[int]':
        """
        Insert a batch asynchronously.

        Returns:
            Future resolving to the number of rows inserted, or failing
            with WriteError

        Raises:
            WriteError: If the database is not open
        """
        if self._executor is None:
            raise WriteError("Database is not open")
        rows = [record.to_row() for record in batch.records]
        try:
            return self._executor.submit(self._write_rows, rows)
        except RuntimeError as e:
            raise WriteError(f"Cannot submit batch {batch.sequence}: {e}", e) from e

    def _write_rows(self, rows: Sequence[Dict[str, Any]]) -> int:
        try:
            with self.engine.begin() as conn:
                conn.execute(insert(chars), rows)
        except SQLAlchemyError as e:
            raise WriteError(f"Error writing to the database: {e}", e) from e
        return len(rows)

    def close(self) -> None:
        """
        Wait for pending writes and release the connection pool.

        Raises:
            CloseError: If the engine cannot be disposed
        """
        if self.engine is None:
            return
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        try:
            self.engine.dispose()
        except SQLAlchemyError as e:
            raise CloseError(f"Error closing the connection to the database: {e}", e) from e
        finally:
            self.engine = None
        logger.debug("Database closed")
