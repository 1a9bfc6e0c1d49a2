import asyncio
import functools
import os
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, List, Optional, Sequence

from loguru import logger

from historystore.core.base_system import BaseSystem
from .errors import StorageError
from .schema import create_statements
from .statements import Statement


class DatabaseManager(BaseSystem):
    """
    Owns the SQLite connection of the history store.

    Every call runs on one dedicated worker thread, so there is a single
    logical writer per store. Reads are plain autocommit SELECTs and take
    no exclusive lock; `run()` wraps a statement list in one transaction.
    """

    def __init__(self, locator, config):
        super().__init__(locator, config)
        self._conn: Optional[sqlite3.Connection] = None
        self._executor: Optional[ThreadPoolExecutor] = None

    async def initialize(self):
        settings = self.config.data.database
        logger.info(f"DatabaseManager opening {settings.path}")

        if settings.path != ":memory:":
            dirname = os.path.dirname(settings.path)
            if dirname:
                os.makedirs(dirname, exist_ok=True)

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="history-db")
        try:
            self._conn = await self._submit(self._connect, settings.path, settings.timeout, settings.journal_mode)
            await self.run(create_statements())
        except (sqlite3.Error, StorageError) as e:
            logger.error(f"Failed to open database {settings.path}: {e}")
            await self._release()
            raise StorageError(f"Cannot open {settings.path}: {e}") from e

        await super().initialize()
        logger.info("DatabaseManager ready")

    async def shutdown(self):
        await self._release()
        await super().shutdown()
        logger.info("DatabaseManager closed")

    async def _release(self):
        """Close the connection and stop the worker thread, whatever state they are in."""
        if self._conn is not None:
            await self._submit(self._conn.close)
            self._conn = None
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    @staticmethod
    def _connect(path: str, timeout: float, journal_mode: str) -> sqlite3.Connection:
        # isolation_level=None: we issue BEGIN/COMMIT ourselves
        conn = sqlite3.connect(path, timeout=timeout, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        # journal_mode is one of a validated Literal set
        conn.execute(f"PRAGMA journal_mode = {journal_mode}")
        return conn

    async def _submit(self, fn: Callable, *args) -> Any:
        if self._executor is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(fn, *args))

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._conn

    # --- Reads ---

    async def run_query(self, sql: str, args: Optional[Sequence[Any]] = None,
                        factory: Optional[Callable[[sqlite3.Row], Any]] = None) -> List[Any]:
        """
        Run a read query and return all rows, mapped through `factory` if given.
        """
        return await self._submit(self._query_sync, sql, args, factory)

    async def run_scalar(self, sql: str, args: Optional[Sequence[Any]] = None) -> Any:
        """First column of the first row, or None for an empty result."""
        rows = await self.run_query(sql, args)
        if not rows:
            return None
        return rows[0][0]

    def _query_sync(self, sql, args, factory):
        conn = self._connection()
        try:
            rows = conn.execute(sql, args or ()).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Query failed: {e}")
            raise StorageError(str(e)) from e
        if factory is None:
            return rows
        return [factory(row) for row in rows]

    # --- Writes ---

    async def run(self, statements: List[Statement]) -> List[int]:
        """
        Execute statements in order as one transaction.

        Returns the rowcount of each statement. On any failure the whole
        batch is rolled back and StorageError is raised.
        """
        if not statements:
            return []
        return await self._submit(self._run_sync, list(statements))

    async def run_many(self, sql: str, rows: Iterable[Sequence[Any]]) -> int:
        """executemany() one statement over `rows` in a single transaction."""
        return await self._submit(self._run_many_sync, sql, list(rows))

    def _run_sync(self, statements: List[Statement]) -> List[int]:
        def body(conn):
            return [conn.execute(sql, args or ()).rowcount for sql, args in statements]
        return self._in_transaction(body, len(statements))

    def _run_many_sync(self, sql: str, rows: List[Sequence[Any]]) -> int:
        return self._in_transaction(lambda conn: conn.executemany(sql, rows).rowcount, 1)

    def _in_transaction(self, body: Callable[[sqlite3.Connection], Any], size: int) -> Any:
        conn = self._connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            result = body(conn)
            conn.execute("COMMIT")
            return result
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            logger.error(f"Batch of {size} statement(s) rolled back: {e}")
            raise StorageError(str(e)) from e
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
