"""Engine handle: the live connection source for one configured database."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence

from sqlalchemy import event
from sqlalchemy import exc as sa_exc
from sqlalchemy.pool import QueuePool

from adapters.base import AdapterError, ConnectivityError, DatabaseDriver, TeardownError

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 5
DEFAULT_MAX_OVERFLOW = 10


def _mark_fresh(dbapi_connection: Any, connection_record: Any) -> None:
    connection_record.info["fresh"] = True


def _ping_on_checkout(dbapi_connection: Any, connection_record: Any, connection_proxy: Any) -> None:
    # Only connections that sat in the pool are pinged.
    if connection_record.info.pop("fresh", False):
        return
    try:
        cur = dbapi_connection.cursor()
        cur.execute("SELECT 1")
        cur.fetchall()
        cur.close()
    except Exception as exc:
        # The pool discards the connection and opens a replacement.
        raise sa_exc.DisconnectionError(str(exc)) from exc


class Engine:
    """Hands out pooled DB-API connections bound to ``db_name``.

    Connections come from a SQLAlchemy ``QueuePool`` whose creator is the
    driver's ``open_connection``, so driver errors keep their adapter types.
    Each ``connect()`` scope checks one connection out and returns it to the
    pool; statements run without any engine-level lock.
    """

    def __init__(
        self,
        driver: DatabaseDriver,
        data_source_name: str,
        db_name: str,
        pool_size: int = DEFAULT_POOL_SIZE,
        max_overflow: int = DEFAULT_MAX_OVERFLOW,
    ):
        self.driver = driver
        self.data_source_name = data_source_name
        self.db_name = db_name
        # QueuePool treats 0 as "unbounded".
        self.pool_size = max(1, int(pool_size))
        self.pool = QueuePool(
            self._create_connection,
            pool_size=self.pool_size,
            max_overflow=max_overflow,
            reset_on_return="rollback",
        )
        event.listen(self.pool, "connect", _mark_fresh)
        event.listen(self.pool, "checkout", _ping_on_checkout)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def dialect(self):
        return self.driver.dialect

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Engine {self.driver.name} db={self.db_name!r} {state}>"

    def _create_connection(self):
        return self.driver.open_connection(self.data_source_name, self.db_name)

    @contextmanager
    def connect(self) -> Iterator[Any]:
        """Yield a pooled connection; commit on success, roll back on error."""
        if self._closed:
            raise AdapterError(f"Engine for {self.db_name!r} is closed")
        conn = self.pool.connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            try:
                conn.rollback()
            except Exception:
                logger.warning("Rollback failed; discarding connection", exc_info=True)
                conn.invalidate()
            raise
        finally:
            conn.close()

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> None:
        with self.connect() as conn:
            cur = conn.cursor()
            if params is None:
                cur.execute(sql)
            else:
                cur.execute(sql, params)

    def fetchall(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[tuple]:
        with self.connect() as conn:
            cur = conn.cursor()
            if params is None:
                cur.execute(sql)
            else:
                cur.execute(sql, params)
            return [tuple(row) for row in cur.fetchall()]

    def ping(self) -> None:
        try:
            self.fetchall("SELECT 1")
        except AdapterError:
            raise
        except Exception as exc:
            raise ConnectivityError(f"Database {self.db_name!r} did not answer: {exc}") from exc

    def close(self) -> None:
        """Dispose of the pool. Idempotent; a failed dispose raises TeardownError.

        The pool logs, at ERROR, any single connection that fails to close.
        """
        if self._closed:
            return
        self._closed = True
        try:
            self.pool.dispose()
        except Exception as exc:
            raise TeardownError(f"Failed to dispose connection pool for {self.db_name!r}: {exc}") from exc
        logger.info("Closed engine", extra={"driver": self.driver.name, "db_name": self.db_name})

    def __enter__(self) -> "Engine":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
