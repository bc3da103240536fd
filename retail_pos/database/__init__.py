# retail_pos/database/__init__.py
from __future__ import annotations

from contextlib import contextmanager
from functools import wraps
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator
import logging
import sqlite3
import threading

from ..errors import StoreUnavailableError
from . import schema as schema_module

_log = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class Store:
    """
    The one open connection for the process, plus the lock that serialises
    every statement on it.

    Opened once at startup by open_store() and closed once at shutdown;
    repositories receive it through their constructor.
      - isolation_level=None: transactions are explicit (see transaction()).
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)

    The connection is shared across threads, so every statement runs under
    self.lock: writes through transaction(), reads through @locked repository
    methods. A reader never sees a sale that is still being written.
    """

    def __init__(self, conn: sqlite3.Connection, *, clock: Clock = datetime.now, path: Path | None = None):
        conn.row_factory = sqlite3.Row
        self.conn = conn
        self.clock = clock
        self.path = path
        self.lock = threading.RLock()
        self._closed = False

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Start an IMMEDIATE transaction (write lock up front), commit on
        success, rollback on any error. Holds self.lock for the whole unit.
        """
        with self.lock:
            self.conn.execute("BEGIN IMMEDIATE")
            try:
                yield self.conn
                self.conn.commit()
            except BaseException:
                self.conn.rollback()
                raise

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self.lock:
            if self._closed:
                return
            self.conn.close()
            self._closed = True
            _log.info("Store closed")


def locked(method):
    """Run a repository method while holding its store's lock."""

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.store.lock:
            return method(self, *args, **kwargs)

    return wrapper


def connect(db_path: Path | str) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), isolation_level=None, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        if str(db_path) != ":memory:":
            conn.execute("PRAGMA journal_mode = WAL;")
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def open_store(db_path: Path | str, *, clock: Clock = datetime.now) -> Store:
    """
    Open the database file and apply the schema idempotently.

    Raises StoreUnavailableError when the file can't be opened, isn't a
    database, or can't be migrated; the caller must not continue.
    """
    path = Path(db_path) if str(db_path) != ":memory:" else None
    conn = None
    try:
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
        conn = connect(db_path)
        fk = conn.execute("PRAGMA foreign_keys;").fetchone()
        if not fk or int(fk[0]) != 1:
            conn.close()
            raise StoreUnavailableError("SQLite build does not enforce foreign keys.")
        schema_module.apply_schema(conn)
    except (sqlite3.Error, OSError) as e:
        if conn is not None:
            conn.close()
        raise StoreUnavailableError(f"Could not open database at {db_path}: {e}") from e
    _log.info("Store ready at %s", db_path)
    return Store(conn, clock=clock, path=path)


__all__ = [
    "Store",
    "Clock",
    "connect",
    "locked",
    "open_store",
]
