"""In-memory tables and the unit-of-work that groups writes across them."""

from __future__ import annotations

import copy
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Generic, Iterator, TypeVar

from org_provisioning.shared.logging import get_logger

T = TypeVar("T")

log = get_logger()


class Store(ABC, Generic[T]):
    """Keyed row storage."""

    @abstractmethod
    def put(self, key: str, value: T) -> None: ...

    @abstractmethod
    def get(self, key: str) -> T | None: ...

    @abstractmethod
    def find(self, predicate: Callable[[T], bool]) -> list[T]: ...

    @abstractmethod
    def exists(self, key: str) -> bool: ...


class InMemoryStore(Store[T]):
    """Thread-safe in-memory store that can snapshot and restore its rows."""

    def __init__(self) -> None:
        self._data: dict[str, T] = {}
        self._lock = threading.RLock()

    def put(self, key: str, value: T) -> None:
        with self._lock:
            self._data[key] = value

    def get(self, key: str) -> T | None:
        with self._lock:
            return self._data.get(key)

    def find(self, predicate: Callable[[T], bool]) -> list[T]:
        with self._lock:
            return [v for v in self._data.values() if predicate(v)]

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def snapshot(self) -> dict[str, T]:
        """Deep copy of the rows; stored objects are mutable dataclasses."""
        with self._lock:
            return copy.deepcopy(self._data)

    def restore(self, rows: dict[str, T]) -> None:
        with self._lock:
            self._data = copy.deepcopy(rows)

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._data)


class Database:
    """Named in-memory tables sharing one write lock."""

    def __init__(self, table_names: list[str] | None = None) -> None:
        self._tables: dict[str, InMemoryStore[Any]] = {}
        self._lock = threading.RLock()
        for name in table_names or []:
            self.table(name)

    def table(self, name: str) -> InMemoryStore[Any]:
        with self._lock:
            if name not in self._tables:
                self._tables[name] = InMemoryStore()
            return self._tables[name]

    @property
    def table_names(self) -> list[str]:
        return sorted(self._tables)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return {name: t.snapshot() for name, t in self._tables.items()}

    def restore(self, state: dict[str, dict[str, Any]]) -> None:
        with self._lock:
            for name, table in self._tables.items():
                table.restore(state.get(name, {}))

    @contextmanager
    def session(self) -> Iterator[DbSession]:
        """Open a unit of work.

        The database lock is held until the block exits. A clean exit commits;
        an exception rolls every table back to the last commit and propagates.
        """
        with self._lock:
            session = DbSession(self)
            try:
                yield session
            except BaseException:
                session.rollback()
                raise
            else:
                session.commit()
            finally:
                session.close()


class DbSession:
    """One transaction over a Database.

    Writes go straight to the tables; rollback restores the snapshot taken at
    the start of the session or at the last commit. Hooks registered with
    after_commit run once the writes are committed and are discarded on
    rollback.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._committed = database.snapshot()
        self._after_commit: list[Callable[[], None]] = []
        self._closed = False

    def table(self, name: str) -> InMemoryStore[Any]:
        if self._closed:
            raise RuntimeError("session is closed")
        return self._db.table(name)

    def after_commit(self, hook: Callable[[], None]) -> None:
        self._after_commit.append(hook)

    def commit(self) -> None:
        self._committed = self._db.snapshot()
        hooks, self._after_commit = self._after_commit, []
        for hook in hooks:
            hook()

    def rollback(self) -> None:
        self._db.restore(self._committed)
        dropped = len(self._after_commit)
        self._after_commit = []
        log.info("session_rolled_back", dropped_hooks=dropped)

    def close(self) -> None:
        self._closed = True
