"""Shared plumbing for table access objects."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Generic, TypeVar

from org_provisioning.shared.store import DbSession, InMemoryStore

T = TypeVar("T")


class Dao(Generic[T]):
    """Reads and writes one table through a session.

    Rows go in and come out as copies, so a caller's object only reaches the
    table through an explicit insert or update.
    """

    table_name: str = ""

    def _table(self, session: DbSession) -> InMemoryStore[Any]:
        return session.table(self.table_name)

    def _put(self, session: DbSession, key: str, row: T) -> None:
        self._table(session).put(key, replace(row))

    def _get(self, session: DbSession, key: str) -> T | None:
        row = self._table(session).get(key)
        return replace(row) if row is not None else None

    def _find(self, session: DbSession, predicate: Callable[[T], bool]) -> list[T]:
        return [replace(row) for row in self._table(session).find(predicate)]

    def _first(self, session: DbSession, predicate: Callable[[T], bool]) -> T | None:
        rows = self._find(session, predicate)
        return rows[0] if rows else None
