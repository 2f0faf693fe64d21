"""User table."""

from __future__ import annotations

from org_provisioning.db.base import Dao
from org_provisioning.shared.exceptions import UniqueConstraintError
from org_provisioning.shared.models import User
from org_provisioning.shared.store import DbSession


class UserDao(Dao[User]):
    table_name = "users"

    def insert(self, session: DbSession, user: User) -> User:
        if self.select_by_login(session, user.login) is not None:
            raise UniqueConstraintError(self.table_name, "login", user.login)
        self._put(session, user.uuid, user)
        return user

    def select_by_uuid(self, session: DbSession, uuid: str) -> User | None:
        return self._get(session, uuid)

    def select_by_login(self, session: DbSession, login: str) -> User | None:
        return self._first(session, lambda u: u.login == login)

    def select_by_uuids(self, session: DbSession, uuids: list[str]) -> list[User]:
        wanted = set(uuids)
        return sorted(self._find(session, lambda u: u.uuid in wanted), key=lambda u: u.login)
