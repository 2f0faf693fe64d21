"""In-process user search index.

Documents are rebuilt from the database after a session commits, so a rolled
back session never leaves a document behind.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from org_provisioning.db.client import DbClient
from org_provisioning.shared.logging import get_logger
from org_provisioning.shared.models import User
from org_provisioning.shared.store import DbSession

log = get_logger()


@dataclass
class UserDoc:
    uuid: str
    login: str
    name: str
    email: str | None = None
    active: bool = True
    organization_uuids: list[str] = field(default_factory=list)

    def matches(self, text_query: str) -> bool:
        needle = text_query.lower()
        haystack = (self.login, self.name, self.email or "")
        return any(needle in value.lower() for value in haystack)


@dataclass
class SearchResult:
    total: int
    docs: list[UserDoc]


class UserIndex:
    """Holds user documents and answers organization-scoped searches."""

    def __init__(self) -> None:
        self._docs: dict[str, UserDoc] = {}
        self._lock = threading.RLock()

    def put(self, doc: UserDoc) -> None:
        with self._lock:
            self._docs[doc.uuid] = doc

    def get(self, user_uuid: str) -> UserDoc | None:
        with self._lock:
            return self._docs.get(user_uuid)

    def search(
        self,
        organization_uuid: str | None = None,
        text_query: str | None = None,
        limit: int = 100,
    ) -> SearchResult:
        with self._lock:
            hits = []
            for doc in sorted(self._docs.values(), key=lambda d: d.login):
                if not doc.active:
                    continue
                if organization_uuid and organization_uuid not in doc.organization_uuids:
                    continue
                if text_query and not doc.matches(text_query):
                    continue
                hits.append(doc)
            return SearchResult(total=len(hits), docs=hits[:limit])

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._docs)


class UserIndexer:
    """Pushes users from the database into the index."""

    def __init__(self, db: DbClient, index: UserIndex) -> None:
        self._db = db
        self._index = index

    def commit_and_index(self, session: DbSession, user: User) -> None:
        """Index the user once the session commits."""
        session.after_commit(lambda: self._index_user(session, user.uuid))

    def _index_user(self, session: DbSession, user_uuid: str) -> None:
        user = self._db.users.select_by_uuid(session, user_uuid)
        if user is None:
            log.warning("user_index_skipped", user_uuid=user_uuid, reason="user not found")
            return
        organization_uuids = self._db.organization_members.select_organization_uuids_by_user(
            session, user_uuid
        )
        self._index.put(
            UserDoc(
                uuid=user.uuid,
                login=user.login,
                name=user.name,
                email=user.email,
                active=user.active,
                organization_uuids=organization_uuids,
            )
        )
        log.info("user_indexed", user_uuid=user.uuid, organizations=len(organization_uuids))
