"""Groups, their global permissions and their members."""

from __future__ import annotations

from org_provisioning.db.base import Dao
from org_provisioning.shared.exceptions import UniqueConstraintError
from org_provisioning.shared.models import Group, GroupMembership, GroupPermission
from org_provisioning.shared.store import DbSession


class GroupDao(Dao[Group]):
    table_name = "groups"

    def insert(self, session: DbSession, group: Group) -> Group:
        if self.select_by_name(session, group.organization_uuid, group.name) is not None:
            raise UniqueConstraintError(self.table_name, "name", group.name)
        self._put(session, group.uuid, group)
        return group

    def select_by_uuid(self, session: DbSession, uuid: str) -> Group | None:
        return self._get(session, uuid)

    def select_by_name(self, session: DbSession, organization_uuid: str, name: str) -> Group | None:
        return self._first(
            session, lambda g: g.organization_uuid == organization_uuid and g.name == name
        )

    def select_by_organization_uuid(self, session: DbSession, organization_uuid: str) -> list[Group]:
        groups = self._find(session, lambda g: g.organization_uuid == organization_uuid)
        return sorted(groups, key=lambda g: g.name)


class GroupPermissionDao(Dao[GroupPermission]):
    table_name = "group_permissions"

    def insert(self, session: DbSession, permission: GroupPermission) -> None:
        self._put(session, permission.uuid, permission)

    def select_global_permissions_of_group(
        self, session: DbSession, organization_uuid: str, group_uuid: str
    ) -> list[str]:
        rows = self._find(
            session,
            lambda p: p.organization_uuid == organization_uuid and p.group_uuid == group_uuid,
        )
        return sorted(p.permission for p in rows)


class GroupMembershipDao(Dao[GroupMembership]):
    table_name = "groups_users"

    def insert(self, session: DbSession, membership: GroupMembership) -> None:
        self._put(session, f"{membership.group_uuid}:{membership.user_uuid}", membership)

    def select_user_uuids(self, session: DbSession, group_uuid: str) -> list[str]:
        return sorted(m.user_uuid for m in self._find(session, lambda m: m.group_uuid == group_uuid))

    def select_group_uuids_by_user(self, session: DbSession, user_uuid: str) -> list[str]:
        return sorted(m.group_uuid for m in self._find(session, lambda m: m.user_uuid == user_uuid))
