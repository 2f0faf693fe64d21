"""Permission groups created with every organization."""

from __future__ import annotations

from datetime import datetime

from org_provisioning.control_plane.permissions import PermissionService
from org_provisioning.db.client import DbClient
from org_provisioning.shared.exceptions import StateConflictError
from org_provisioning.shared.logging import get_logger
from org_provisioning.shared.models import Group, GroupMembership, GroupPermission, Organization, User, _utc_now
from org_provisioning.shared.store import DbSession

log = get_logger()

OWNERS_GROUP_NAME = "Owners"
OWNERS_GROUP_DESCRIPTION = "Owners of organization"
DEFAULT_GROUP_NAME = "Members"
DEFAULT_GROUP_DESCRIPTION = "All members of the organization"


class DefaultGroupCreator:
    """Creates the group every member of an organization belongs to."""

    def __init__(self, db: DbClient) -> None:
        self._db = db

    def create(self, session: DbSession, organization_uuid: str, now: datetime | None = None) -> Group:
        if self._db.organizations.get_default_group_uuid(session, organization_uuid) is not None:
            raise StateConflictError(
                f"The default group has already been created for organization '{organization_uuid}'"
            )
        now = now or _utc_now()
        group = Group(
            organization_uuid=organization_uuid,
            name=DEFAULT_GROUP_NAME,
            description=DEFAULT_GROUP_DESCRIPTION,
            created_at=now,
            updated_at=now,
        )
        self._db.groups.insert(session, group)
        self._db.organizations.set_default_group_uuid(session, organization_uuid, group.uuid)
        log.info("group_created", organization_uuid=organization_uuid, group=group.name, default=True)
        return group


class GroupProvisioner:
    """Owners group, default group and memberships of a new organization."""

    def __init__(
        self,
        db: DbClient,
        permission_service: PermissionService | None = None,
        default_group_creator: DefaultGroupCreator | None = None,
    ) -> None:
        self._db = db
        self._permissions = permission_service or PermissionService()
        self._default_group_creator = default_group_creator or DefaultGroupCreator(db)

    def create_owners_group(self, session: DbSession, organization: Organization, now: datetime) -> Group:
        group = Group(
            organization_uuid=organization.uuid,
            name=OWNERS_GROUP_NAME,
            description=OWNERS_GROUP_DESCRIPTION,
            created_at=now,
            updated_at=now,
        )
        self._db.groups.insert(session, group)
        for permission in self._permissions.global_permissions():
            self._db.group_permissions.insert(
                session,
                GroupPermission(
                    organization_uuid=organization.uuid,
                    group_uuid=group.uuid,
                    permission=permission,
                ),
            )
        log.info("group_created", organization_uuid=organization.uuid, group=group.name, default=False)
        return group

    def create_default_group(self, session: DbSession, organization: Organization, now: datetime) -> Group:
        group = self._default_group_creator.create(session, organization.uuid, now)
        organization.default_group_uuid = group.uuid
        return group

    def add_member(self, session: DbSession, group: Group, user: User) -> None:
        self._db.group_memberships.insert(session, GroupMembership(group_uuid=group.uuid, user_uuid=user.uuid))
