"""Organization, membership and per-organization defaults tables."""

from __future__ import annotations

from org_provisioning.db.base import Dao
from org_provisioning.shared.exceptions import OrganizationNotFoundError, UniqueConstraintError
from org_provisioning.shared.models import DefaultTemplates, Organization, OrganizationMember
from org_provisioning.shared.store import DbSession


def _member_key(organization_uuid: str, user_uuid: str) -> str:
    return f"{organization_uuid}:{user_uuid}"


class OrganizationDao(Dao[Organization]):
    table_name = "organizations"

    def insert(self, session: DbSession, organization: Organization) -> Organization:
        if self.select_by_key(session, organization.key) is not None:
            raise UniqueConstraintError(self.table_name, "key", organization.key)
        self._put(session, organization.uuid, organization)
        return organization

    def update(self, session: DbSession, organization: Organization) -> Organization:
        existing = self._get(session, organization.uuid)
        if existing is None:
            raise OrganizationNotFoundError(f"organization {organization.uuid} not found")
        if existing.key != organization.key:
            clash = self.select_by_key(session, organization.key)
            if clash is not None and clash.uuid != organization.uuid:
                raise UniqueConstraintError(self.table_name, "key", organization.key)
        self._put(session, organization.uuid, organization)
        return organization

    def select_by_uuid(self, session: DbSession, uuid: str) -> Organization | None:
        return self._get(session, uuid)

    def select_by_key(self, session: DbSession, key: str) -> Organization | None:
        return self._first(session, lambda o: o.key == key)

    def exists_by_key(self, session: DbSession, key: str) -> bool:
        return self.select_by_key(session, key) is not None

    def list(self, session: DbSession) -> list[Organization]:
        return sorted(self._find(session, lambda o: True), key=lambda o: (o.created_at, o.key))

    # --- Defaults stored on the organization row ---

    def _require(self, session: DbSession, uuid: str) -> Organization:
        organization = self._get(session, uuid)
        if organization is None:
            raise OrganizationNotFoundError(f"organization {uuid} not found")
        return organization

    def set_default_group_uuid(self, session: DbSession, organization_uuid: str, group_uuid: str) -> None:
        organization = self._require(session, organization_uuid)
        organization.default_group_uuid = group_uuid
        self._put(session, organization_uuid, organization)

    def get_default_group_uuid(self, session: DbSession, organization_uuid: str) -> str | None:
        return self._require(session, organization_uuid).default_group_uuid

    def set_default_quality_gate(self, session: DbSession, organization_uuid: str, quality_gate_uuid: str) -> None:
        organization = self._require(session, organization_uuid)
        organization.default_quality_gate_uuid = quality_gate_uuid
        self._put(session, organization_uuid, organization)

    def get_new_project_private(self, session: DbSession, organization_uuid: str) -> bool:
        return self._require(session, organization_uuid).new_project_private


class DefaultTemplatesDao(Dao[DefaultTemplates]):
    table_name = "default_templates"

    def set(self, session: DbSession, default_templates: DefaultTemplates) -> None:
        self._put(session, default_templates.organization_uuid, default_templates)

    def get(self, session: DbSession, organization_uuid: str) -> DefaultTemplates | None:
        return self._get(session, organization_uuid)


class OrganizationMemberDao(Dao[OrganizationMember]):
    table_name = "organization_members"

    def insert(self, session: DbSession, member: OrganizationMember) -> None:
        self._put(session, _member_key(member.organization_uuid, member.user_uuid), member)

    def select(self, session: DbSession, organization_uuid: str, user_uuid: str) -> OrganizationMember | None:
        return self._get(session, _member_key(organization_uuid, user_uuid))

    def select_organization_uuids_by_user(self, session: DbSession, user_uuid: str) -> list[str]:
        return sorted(m.organization_uuid for m in self._find(session, lambda m: m.user_uuid == user_uuid))

    def select_user_uuids(self, session: DbSession, organization_uuid: str) -> list[str]:
        return sorted(
            m.user_uuid for m in self._find(session, lambda m: m.organization_uuid == organization_uuid)
        )
