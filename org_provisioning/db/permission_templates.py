"""Permission templates and the group grants attached to them."""

from __future__ import annotations

from org_provisioning.db.base import Dao
from org_provisioning.shared.models import PermissionTemplate, TemplateGroupPermission
from org_provisioning.shared.store import DbSession


class PermissionTemplateDao(Dao[PermissionTemplate]):
    table_name = "permission_templates"

    def insert(self, session: DbSession, template: PermissionTemplate) -> PermissionTemplate:
        self._put(session, template.uuid, template)
        return template

    def select_by_uuid(self, session: DbSession, uuid: str) -> PermissionTemplate | None:
        return self._get(session, uuid)

    def select_by_name(self, session: DbSession, organization_uuid: str, name: str) -> PermissionTemplate | None:
        """Template names are matched case-insensitively."""
        wanted = name.lower()
        return self._first(
            session,
            lambda t: t.organization_uuid == organization_uuid and t.name.lower() == wanted,
        )


class TemplateGroupPermissionDao(Dao[TemplateGroupPermission]):
    table_name = "perm_templates_groups"

    def insert(self, session: DbSession, grant: TemplateGroupPermission) -> None:
        self._put(session, grant.uuid, grant)

    def select_by_template_uuid(self, session: DbSession, template_uuid: str) -> list[TemplateGroupPermission]:
        grants = self._find(session, lambda g: g.template_uuid == template_uuid)
        return sorted(grants, key=lambda g: (g.group_uuid, g.permission))
