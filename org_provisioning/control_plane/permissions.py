"""Permission catalog and the default permission template of an organization."""

from __future__ import annotations

from datetime import datetime

from org_provisioning.db.client import DbClient
from org_provisioning.shared.logging import get_logger
from org_provisioning.shared.models import (
    DefaultTemplates,
    Group,
    Organization,
    PermissionTemplate,
    TemplateGroupPermission,
)
from org_provisioning.shared.store import DbSession

log = get_logger()

# Global permissions
ADMINISTER = "admin"
ADMINISTER_QUALITY_GATES = "gateadmin"
ADMINISTER_QUALITY_PROFILES = "profileadmin"
SCAN = "scan"
PROVISION_PROJECTS = "provisioning"

# Project roles
USER = "user"
CODEVIEWER = "codeviewer"
ISSUE_ADMIN = "issueadmin"
SECURITYHOTSPOT_ADMIN = "securityhotspotadmin"
ADMIN = "admin"

DEFAULT_TEMPLATE_NAME = "Default template"

OWNERS_TEMPLATE_PERMISSIONS = (ADMIN, SCAN)
DEFAULT_GROUP_TEMPLATE_PERMISSIONS = (USER, CODEVIEWER, ISSUE_ADMIN, SECURITYHOTSPOT_ADMIN)


class PermissionService:
    """Lists the permissions that exist at each level."""

    _GLOBAL = (
        ADMINISTER,
        ADMINISTER_QUALITY_GATES,
        ADMINISTER_QUALITY_PROFILES,
        SCAN,
        PROVISION_PROJECTS,
    )
    _PROJECT = (USER, ADMIN, CODEVIEWER, ISSUE_ADMIN, SECURITYHOTSPOT_ADMIN, SCAN)

    def global_permissions(self) -> list[str]:
        return list(self._GLOBAL)

    def project_permissions(self) -> list[str]:
        return list(self._PROJECT)


class TemplateProvisioner:
    """Creates the template applied to new projects of an organization."""

    def __init__(self, db: DbClient) -> None:
        self._db = db

    def create_default_template(
        self,
        session: DbSession,
        organization: Organization,
        owners_group: Group,
        default_group_uuid: str,
        now: datetime,
    ) -> PermissionTemplate:
        template = PermissionTemplate(
            organization_uuid=organization.uuid,
            name=DEFAULT_TEMPLATE_NAME,
            description=f"Default permission template of organization {organization.name}",
            created_at=now,
            updated_at=now,
        )
        self._db.permission_templates.insert(session, template)

        for permission in OWNERS_TEMPLATE_PERMISSIONS:
            self._grant(session, template, owners_group.uuid, permission)
        for permission in DEFAULT_GROUP_TEMPLATE_PERMISSIONS:
            self._grant(session, template, default_group_uuid, permission)

        self._db.default_templates.set(
            session,
            DefaultTemplates(organization_uuid=organization.uuid, project_uuid=template.uuid),
        )
        log.info(
            "default_template_created",
            organization_uuid=organization.uuid,
            template_uuid=template.uuid,
        )
        return template

    def _grant(self, session: DbSession, template: PermissionTemplate, group_uuid: str, permission: str) -> None:
        self._db.template_group_permissions.insert(
            session,
            TemplateGroupPermission(
                template_uuid=template.uuid,
                group_uuid=group_uuid,
                permission=permission,
            ),
        )
