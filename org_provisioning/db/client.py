"""Entry point to the persistence layer: one Database plus a DAO per table."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from org_provisioning.db.groups import GroupDao, GroupMembershipDao, GroupPermissionDao
from org_provisioning.db.organizations import DefaultTemplatesDao, OrganizationDao, OrganizationMemberDao
from org_provisioning.db.permission_templates import PermissionTemplateDao, TemplateGroupPermissionDao
from org_provisioning.db.quality import (
    DefaultQualityProfileDao,
    OrgQualityGateDao,
    QualityGateDao,
    QualityProfileDao,
    RulesProfileDao,
)
from org_provisioning.db.users import UserDao
from org_provisioning.shared import models
from org_provisioning.shared.logging import get_logger
from org_provisioning.shared.serialization import default_deserializer, dump_tables, load_tables
from org_provisioning.shared.store import Database, DbSession

log = get_logger()

TABLE_MODELS: dict[str, type] = {
    OrganizationDao.table_name: models.Organization,
    DefaultTemplatesDao.table_name: models.DefaultTemplates,
    OrganizationMemberDao.table_name: models.OrganizationMember,
    UserDao.table_name: models.User,
    GroupDao.table_name: models.Group,
    GroupPermissionDao.table_name: models.GroupPermission,
    GroupMembershipDao.table_name: models.GroupMembership,
    PermissionTemplateDao.table_name: models.PermissionTemplate,
    TemplateGroupPermissionDao.table_name: models.TemplateGroupPermission,
    RulesProfileDao.table_name: models.RulesProfile,
    QualityProfileDao.table_name: models.QualityProfile,
    DefaultQualityProfileDao.table_name: models.DefaultQualityProfile,
    QualityGateDao.table_name: models.QualityGate,
    OrgQualityGateDao.table_name: models.OrgQualityGate,
}


class DbClient:
    """Groups the DAOs over a shared Database."""

    def __init__(self, database: Database | None = None) -> None:
        self.database = database or Database(list(TABLE_MODELS))
        self.organizations = OrganizationDao()
        self.default_templates = DefaultTemplatesDao()
        self.organization_members = OrganizationMemberDao()
        self.users = UserDao()
        self.groups = GroupDao()
        self.group_permissions = GroupPermissionDao()
        self.group_memberships = GroupMembershipDao()
        self.permission_templates = PermissionTemplateDao()
        self.template_group_permissions = TemplateGroupPermissionDao()
        self.rules_profiles = RulesProfileDao()
        self.quality_profiles = QualityProfileDao()
        self.default_quality_profiles = DefaultQualityProfileDao()
        self.quality_gates = QualityGateDao()
        self.org_quality_gates = OrgQualityGateDao()

    @contextmanager
    def session(self) -> Iterator[DbSession]:
        with self.database.session() as session:
            yield session

    # --- State file ---

    def save(self, path: str | Path) -> None:
        dump_tables(self.database.snapshot(), path)
        log.info("state_saved", path=str(path))

    @classmethod
    def load(cls, path: str | Path) -> DbClient:
        """Client over the tables stored in path; a missing file gives an empty database."""
        client = cls()
        if not Path(path).exists():
            return client
        deserializers = {name: default_deserializer(model) for name, model in TABLE_MODELS.items()}
        deserializers[OrganizationDao.table_name] = models.Organization.from_dict
        client.database.restore(load_tables(path, deserializers))
        log.info("state_loaded", path=str(path))
        return client
