"""Organization creation and update service."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Callable

from org_provisioning.control_plane.groups import GroupProvisioner
from org_provisioning.control_plane.permissions import PermissionService, TemplateProvisioner
from org_provisioning.control_plane.quality import (
    BuiltInQualityProfileRepository,
    QualityGateLinker,
    QualityProfileCloner,
)
from org_provisioning.db.client import DbClient
from org_provisioning.index.users import UserIndexer
from org_provisioning.shared.config import Settings
from org_provisioning.shared.exceptions import InvalidArgumentError, KeyConflictError, StateConflictError
from org_provisioning.shared.logging import bound_context, get_logger
from org_provisioning.shared.models import (
    NewOrganization,
    Organization,
    OrganizationMember,
    Subscription,
    User,
    _new_id,
    _utc_now,
)
from org_provisioning.shared.store import DbSession
from org_provisioning.shared.validation import OrganizationValidation

log = get_logger()

_UNSET: Any = object()


class OrganizationUpdater:
    """Creates organizations with their default groups, template, profiles and gate."""

    def __init__(
        self,
        db: DbClient,
        user_indexer: UserIndexer,
        built_in_profiles: BuiltInQualityProfileRepository,
        settings: Settings | None = None,
        validation: OrganizationValidation | None = None,
        permission_service: PermissionService | None = None,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._db = db
        self._user_indexer = user_indexer
        self._settings = settings or Settings()
        self._validation = validation or OrganizationValidation()
        self._clock = clock
        self._new_id = id_factory
        self._groups = GroupProvisioner(db, permission_service or PermissionService())
        self._templates = TemplateProvisioner(db)
        self._profiles = QualityProfileCloner(db, built_in_profiles)
        self._gates = QualityGateLinker(db)

    def create(
        self,
        session: DbSession,
        user: User,
        new_organization: NewOrganization | None,
        on_created: Callable[[Organization], Any],
    ) -> Organization:
        """Create an organization owned by user, within the caller's session.

        Raises InvalidArgumentError (or the validator's own subclass) for a
        missing or malformed descriptor and KeyConflictError when the key is
        taken. Any failure leaves the rollback to the session.
        """
        if new_organization is None:
            raise InvalidArgumentError("new_organization can't be None")
        self._validate(new_organization)
        if self._db.organizations.exists_by_key(session, new_organization.key):
            raise KeyConflictError(new_organization.key)

        organization_uuid = self._new_id()
        with bound_context(
            organization_uuid=organization_uuid,
            organization_key=new_organization.key,
            user_login=user.login,
        ):
            organization = self._insert_organization(session, organization_uuid, new_organization)

            owners = self._groups.create_owners_group(session, organization, organization.created_at)
            self._groups.add_member(session, owners, user)
            members = self._groups.create_default_group(session, organization, organization.created_at)
            self._groups.add_member(session, members, user)

            self._templates.create_default_template(
                session, organization, owners, members.uuid, organization.created_at
            )

            self._db.organization_members.insert(
                session, OrganizationMember(organization_uuid=organization.uuid, user_uuid=user.uuid)
            )
            self._user_indexer.commit_and_index(session, user)

            self._profiles.clone_built_ins(session, organization)
            self._gates.link_built_in(session, organization)

            on_created(organization)
            log.info(
                "organization_created",
                organization_uuid=organization.uuid,
                key=organization.key,
                visibility=organization.visibility.value,
            )
            return organization

    def _validate(self, new_organization: NewOrganization) -> None:
        self._validation.check_key(new_organization.key)
        self._validation.check_description(new_organization.description)
        self._validation.check_url(new_organization.url)
        self._validation.check_avatar(new_organization.avatar)

    def _insert_organization(
        self, session: DbSession, organization_uuid: str, new_organization: NewOrganization
    ) -> Organization:
        now = self._clock()
        organization = Organization(
            uuid=organization_uuid,
            key=new_organization.key,
            name=new_organization.name,
            description=new_organization.description,
            url=new_organization.url,
            avatar_url=new_organization.avatar,
            subscription=Subscription.FREE,
            new_project_private=not self._settings.default_public_visibility,
            created_at=now,
            updated_at=now,
        )
        return self._db.organizations.insert(session, organization)

    def update_organization_key(self, session: DbSession, organization: Organization, new_key: str) -> Organization:
        """Rename organization to the key derived from new_key.

        A derived key equal to the current one changes nothing. The caller's
        organization only takes the new key once it is stored.
        """
        candidate = self._validation.generate_key_from(new_key)
        if candidate == organization.key:
            return organization
        if self._db.organizations.exists_by_key(session, candidate):
            raise StateConflictError(
                f"Can't create organization with key '{candidate}' "
                "because an organization with this key already exists"
            )
        return self._apply(
            session,
            organization,
            {"key": candidate},
            "organization_key_updated",
            old_key=organization.key,
            new_key=candidate,
        )

    def update(
        self,
        session: DbSession,
        organization: Organization,
        name: str | None = None,
        description: str | None = _UNSET,
        url: str | None = _UNSET,
        avatar: str | None = _UNSET,
    ) -> Organization:
        """Change the descriptive fields that were passed; the key is left alone."""
        changes: dict[str, Any] = {}
        if name is not None:
            changes["name"] = self._validation.check_name(name)
        if description is not _UNSET:
            changes["description"] = self._validation.check_description(description)
        if url is not _UNSET:
            changes["url"] = self._validation.check_url(url)
        if avatar is not _UNSET:
            changes["avatar_url"] = self._validation.check_avatar(avatar)
        if not changes:
            return organization
        return self._apply(session, organization, changes, "organization_updated", fields=sorted(changes))

    def _apply(
        self,
        session: DbSession,
        organization: Organization,
        changes: dict[str, Any],
        event: str,
        **log_fields: Any,
    ) -> Organization:
        updated = replace(organization, updated_at=self._clock(), **changes)
        self._db.organizations.update(session, updated)
        for attr in (*changes, "updated_at"):
            setattr(organization, attr, getattr(updated, attr))
        log.info(event, organization_uuid=organization.uuid, **log_fields)
        return organization

    # --- Reads ---

    def get(self, session: DbSession, uuid: str) -> Organization | None:
        return self._db.organizations.select_by_uuid(session, uuid)

    def get_by_key(self, session: DbSession, key: str) -> Organization | None:
        return self._db.organizations.select_by_key(session, key)

    def list(self, session: DbSession) -> list[Organization]:
        return self._db.organizations.list(session)
