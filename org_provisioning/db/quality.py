"""Rules profiles, organization quality profiles and quality gates."""

from __future__ import annotations

from org_provisioning.db.base import Dao
from org_provisioning.shared.exceptions import UniqueConstraintError
from org_provisioning.shared.models import (
    DefaultQualityProfile,
    Organization,
    OrgQualityGate,
    QualityGate,
    QualityProfile,
    RulesProfile,
)
from org_provisioning.shared.store import DbSession


class RulesProfileDao(Dao[RulesProfile]):
    table_name = "rules_profiles"

    def insert(self, session: DbSession, rules_profile: RulesProfile) -> RulesProfile:
        self._put(session, rules_profile.uuid, rules_profile)
        return rules_profile

    def select_built_in(self, session: DbSession) -> list[RulesProfile]:
        profiles = self._find(session, lambda p: p.built_in)
        return sorted(profiles, key=lambda p: (p.language, p.name))


class QualityProfileDao(Dao[QualityProfile]):
    table_name = "org_qprofiles"

    def insert(self, session: DbSession, profile: QualityProfile) -> QualityProfile:
        self._put(session, profile.uuid, profile)
        return profile

    def select_by_organization_uuid(self, session: DbSession, organization_uuid: str) -> list[QualityProfile]:
        profiles = self._find(session, lambda p: p.organization_uuid == organization_uuid)
        return sorted(profiles, key=lambda p: (p.language, p.name))

    def select_by_uuid(self, session: DbSession, uuid: str) -> QualityProfile | None:
        return self._get(session, uuid)


class DefaultQualityProfileDao(Dao[DefaultQualityProfile]):
    table_name = "default_qprofiles"

    def insert(self, session: DbSession, default: DefaultQualityProfile) -> None:
        key = f"{default.organization_uuid}:{default.language}"
        if self._table(session).exists(key):
            raise UniqueConstraintError(self.table_name, "language", default.language)
        self._put(session, key, default)

    def select(self, session: DbSession, organization_uuid: str, language: str) -> DefaultQualityProfile | None:
        return self._get(session, f"{organization_uuid}:{language}")


class QualityGateDao(Dao[QualityGate]):
    table_name = "quality_gates"

    def insert(self, session: DbSession, gate: QualityGate) -> QualityGate:
        self._put(session, gate.uuid, gate)
        return gate

    def select_by_uuid(self, session: DbSession, uuid: str) -> QualityGate | None:
        return self._get(session, uuid)

    def select_built_in(self, session: DbSession) -> QualityGate | None:
        return self._first(session, lambda g: g.built_in)

    def select_default(self, session: DbSession, organization: Organization) -> QualityGate | None:
        if organization.default_quality_gate_uuid is None:
            return None
        return self.select_by_uuid(session, organization.default_quality_gate_uuid)


class OrgQualityGateDao(Dao[OrgQualityGate]):
    table_name = "org_quality_gates"

    def insert(self, session: DbSession, link: OrgQualityGate) -> None:
        self._put(session, link.uuid, link)

    def select_by_organization_uuid(self, session: DbSession, organization_uuid: str) -> list[OrgQualityGate]:
        return self._find(session, lambda link: link.organization_uuid == organization_uuid)
