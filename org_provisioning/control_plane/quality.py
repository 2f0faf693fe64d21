"""Built-in quality profiles and the built-in quality gate, brought into new organizations."""

from __future__ import annotations

from dataclasses import dataclass

from org_provisioning.db.client import DbClient
from org_provisioning.shared.exceptions import StateConflictError
from org_provisioning.shared.logging import get_logger
from org_provisioning.shared.models import (
    DefaultQualityProfile,
    Organization,
    OrgQualityGate,
    QualityGate,
    QualityProfile,
    RulesProfile,
)
from org_provisioning.shared.store import DbSession

log = get_logger()

SONAR_WAY = "Sonar way"


@dataclass(frozen=True)
class BuiltInQualityProfile:
    language: str
    name: str
    is_default: bool = False

    @property
    def qualified_name(self) -> tuple[str, str]:
        return (self.language, self.name)


class BuiltInQualityProfileRepository:
    """Registry of the built-in profiles shipped for each language.

    Profiles are declared with add() and become readable after initialize(),
    which settles the single default profile of every language.
    """

    def __init__(self) -> None:
        self._declared: list[BuiltInQualityProfile] = []
        self._profiles: list[BuiltInQualityProfile] | None = None

    def add(self, language: str, name: str, is_default: bool = False) -> BuiltInQualityProfile:
        if self._profiles is not None:
            raise StateConflictError("initialize() has already been called")
        profile = BuiltInQualityProfile(language=language, name=name, is_default=is_default)
        self._declared.append(profile)
        return profile

    def initialize(self) -> list[BuiltInQualityProfile]:
        if self._profiles is not None:
            raise StateConflictError("initialize() can only be called once")
        by_language: dict[str, list[BuiltInQualityProfile]] = {}
        for profile in self._declared:
            by_language.setdefault(profile.language, []).append(profile)

        resolved: list[BuiltInQualityProfile] = []
        for language, profiles in by_language.items():
            default_name = self._default_name(language, profiles)
            resolved.extend(
                BuiltInQualityProfile(p.language, p.name, is_default=p.name == default_name)
                for p in profiles
            )
        self._profiles = resolved
        log.info("built_in_profiles_initialized", profiles=len(resolved), languages=len(by_language))
        return list(resolved)

    @staticmethod
    def _default_name(language: str, profiles: list[BuiltInQualityProfile]) -> str:
        flagged = [p for p in profiles if p.is_default]
        if len(flagged) > 1:
            names = ", ".join(p.name for p in flagged)
            raise StateConflictError(
                f"Several Quality profiles are flagged as default for the language {language}: {names}"
            )
        if flagged:
            return flagged[0].name
        for p in profiles:
            if p.name == SONAR_WAY:
                return p.name
        return profiles[0].name

    def get(self) -> list[BuiltInQualityProfile]:
        if self._profiles is None:
            raise StateConflictError("initialize() must be called first")
        return list(self._profiles)

    @classmethod
    def from_rules_profiles(cls, rules_profiles: list[RulesProfile]) -> BuiltInQualityProfileRepository:
        """Registry of the built-in rules profiles found in the database."""
        repository = cls()
        for rules_profile in rules_profiles:
            if rules_profile.built_in:
                repository.add(rules_profile.language, rules_profile.name)
        repository.initialize()
        return repository


class QualityProfileCloner:
    """Gives an organization its own profile for every built-in profile."""

    def __init__(self, db: DbClient, repository: BuiltInQualityProfileRepository) -> None:
        self._db = db
        self._repository = repository

    def clone_built_ins(self, session: DbSession, organization: Organization) -> list[QualityProfile]:
        rules_profiles = {
            (p.language, p.name): p for p in self._db.rules_profiles.select_built_in(session)
        }
        cloned = []
        for built_in in self._repository.get():
            rules_profile = rules_profiles.get(built_in.qualified_name)
            if rules_profile is None:
                raise StateConflictError(
                    f"Built-in profile not found in database: {built_in.language}/{built_in.name}"
                )
            profile = QualityProfile(
                organization_uuid=organization.uuid,
                rules_profile_uuid=rules_profile.uuid,
                language=built_in.language,
                name=built_in.name,
            )
            self._db.quality_profiles.insert(session, profile)
            if built_in.is_default:
                self._db.default_quality_profiles.insert(
                    session,
                    DefaultQualityProfile(
                        organization_uuid=organization.uuid,
                        language=built_in.language,
                        quality_profile_uuid=profile.uuid,
                    ),
                )
            cloned.append(profile)
        log.info("quality_profiles_cloned", organization_uuid=organization.uuid, count=len(cloned))
        return cloned


class QualityGateLinker:
    """Makes the built-in quality gate the default gate of an organization."""

    def __init__(self, db: DbClient) -> None:
        self._db = db

    def link_built_in(self, session: DbSession, organization: Organization) -> QualityGate:
        gate = self._db.quality_gates.select_built_in(session)
        if gate is None:
            raise StateConflictError("Built-in quality gate is missing")
        self._db.org_quality_gates.insert(
            session,
            OrgQualityGate(organization_uuid=organization.uuid, quality_gate_uuid=gate.uuid),
        )
        self._db.organizations.set_default_quality_gate(session, organization.uuid, gate.uuid)
        organization.default_quality_gate_uuid = gate.uuid
        log.info("quality_gate_linked", organization_uuid=organization.uuid, quality_gate_uuid=gate.uuid)
        return gate
