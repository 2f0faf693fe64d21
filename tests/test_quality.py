"""Tests for the built-in profile registry, profile cloning and gate linking."""

import pytest

from conftest import insert_rules_profile
from org_provisioning.control_plane.quality import (
    BuiltInQualityProfileRepository,
    QualityGateLinker,
    QualityProfileCloner,
)
from org_provisioning.shared.exceptions import StateConflictError
from org_provisioning.shared.models import Organization, QualityGate, RulesProfile


def _defaults(profiles):
    return {(p.language, p.name) for p in profiles if p.is_default}


class TestBuiltInRepository:
    def test_get_before_initialize_fails(self):
        with pytest.raises(StateConflictError, match="initialize"):
            BuiltInQualityProfileRepository().get()

    def test_empty_registry(self):
        repo = BuiltInQualityProfileRepository()
        repo.initialize()
        assert repo.get() == []

    def test_flagged_profile_is_default(self):
        repo = BuiltInQualityProfileRepository()
        repo.add("foo", "qp1", is_default=True)
        repo.add("foo", "qp2")
        repo.initialize()
        assert _defaults(repo.get()) == {("foo", "qp1")}

    def test_sonar_way_default_when_none_flagged(self):
        repo = BuiltInQualityProfileRepository()
        repo.add("java", "Strict")
        repo.add("java", "Sonar way")
        repo.initialize()
        assert _defaults(repo.get()) == {("java", "Sonar way")}

    def test_first_profile_default_otherwise(self):
        repo = BuiltInQualityProfileRepository()
        repo.add("py", "first")
        repo.add("py", "second")
        repo.initialize()
        assert _defaults(repo.get()) == {("py", "first")}

    def test_one_default_per_language(self):
        repo = BuiltInQualityProfileRepository()
        repo.add("java", "Sonar way")
        repo.add("py", "Sonar way")
        repo.add("py", "Custom")
        repo.initialize()
        assert _defaults(repo.get()) == {("java", "Sonar way"), ("py", "Sonar way")}

    def test_several_flagged_defaults_rejected(self):
        repo = BuiltInQualityProfileRepository()
        repo.add("foo", "a", is_default=True)
        repo.add("foo", "b", is_default=True)
        with pytest.raises(StateConflictError, match="Several Quality profiles"):
            repo.initialize()

    def test_add_after_initialize_rejected(self):
        repo = BuiltInQualityProfileRepository()
        repo.initialize()
        with pytest.raises(StateConflictError):
            repo.add("foo", "late")

    def test_from_rules_profiles_skips_custom(self):
        repo = BuiltInQualityProfileRepository.from_rules_profiles([
            RulesProfile(language="java", name="Sonar way", built_in=True),
            RulesProfile(language="java", name="custom", built_in=False),
        ])
        assert [(p.language, p.name, p.is_default) for p in repo.get()] == [("java", "Sonar way", True)]


class TestQualityProfileCloner:
    def test_missing_rules_profile_fails(self, db, session):
        org = db.organizations.insert(session, Organization(key="k", name="n"))
        repo = BuiltInQualityProfileRepository()
        repo.add("foo", "qp1")
        repo.initialize()

        with pytest.raises(StateConflictError, match="Built-in profile not found in database"):
            QualityProfileCloner(db, repo).clone_built_ins(session, org)

    def test_profiles_point_at_rules_profiles(self, db, session):
        org = db.organizations.insert(session, Organization(key="k", name="n"))
        rules_profile = insert_rules_profile(db, session, "foo", "qp1")
        repo = BuiltInQualityProfileRepository()
        repo.add("foo", "qp1")
        repo.initialize()

        cloned = QualityProfileCloner(db, repo).clone_built_ins(session, org)

        assert len(cloned) == 1
        assert cloned[0].rules_profile_uuid == rules_profile.uuid
        assert cloned[0].organization_uuid == org.uuid
        assert cloned[0].parent_uuid is None
        assert db.default_quality_profiles.select(session, org.uuid, "foo").quality_profile_uuid == cloned[0].uuid

    def test_each_organization_gets_own_profiles(self, db, session):
        insert_rules_profile(db, session, "foo", "qp1")
        repo = BuiltInQualityProfileRepository()
        repo.add("foo", "qp1")
        repo.initialize()
        cloner = QualityProfileCloner(db, repo)
        org_a = db.organizations.insert(session, Organization(key="a", name="A"))
        org_b = db.organizations.insert(session, Organization(key="b", name="B"))

        cloner.clone_built_ins(session, org_a)
        cloner.clone_built_ins(session, org_b)

        profiles_a = db.quality_profiles.select_by_organization_uuid(session, org_a.uuid)
        profiles_b = db.quality_profiles.select_by_organization_uuid(session, org_b.uuid)
        assert len(profiles_a) == len(profiles_b) == 1
        assert profiles_a[0].uuid != profiles_b[0].uuid


class TestQualityGateLinker:
    def test_missing_built_in_gate_fails(self, db, session):
        org = db.organizations.insert(session, Organization(key="k", name="n"))
        db.quality_gates.insert(session, QualityGate(name="custom", built_in=False))

        with pytest.raises(StateConflictError, match="Built-in quality gate is missing"):
            QualityGateLinker(db).link_built_in(session, org)

    def test_links_by_reference(self, db, session, built_in_gate):
        org = db.organizations.insert(session, Organization(key="k", name="n"))

        QualityGateLinker(db).link_built_in(session, org)

        links = db.org_quality_gates.select_by_organization_uuid(session, org.uuid)
        assert [link.quality_gate_uuid for link in links] == [built_in_gate.uuid]
        reloaded = db.organizations.select_by_uuid(session, org.uuid)
        assert reloaded.default_quality_gate_uuid == built_in_gate.uuid
        assert db.quality_gates.select_default(session, reloaded) == built_in_gate
