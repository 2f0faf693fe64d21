"""Shared fixtures for all tests."""

from datetime import datetime, timezone

import pytest
import structlog

from org_provisioning.control_plane.organizations import OrganizationUpdater
from org_provisioning.control_plane.quality import BuiltInQualityProfileRepository
from org_provisioning.db.client import DbClient
from org_provisioning.index.users import UserIndex, UserIndexer
from org_provisioning.shared.config import Settings
from org_provisioning.shared.models import NewOrganization, QualityGate, RulesProfile, User
from org_provisioning.shared.validation import OrganizationValidation

A_DATE = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


@pytest.fixture
def db():
    return DbClient()


@pytest.fixture
def session(db):
    with db.session() as s:
        yield s


@pytest.fixture
def user_index():
    return UserIndex()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def built_in_profiles():
    return BuiltInQualityProfileRepository()


@pytest.fixture
def validation():
    return OrganizationValidation()


@pytest.fixture
def updater(db, user_index, built_in_profiles, settings, validation):
    return OrganizationUpdater(
        db,
        UserIndexer(db, user_index),
        built_in_profiles,
        settings=settings,
        validation=validation,
        clock=lambda: A_DATE,
    )


@pytest.fixture
def full_new_org():
    return (
        NewOrganization.builder()
        .set_name("a-name")
        .set_key("a-key")
        .set_description("a-description")
        .set_url("a-url")
        .set_avatar("a-avatar")
        .build()
    )


@pytest.fixture
def user(db, session):
    return db.users.insert(session, User(login="jane", name="Jane Doe", email="jane@example.com"))


@pytest.fixture
def built_in_gate(db, session):
    return db.quality_gates.insert(session, QualityGate(name="Sonar way", built_in=True))


@pytest.fixture
def ready(built_in_profiles, built_in_gate):
    """Registry initialized and built-in gate present: what create() needs."""
    built_in_profiles.initialize()
    return built_in_gate


def insert_rules_profile(db, session, language, name):
    return db.rules_profiles.insert(session, RulesProfile(language=language, name=name, built_in=True))


def noop(organization):
    pass
