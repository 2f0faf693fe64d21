"""orgctl: CLI for creating and renaming organizations."""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn

import click

from org_provisioning.control_plane.organizations import OrganizationUpdater
from org_provisioning.control_plane.quality import SONAR_WAY, BuiltInQualityProfileRepository
from org_provisioning.db.client import DbClient
from org_provisioning.index.users import UserIndex, UserIndexer
from org_provisioning.shared.config import Settings
from org_provisioning.shared.exceptions import OrgProvisioningError
from org_provisioning.shared.logging import configure_logging
from org_provisioning.shared.models import NewOrganization, Organization, QualityGate, RulesProfile, User
from org_provisioning.shared.serialization import to_dict


def _fail(e: Exception) -> NoReturn:
    """Print a user-friendly error and exit non-zero."""
    click.echo(f"Error [{type(e).__name__}]: {e}", err=True)
    raise SystemExit(1)


def _org_json(organization: Organization) -> str:
    payload: dict[str, Any] = to_dict(organization)
    payload["visibility"] = organization.visibility.value
    return json.dumps(payload, indent=2)


def _db(ctx: click.Context) -> DbClient:
    return DbClient.load(ctx.obj["state"])


def _updater(ctx: click.Context, db: DbClient) -> OrganizationUpdater:
    with db.session() as session:
        rules_profiles = db.rules_profiles.select_built_in(session)
    return OrganizationUpdater(
        db,
        UserIndexer(db, UserIndex()),
        BuiltInQualityProfileRepository.from_rules_profiles(rules_profiles),
        settings=ctx.obj["settings"],
    )


@click.group()
@click.option("--state", envvar="ORGCTL_STATE", default=None, help="State file (JSON)")
@click.option("--log-level", envvar="LOG_LEVEL", default="WARNING", help="Log level")
@click.pass_context
def cli(ctx: click.Context, state: str | None, log_level: str) -> None:
    """orgctl: manage users and organizations."""
    # one command per process: nothing to gain from caching bound loggers
    configure_logging(log_level, stream=sys.stderr, cache_loggers=False)
    settings = Settings.from_env()
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["state"] = state or settings.state_file


@cli.command("init")
@click.option("--language", "languages", multiple=True, help="Language with a built-in profile")
@click.pass_context
def init(ctx: click.Context, languages: tuple[str, ...]) -> None:
    """Create the built-in quality gate and built-in profiles."""
    db = _db(ctx)
    with db.session() as session:
        if db.quality_gates.select_built_in(session) is None:
            db.quality_gates.insert(session, QualityGate(name=SONAR_WAY, built_in=True))
        existing = {(p.language, p.name) for p in db.rules_profiles.select_built_in(session)}
        for language in languages:
            if (language, SONAR_WAY) not in existing:
                db.rules_profiles.insert(
                    session, RulesProfile(language=language, name=SONAR_WAY, built_in=True)
                )
    db.save(ctx.obj["state"])
    click.echo(f"initialized ({len(languages)} languages)")


# --- Users ---

@cli.group()
def users() -> None:
    """Manage users."""
    pass


@users.command("add")
@click.argument("login")
@click.option("--name", default="", help="Display name")
@click.option("--email", default=None, help="Email address")
@click.pass_context
def users_add(ctx: click.Context, login: str, name: str, email: str | None) -> None:
    """Add a user."""
    db = _db(ctx)
    try:
        with db.session() as session:
            user = db.users.insert(session, User(login=login, name=name or login, email=email))
    except OrgProvisioningError as e:
        _fail(e)
    db.save(ctx.obj["state"])
    click.echo(json.dumps({"uuid": user.uuid, "login": user.login}, indent=2))


# --- Organizations ---

@cli.group()
def orgs() -> None:
    """Manage organizations."""
    pass


@orgs.command("create")
@click.argument("key")
@click.argument("name")
@click.option("--login", required=True, help="Login of the creating user")
@click.option("--description", default=None)
@click.option("--url", default=None)
@click.option("--avatar", default=None)
@click.pass_context
def orgs_create(
    ctx: click.Context,
    key: str,
    name: str,
    login: str,
    description: str | None,
    url: str | None,
    avatar: str | None,
) -> None:
    """Create an organization owned by LOGIN."""
    db = _db(ctx)
    new_organization = NewOrganization(
        name=name, key=key, description=description, url=url, avatar=avatar
    )
    try:
        updater = _updater(ctx, db)
        with db.session() as session:
            user = db.users.select_by_login(session, login)
            if user is None:
                raise click.UsageError(f"unknown user '{login}'")
            organization = updater.create(session, user, new_organization, lambda o: None)
    except OrgProvisioningError as e:
        _fail(e)
    db.save(ctx.obj["state"])
    click.echo(_org_json(organization))


@orgs.command("rename")
@click.argument("key")
@click.argument("new_key")
@click.pass_context
def orgs_rename(ctx: click.Context, key: str, new_key: str) -> None:
    """Change the key of an organization."""
    db = _db(ctx)
    try:
        updater = _updater(ctx, db)
        with db.session() as session:
            organization = updater.get_by_key(session, key)
            if organization is None:
                raise click.UsageError(f"unknown organization '{key}'")
            organization = updater.update_organization_key(session, organization, new_key)
    except OrgProvisioningError as e:
        _fail(e)
    db.save(ctx.obj["state"])
    click.echo(organization.key)


@orgs.command("list")
@click.pass_context
def orgs_list(ctx: click.Context) -> None:
    """List all organizations."""
    db = _db(ctx)
    with db.session() as session:
        for organization in db.organizations.list(session):
            click.echo(f"{organization.key}\t{organization.name}\t{organization.visibility.value}")


@orgs.command("show")
@click.argument("key")
@click.pass_context
def orgs_show(ctx: click.Context, key: str) -> None:
    """Show one organization as JSON."""
    db = _db(ctx)
    with db.session() as session:
        organization = db.organizations.select_by_key(session, key)
    if organization is None:
        click.echo(f"organization '{key}' not found", err=True)
        raise SystemExit(1)
    click.echo(_org_json(organization))


if __name__ == "__main__":
    cli()
