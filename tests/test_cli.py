"""Tests for ``orgctl`` CLI commands."""

import json

import pytest
from click.testing import CliRunner

from org_provisioning.cli.orgctl import cli


@pytest.fixture
def state(tmp_path):
    return str(tmp_path / "state.json")


@pytest.fixture
def run(state):
    runner = CliRunner()

    def invoke(*args, env=None):
        return runner.invoke(cli, ["--state", state, *args], env=env)

    return invoke


@pytest.fixture
def initialized(run):
    assert run("init", "--language", "java", "--language", "js").exit_code == 0
    assert run("users", "add", "jane", "--name", "Jane Doe").exit_code == 0


# ---------------------------------------------------------------------------
# orgctl init / users
# ---------------------------------------------------------------------------

class TestInit:
    def test_init_reports_languages(self, run):
        result = run("init", "--language", "java")
        assert result.exit_code == 0
        assert "initialized (1 languages)" in result.stdout

    def test_init_is_idempotent(self, run):
        run("init", "--language", "java")
        result = run("init", "--language", "java")
        assert result.exit_code == 0

    def test_users_add_prints_login(self, run):
        result = run("users", "add", "jane")
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["login"] == "jane"
        assert payload["uuid"]

    def test_duplicate_user_fails(self, run):
        run("users", "add", "jane")
        result = run("users", "add", "jane")
        assert result.exit_code == 1
        assert "UniqueConstraintError" in result.output


# ---------------------------------------------------------------------------
# orgctl orgs
# ---------------------------------------------------------------------------

class TestOrgsCreate:
    def test_create_prints_organization(self, run, initialized):
        result = run("orgs", "create", "acme", "Acme Corp", "--login", "jane", "--url", "https://acme.example")
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["key"] == "acme"
        assert payload["name"] == "Acme Corp"
        assert payload["url"] == "https://acme.example"
        assert payload["subscription"] == "FREE"
        assert payload["visibility"] == "public"
        assert payload["default_group_uuid"]
        assert payload["default_quality_gate_uuid"]

    def test_private_by_default_from_env(self, run, initialized):
        result = run(
            "orgs", "create", "acme", "Acme", "--login", "jane",
            env={"ORG_DEFAULT_PUBLIC_VISIBILITY": "false"},
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["visibility"] == "private"

    def test_key_conflict_exits_non_zero(self, run, initialized):
        run("orgs", "create", "acme", "Acme", "--login", "jane")
        result = run("orgs", "create", "acme", "Other", "--login", "jane")
        assert result.exit_code == 1
        assert "KeyConflictError" in result.output
        assert "Organization key 'acme' is already used" in result.output

    def test_invalid_key_exits_non_zero(self, run, initialized):
        result = run("orgs", "create", "Not A Key", "Acme", "--login", "jane")
        assert result.exit_code == 1
        assert "contains at least one invalid char" in result.output

    def test_unknown_login_is_usage_error(self, run, initialized):
        result = run("orgs", "create", "acme", "Acme", "--login", "ghost")
        assert result.exit_code == 2
        assert "unknown user 'ghost'" in result.output

    def test_missing_built_in_gate_leaves_no_state(self, run):
        run("users", "add", "jane")
        result = run("orgs", "create", "acme", "Acme", "--login", "jane")
        assert result.exit_code == 1
        assert "Built-in quality gate is missing" in result.output
        assert run("orgs", "list").stdout == ""


class TestOrgsReadAndRename:
    def test_list(self, run, initialized):
        run("orgs", "create", "acme", "Acme", "--login", "jane")
        run("orgs", "create", "zeta", "Zeta", "--login", "jane")
        lines = run("orgs", "list").stdout.splitlines()
        assert lines == ["acme\tAcme\tpublic", "zeta\tZeta\tpublic"]

    def test_show(self, run, initialized):
        run("orgs", "create", "acme", "Acme", "--login", "jane", "--description", "d")
        result = run("orgs", "show", "acme")
        assert result.exit_code == 0
        assert json.loads(result.stdout)["description"] == "d"

    def test_show_unknown(self, run):
        result = run("orgs", "show", "nope")
        assert result.exit_code == 1

    def test_rename_slugifies(self, run, initialized):
        run("orgs", "create", "acme", "Acme", "--login", "jane")
        result = run("orgs", "rename", "acme", "Acme Renamed")
        assert result.exit_code == 0
        assert result.stdout.strip() == "acme-renamed"
        assert run("orgs", "show", "acme").exit_code == 1
        assert run("orgs", "show", "acme-renamed").exit_code == 0

    def test_rename_to_used_key_fails(self, run, initialized):
        run("orgs", "create", "acme", "Acme", "--login", "jane")
        run("orgs", "create", "zeta", "Zeta", "--login", "jane")
        result = run("orgs", "rename", "acme", "zeta")
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert run("orgs", "show", "acme").exit_code == 0

    def test_rename_unknown_is_usage_error(self, run):
        result = run("orgs", "rename", "nope", "other")
        assert result.exit_code == 2
