import pytest
from click.testing import CliRunner

from eventquiz_backend.cli import utils
from eventquiz_backend.cli.cli import cli
from eventquiz_backend.model.auth import Profile
from eventquiz_backend.model.role import AppRole
from eventquiz_backend.permissions.oracle import RoleOracle


@pytest.fixture
def runner(db, monkeypatch):
    def override_get_db():
        yield db

    monkeypatch.setattr(utils, "get_db", override_get_db)
    return CliRunner()


def test_ddl(runner):
    result = runner.invoke(cli, ["db", "ddl"])

    assert result.exit_code == 0
    assert "CREATE OR REPLACE FUNCTION public.has_role" in result.output
    assert "SET search_path = ''" in result.output
    assert 'CREATE POLICY "quiz_select_active"' in result.output


def test_ddl_drop(runner):
    result = runner.invoke(cli, ["db", "ddl", "--drop"])

    assert result.exit_code == 0
    assert 'DROP POLICY IF EXISTS "quiz_select_active" ON public."quiz";' in result.output


def test_policies(runner):
    result = runner.invoke(cli, ["db", "policies"])

    assert result.exit_code == 0
    assert "leaderboard_entry_select_all" in result.output


def test_create_principal(runner, db):
    result = runner.invoke(cli, ["principals", "create", "-e", "cli@example.com", "-n", "From CLI"])

    assert result.exit_code == 0
    user_id = result.output.strip()
    assert db.query(Profile).filter(Profile.user_id == user_id).one().display_name == "From CLI"


def test_seed_first_admin(runner, db, member_user):
    result = runner.invoke(cli, ["roles", "grant", "-u", member_user.id, "-r", "admin", "--seed"])

    assert result.exit_code == 0
    assert RoleOracle(db).holds_role(member_user.id, AppRole.admin)


def test_grant_without_admin_is_denied(runner, db, member_user, other_user):
    result = runner.invoke(cli, ["roles", "grant", "-u", other_user.id, "-r", "admin", "--as", member_user.id])

    assert result.exit_code == 1
    assert "403" in result.output
    assert not RoleOracle(db).holds_role(other_user.id, AppRole.admin)


def test_grant_and_revoke_as_admin(runner, db, admin_user, member_user):
    result = runner.invoke(cli, ["roles", "grant", "-u", member_user.id, "-r", "user", "--as", admin_user.id])
    assert result.exit_code == 0
    assert RoleOracle(db).holds_role(member_user.id, AppRole.user)

    result = runner.invoke(cli, ["roles", "list", "--as", admin_user.id, "-u", member_user.id])
    assert result.output.strip() == f"{member_user.id} user"

    result = runner.invoke(cli, ["roles", "revoke", "-u", member_user.id, "-r", "user", "--as", admin_user.id])
    assert result.exit_code == 0
    assert not RoleOracle(db).holds_role(member_user.id, AppRole.user)


@pytest.mark.parametrize("metadata,message", [
    ("{bad", "not valid JSON"),
    ("[1]", "must be a JSON object"),
])
def test_create_principal_rejects_invalid_metadata(runner, db, metadata, message):
    result = runner.invoke(cli, ["principals", "create", "-e", "meta@example.com", "-m", metadata])

    assert result.exit_code == 2
    assert message in result.output
    assert db.query(Profile).count() == 0


def test_create_principal_with_metadata(runner, db):
    result = runner.invoke(cli, ["principals", "create", "-e", "meta@example.com", "-m", '{"display_name": "Meta"}'])

    assert result.exit_code == 0
    assert db.query(Profile).filter(Profile.user_id == result.output.strip()).one().display_name == "Meta"
