"""
Role oracle: transaction visible, uncached and independent of the policy set.
"""

import pytest

from eventquiz_backend.model.role import AppRole, UserRole
from eventquiz_backend.permissions import core
from eventquiz_backend.permissions.core import check_admin
from eventquiz_backend.permissions.oracle import RoleOracle
from eventquiz_backend.permissions.principal import ANONYMOUS
from eventquiz_backend.services.roles import RoleService
from eventquiz_backend.tests.fixtures import principal_of


def test_anonymous_holds_no_role(db):
    oracle = RoleOracle(db)
    assert oracle.holds_role(None, AppRole.admin) is False
    assert oracle.roles_of(None) == []
    assert check_admin(ANONYMOUS, db) is False


def test_grant_is_seen(db, member_user):
    oracle = RoleOracle(db)
    assert oracle.holds_role(member_user.id, AppRole.admin) is False

    RoleService(db).seed_role(member_user.id, AppRole.admin)

    assert oracle.holds_role(member_user.id, AppRole.admin) is True
    assert oracle.holds_role(member_user.id, "admin") is True
    assert oracle.holds_role(member_user.id, AppRole.user) is False
    assert check_admin(principal_of(member_user), db) is True


def test_roles_of(db, member_user):
    service = RoleService(db)
    service.seed_role(member_user.id, AppRole.user)
    service.seed_role(member_user.id, AppRole.admin)

    assert set(RoleOracle(db).roles_of(member_user.id)) == {AppRole.admin, AppRole.user}


def test_revocation_is_seen_within_the_transaction(db, admin_user):
    oracle = RoleOracle(db)
    assert oracle.holds_role(admin_user.id, AppRole.admin) is True

    db.query(UserRole).filter(UserRole.user_id == admin_user.id).delete()
    assert oracle.holds_role(admin_user.id, AppRole.admin) is False

    db.rollback()
    assert oracle.holds_role(admin_user.id, AppRole.admin) is True


def test_does_not_consult_the_policy_set(db, admin_user, monkeypatch):
    def refuse(*args, **kwargs):
        raise AssertionError("role lookup went through the permission registry")

    monkeypatch.setattr(core.permission_registry, "check_permissions", refuse)
    monkeypatch.setattr(core.permission_registry, "authorize", refuse)

    assert RoleOracle(db).holds_role(admin_user.id, AppRole.admin) is True


def test_unknown_role_is_rejected(db, member_user):
    with pytest.raises(ValueError):
        RoleOracle(db).holds_role(member_user.id, "superuser")
