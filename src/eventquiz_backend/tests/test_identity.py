"""
Principal provisioning and removal.
"""

import pytest
from types import SimpleNamespace
from sqlalchemy.exc import IntegrityError

from eventquiz_backend.api.exceptions import IntegrityViolation, NotFoundException, ProvisioningFailure, violated_table
from eventquiz_backend.model.auth import Profile, User
from eventquiz_backend.model.quiz import LeaderboardEntry, Question, Quiz
from eventquiz_backend.model.role import AppRole, UserRole
from eventquiz_backend.services import identity as identity_module
from eventquiz_backend.services.identity import profile_display_name
from eventquiz_backend.services.roles import RoleService
from eventquiz_backend.tests.fixtures import make_quiz


class TestProvisioning:

    def test_creates_exactly_one_profile(self, db, identity):
        user = identity.create_principal("ada@example.com", {"display_name": "Ada"})

        profiles = db.query(Profile).filter(Profile.user_id == user.id).all()
        assert len(profiles) == 1
        assert profiles[0].display_name == "Ada"
        assert profiles[0].email == "ada@example.com"

    def test_display_name_falls_back_to_email(self, db, identity):
        user = identity.create_principal("grace@example.com")

        profile = db.query(Profile).filter(Profile.user_id == user.id).one()
        assert profile.display_name == "grace@example.com"

    def test_provider_assigned_id_is_kept(self, db, identity):
        user = identity.create_principal("linus@example.com", user_id="provider-id-1")

        assert user.id == "provider-id-1"
        assert db.query(Profile).filter(Profile.user_id == "provider-id-1").count() == 1

    def test_profile_failure_aborts_principal_creation(self, db, identity, member_user, monkeypatch):
        taken = db.query(Profile).filter(Profile.user_id == member_user.id).one().id
        # next profile id collides with an existing one
        monkeypatch.setattr(identity_module, "new_uuid", lambda: taken)

        with pytest.raises(ProvisioningFailure):
            identity.create_principal("late@example.com", user_id="late-user")

        assert db.get(User, "late-user") is None
        assert db.query(Profile).count() == 1

    def test_duplicate_email_is_an_integrity_violation(self, db, identity, member_user):
        with pytest.raises(IntegrityViolation):
            identity.create_principal(member_user.email)

        assert db.query(User).count() == 1
        assert db.query(Profile).count() == 1

    @pytest.mark.parametrize("table,expected", [
        ("user", IntegrityViolation),
        ("profile", ProvisioningFailure),
    ])
    def test_failure_is_classified_by_violated_table(self, db, identity, monkeypatch, table, expected):
        # the email mentions the profile table name, only the reported table counts
        orig = PostgresError(
            'duplicate key value violates unique constraint "user_email_key"\n'
            'DETAIL:  Key (email)=(profile@x.com) already exists.',
            table,
        )

        def failing_flush(*args, **kwargs):
            raise IntegrityError("INSERT", {}, orig)

        monkeypatch.setattr(db, "flush", failing_flush)

        with pytest.raises(expected):
            identity.create_principal("profile@x.com")


class PostgresError(Exception):
    def __init__(self, message, table_name):
        super().__init__(message)
        self.diag = SimpleNamespace(table_name=table_name)


@pytest.mark.parametrize("orig,expected", [
    (PostgresError("duplicate key", "profile"), "profile"),
    (Exception("UNIQUE constraint failed: profile.id"), "profile"),
    (Exception("UNIQUE constraint failed: user.email"), "user"),
    (Exception("FOREIGN KEY constraint failed"), None),
])
def test_violated_table(orig, expected):
    assert violated_table(IntegrityError("INSERT", {}, orig)) == expected


@pytest.mark.parametrize("metadata,email,expected", [
    ({"display_name": "Ada"}, "ada@example.com", "Ada"),
    ({}, "ada@example.com", "ada@example.com"),
    (None, "ada@example.com", "ada@example.com"),
    ({"display_name": None}, "ada@example.com", "ada@example.com"),
    ({"display_name": ""}, "ada@example.com", ""),
    (None, None, None),
])
def test_profile_display_name(metadata, email, expected):
    assert profile_display_name(metadata, email) == expected


class TestPrincipalDeletion:

    def test_cascades_to_profile_grants_and_quizzes(self, db, identity, admin_user, member_user):
        RoleService(db).seed_role(member_user.id, AppRole.user)
        quiz = make_quiz(db, member_user, questions=2, entries=2)
        quiz_id = quiz.id
        member_id = member_user.id

        identity.delete_principal(member_id)
        db.expire_all()

        assert db.query(User).filter(User.id == member_id).count() == 0
        assert db.query(Profile).filter(Profile.user_id == member_id).count() == 0
        assert db.query(UserRole).filter(UserRole.user_id == member_id).count() == 0
        assert db.query(Quiz).filter(Quiz.id == quiz_id).count() == 0
        assert db.query(Question).filter(Question.quiz_id == quiz_id).count() == 0
        assert db.query(LeaderboardEntry).filter(LeaderboardEntry.quiz_id == quiz_id).count() == 0

        # other principals are untouched
        assert db.query(Profile).filter(Profile.user_id == admin_user.id).count() == 1
        assert db.query(UserRole).filter(UserRole.user_id == admin_user.id).count() == 1

    def test_unknown_principal(self, identity):
        with pytest.raises(NotFoundException):
            identity.delete_principal("missing")
