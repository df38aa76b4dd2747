"""
Policy evaluator: permissive union per table and action.
"""

import pytest

from eventquiz_backend.api.exceptions import AuthorizationDenied
from eventquiz_backend.model.auth import Profile, User
from eventquiz_backend.model.quiz import LeaderboardEntry, Question, Quiz
from eventquiz_backend.model.role import AppRole, UserRole
from eventquiz_backend.permissions.core import authorize, check_permissions, permission_registry
from eventquiz_backend.permissions.handlers import Action, PermissionHandler, Policy, normalize_action
from eventquiz_backend.permissions.handlers_impl import (
    LeaderboardEntryPermissionHandler,
    ProfilePermissionHandler,
    QuestionPermissionHandler,
    QuizPermissionHandler,
    UserRolePermissionHandler,
)
from eventquiz_backend.permissions.principal import ANONYMOUS
from eventquiz_backend.permissions.rules import AlwaysRule, ColumnIsTrueRule, OwnRowRule
from eventquiz_backend.tests.fixtures import make_quiz, principal_of


class TestPolicy:

    def test_command_for_single_action(self):
        assert Policy("p", [Action.read], AlwaysRule()).command == "SELECT"
        assert Policy("p", ["insert"], AlwaysRule()).command == "INSERT"

    def test_command_for_all_actions(self):
        assert Policy("p", list(Action), AlwaysRule()).command == "ALL"

    def test_command_for_partial_set(self):
        with pytest.raises(ValueError):
            Policy("p", [Action.update, Action.delete], AlwaysRule()).command

    @pytest.mark.parametrize("alias,action", [
        ("get", Action.read),
        ("list", Action.read),
        ("select", Action.read),
        ("insert", Action.create),
        ("update", Action.update),
        (Action.delete, Action.delete),
    ])
    def test_action_aliases(self, alias, action):
        assert normalize_action(alias) == action


class TestPermissiveUnion:

    class QuizOwnerOrActive(PermissionHandler):
        policies = [
            Policy("active", [Action.read], ColumnIsTrueRule("is_active")),
            Policy("owner", [Action.read], OwnRowRule("created_by")),
        ]

    def test_any_matching_rule_permits(self, db, member_user, other_user):
        handler = self.QuizOwnerOrActive(Quiz)
        draft = make_quiz(db, member_user, title="draft", is_active=False)
        live = make_quiz(db, other_user, title="live")

        visible = {q.title for q in handler.build_query(principal_of(member_user), Action.read, db)}
        assert visible == {"draft", "live"}

        assert handler.can_perform_action(principal_of(member_user), Action.read, draft, db)
        assert handler.can_perform_action(principal_of(other_user), Action.read, live, db)
        assert not handler.can_perform_action(principal_of(other_user), Action.read, draft, db)

    def test_action_without_policy_is_denied(self, db, member_user):
        handler = self.QuizOwnerOrActive(Quiz)
        quiz = make_quiz(db, member_user)

        assert handler.policies_for(Action.update) == []
        assert handler.build_query(principal_of(member_user), Action.update, db).all() == []
        with pytest.raises(AuthorizationDenied) as exc_info:
            handler.authorize(principal_of(member_user), Action.update, quiz, db)
        assert exc_info.value.detail == {"entity": "quiz", "action": "update", "reason": "not permitted"}


class TestRegistry:

    def test_all_tables_registered(self):
        assert isinstance(permission_registry.get_handler(Profile), ProfilePermissionHandler)
        assert isinstance(permission_registry.get_handler(UserRole), UserRolePermissionHandler)
        assert isinstance(permission_registry.get_handler(Quiz), QuizPermissionHandler)
        assert isinstance(permission_registry.get_handler(Question), QuestionPermissionHandler)
        assert isinstance(permission_registry.get_handler(LeaderboardEntry), LeaderboardEntryPermissionHandler)

    def test_table_without_handler_is_closed(self, db, admin_user, member_user):
        assert permission_registry.get_handler(User) is None
        assert check_permissions(principal_of(admin_user), User, Action.read, db).all() == []

        with pytest.raises(AuthorizationDenied):
            authorize(principal_of(admin_user), User, Action.update, member_user, db)


class TestQuizPolicies:

    def test_active_quiz_is_public(self, db, admin_user):
        make_quiz(db, admin_user, title="live")
        make_quiz(db, admin_user, title="draft", is_active=False)

        anonymous = {q.title for q in check_permissions(ANONYMOUS, Quiz, Action.read, db)}
        admin = {q.title for q in check_permissions(principal_of(admin_user), Quiz, Action.read, db)}

        assert anonymous == {"live"}
        assert admin == {"live", "draft"}

    def test_only_admin_writes(self, db, admin_user, member_user):
        candidate = Quiz(title="new", created_by=member_user.id, is_active=True)

        authorize(principal_of(admin_user), Quiz, Action.create, candidate, db)
        for principal in (principal_of(member_user), ANONYMOUS):
            for action in (Action.create, Action.update, Action.delete):
                with pytest.raises(AuthorizationDenied):
                    authorize(principal, Quiz, action, candidate, db)


class TestQuestionPolicies:

    def test_follow_quiz_active_flag(self, db, admin_user, member_user):
        quiz = make_quiz(db, admin_user, questions=2)

        assert check_permissions(principal_of(member_user), Question, Action.read, db).count() == 2

        quiz.is_active = False
        db.commit()

        assert check_permissions(principal_of(member_user), Question, Action.read, db).count() == 0
        assert check_permissions(ANONYMOUS, Question, Action.read, db).count() == 0
        assert check_permissions(principal_of(admin_user), Question, Action.read, db).count() == 2

    def test_single_row_check_reads_parent(self, db, admin_user, member_user):
        live = make_quiz(db, admin_user, questions=1)
        draft = make_quiz(db, admin_user, is_active=False, questions=1)
        handler = permission_registry.get_handler(Question)

        assert handler.can_perform_action(principal_of(member_user), Action.read, live.questions[0], db)
        assert not handler.can_perform_action(principal_of(member_user), Action.read, draft.questions[0], db)
        assert not handler.can_perform_action(principal_of(member_user), Action.read, Question(quiz_id=None), db)


class TestProfilePolicies:

    def test_own_profile_only(self, db, member_user, other_user):
        visible = check_permissions(principal_of(member_user), Profile, Action.read, db).all()

        assert [p.user_id for p in visible] == [member_user.id]
        assert check_permissions(ANONYMOUS, Profile, Action.read, db).all() == []

    def test_insert_only_for_self(self, db, member_user, other_user):
        authorize(principal_of(member_user), Profile, Action.create, Profile(user_id=member_user.id), db)

        with pytest.raises(AuthorizationDenied):
            authorize(principal_of(member_user), Profile, Action.create, Profile(user_id=other_user.id), db)

    def test_admin_has_no_access_to_other_profiles(self, db, admin_user, member_user):
        visible = check_permissions(principal_of(admin_user), Profile, Action.read, db).all()

        assert [p.user_id for p in visible] == [admin_user.id]


class TestLeaderboardPolicies:

    def test_readable_by_everyone(self, db, admin_user, member_user):
        make_quiz(db, admin_user, entries=2)
        make_quiz(db, admin_user, is_active=False, entries=1)

        for principal in (ANONYMOUS, principal_of(member_user), principal_of(admin_user)):
            assert check_permissions(principal, LeaderboardEntry, Action.read, db).count() == 3

    def test_only_admin_writes(self, db, admin_user, member_user):
        quiz = make_quiz(db, admin_user)
        entry = LeaderboardEntry(quiz_id=quiz.id, participant_name="Team", score=1)

        authorize(principal_of(admin_user), LeaderboardEntry, Action.create, entry, db)
        with pytest.raises(AuthorizationDenied):
            authorize(principal_of(member_user), LeaderboardEntry, Action.create, entry, db)
