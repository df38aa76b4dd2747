from eventquiz_backend.model.quiz import Quiz
from eventquiz_backend.model.role import AppRole
from eventquiz_backend.permissions.handlers import Action, PermissionHandler, Policy
from eventquiz_backend.permissions.rules import (
    AlwaysRule,
    ColumnIsTrueRule,
    HoldsRoleRule,
    OwnRowRule,
    ParentFlagRule,
)

ALL_ACTIONS = list(Action)

is_admin = HoldsRoleRule(AppRole.admin)


class ProfilePermissionHandler(PermissionHandler):
    """Principals see and edit their own profile only.

    Profiles are provisioned when a principal is created. The create policy
    only admits rows for the caller itself.
    """

    policies = [
        Policy("profile_select_own", [Action.read], OwnRowRule("user_id")),
        Policy("profile_update_own", [Action.update], OwnRowRule("user_id")),
        Policy("profile_insert_own", [Action.create], OwnRowRule("user_id")),
    ]


class UserRolePermissionHandler(PermissionHandler):

    policies = [
        Policy("user_role_select_admin", [Action.read], is_admin),
        Policy("user_role_manage_admin", ALL_ACTIONS, is_admin),
    ]


class QuizPermissionHandler(PermissionHandler):
    """Active quizzes are public, drafts are visible to admins only."""

    policies = [
        Policy("quiz_select_active", [Action.read], ColumnIsTrueRule("is_active")),
        Policy("quiz_manage_admin", ALL_ACTIONS, is_admin),
    ]


class QuestionPermissionHandler(PermissionHandler):
    """Questions follow the active flag of their quiz."""

    policies = [
        Policy("question_select_active_quiz", [Action.read], ParentFlagRule(Quiz, "quiz_id", "is_active")),
        Policy("question_manage_admin", ALL_ACTIONS, is_admin),
    ]


class LeaderboardEntryPermissionHandler(PermissionHandler):

    policies = [
        Policy("leaderboard_entry_select_all", [Action.read], AlwaysRule()),
        Policy("leaderboard_entry_manage_admin", ALL_ACTIONS, is_admin),
    ]
