"""
Entry points of the authorization core.

Every read goes through ``check_permissions`` and every write through
``authorize`` before it touches storage. Both are evaluated inside the
caller's session, against the state visible to its current transaction.
"""

from typing import Any
from sqlalchemy.orm import Session

from eventquiz_backend.model.auth import Profile
from eventquiz_backend.model.quiz import LeaderboardEntry, Question, Quiz
from eventquiz_backend.model.role import AppRole, UserRole
from eventquiz_backend.permissions.handlers import Action, permission_registry
from eventquiz_backend.permissions.handlers_impl import (
    LeaderboardEntryPermissionHandler,
    ProfilePermissionHandler,
    QuestionPermissionHandler,
    QuizPermissionHandler,
    UserRolePermissionHandler,
)
from eventquiz_backend.permissions.oracle import RoleOracle
from eventquiz_backend.permissions.principal import Principal


def initialize_permission_handlers():
    """Initialize and register all permission handlers"""

    permission_registry.register(Profile, ProfilePermissionHandler(Profile))
    permission_registry.register(UserRole, UserRolePermissionHandler(UserRole))
    permission_registry.register(Quiz, QuizPermissionHandler(Quiz))
    permission_registry.register(Question, QuestionPermissionHandler(Question))
    permission_registry.register(LeaderboardEntry, LeaderboardEntryPermissionHandler(LeaderboardEntry))


def check_admin(principal: Principal, db: Session) -> bool:
    return RoleOracle(db).holds_role(principal.user_id, AppRole.admin)


def check_permissions(principal: Principal, entity: Any, action: Action | str, db: Session):
    """Query restricted to the rows of ``entity`` the principal may act on."""
    return permission_registry.check_permissions(principal, entity, action, db)


def authorize(principal: Principal, entity: Any, action: Action | str, row: Any, db: Session):
    """Raise ``AuthorizationDenied`` unless some policy permits ``action`` on ``row``."""
    permission_registry.authorize(principal, entity, action, row, db)


# Initialize handlers on module import
initialize_permission_handlers()
