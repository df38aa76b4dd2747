import enum
import logging
from typing import Any, Dict, Iterable, List, Optional, Type
from sqlalchemy import false, or_
from sqlalchemy.orm import Session, Query

from eventquiz_backend.api.exceptions import AuthorizationDenied
from eventquiz_backend.permissions.principal import Principal
from eventquiz_backend.permissions.rules import PolicyContext, Rule

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    read = "read"
    create = "create"
    update = "update"
    delete = "delete"


ACTION_ALIASES = {
    "get": Action.read,
    "list": Action.read,
    "select": Action.read,
    "insert": Action.create,
}

SQL_COMMANDS = {
    Action.read: "SELECT",
    Action.create: "INSERT",
    Action.update: "UPDATE",
    Action.delete: "DELETE",
}


def normalize_action(action: Action | str) -> Action:
    if isinstance(action, Action):
        return action
    return ACTION_ALIASES.get(action) or Action(action)


class Policy:
    """A named rule that permits a set of actions on one table."""

    def __init__(self, name: str, actions: Iterable[Action | str], rule: Rule):
        self.name = name
        self.actions = frozenset(normalize_action(a) for a in actions)
        self.rule = rule

    def applies_to(self, action: Action) -> bool:
        return action in self.actions

    @property
    def command(self) -> str:
        if self.actions == frozenset(Action):
            return "ALL"
        if len(self.actions) == 1:
            return SQL_COMMANDS[next(iter(self.actions))]
        raise ValueError(f"Policy '{self.name}' must cover one action or all of them")

    def __repr__(self) -> str:
        return f"Policy({self.name!r}, {sorted(a.value for a in self.actions)}, {self.rule!r})"


class PermissionHandler:
    """Permissive union evaluator for one table.

    For a given action, every policy covering it contributes its rule and the
    results are OR-ed. No policy for an action means the action is denied.
    """

    policies: List[Policy] = []

    def __init__(self, entity: Type[Any]):
        self.entity = entity
        self.resource_name = entity.__tablename__

    def policies_for(self, action: Action | str) -> List[Policy]:
        action = normalize_action(action)
        return [p for p in self.policies if p.applies_to(action)]

    def visibility_clause(self, principal: Principal, action: Action | str, db: Session, ctx: Optional[PolicyContext] = None):
        ctx = ctx or PolicyContext(principal, db)
        clauses = [p.rule.clause(self.entity, ctx) for p in self.policies_for(action)]
        if not clauses:
            return false()
        return or_(*clauses)

    def build_query(self, principal: Principal, action: Action | str, db: Session) -> Query:
        """Query over the rows this principal may act on."""
        return db.query(self.entity).filter(self.visibility_clause(principal, action, db))

    def can_perform_action(self, principal: Principal, action: Action | str, row: Any, db: Session) -> bool:
        ctx = PolicyContext(principal, db)
        return any(p.rule.allows(row, ctx) for p in self.policies_for(action))

    def authorize(self, principal: Principal, action: Action | str, row: Any, db: Session):
        action = normalize_action(action)
        if not self.can_perform_action(principal, action, row, db):
            logger.info(
                "Denied %s on %s for principal %s",
                action.value, self.resource_name, principal.user_id or "anonymous"
            )
            raise AuthorizationDenied(self.resource_name, action.value)


class PermissionRegistry:
    """Registry for managing entity permission handlers"""

    _instance = None
    _handlers: Dict[Type[Any], PermissionHandler] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def register(self, entity: Type[Any], handler: PermissionHandler):
        self._handlers[entity] = handler

    def get_handler(self, entity: Type[Any]) -> Optional[PermissionHandler]:
        return self._handlers.get(entity)

    def handlers(self) -> List[PermissionHandler]:
        return list(self._handlers.values())

    def check_permissions(self, principal: Principal, entity: Type[Any], action: Action | str, db: Session) -> Query:
        """Return a query restricted to the rows the principal may act on."""
        handler = self.get_handler(entity)
        if handler is None:
            # Tables without a policy set behave like row level security with no policies
            return db.query(entity).filter(false())
        return handler.build_query(principal, action, db)

    def authorize(self, principal: Principal, entity: Type[Any], action: Action | str, row: Any, db: Session):
        handler = self.get_handler(entity)
        if handler is None:
            raise AuthorizationDenied(entity.__tablename__, normalize_action(action).value)
        handler.authorize(principal, action, row, db)


# Global registry instance
permission_registry = PermissionRegistry()
