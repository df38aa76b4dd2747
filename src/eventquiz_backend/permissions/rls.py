"""
Row level security DDL rendered from the registered policy set.

The statements mirror what the application evaluates, so a client talking to
PostgreSQL directly is held to the same rules as one going through the API.
"""

from typing import List, Optional

from eventquiz_backend.permissions.core import permission_registry
from eventquiz_backend.permissions.handlers import Action, PermissionHandler, Policy


def _table(handler: PermissionHandler) -> str:
    return f'public."{handler.resource_name}"'


def render_policy(handler: PermissionHandler, policy: Policy) -> str:
    command = policy.command
    predicate = policy.rule.sql()
    if command == "INSERT":
        clause = f"WITH CHECK ({predicate})"
    else:
        # USING doubles as WITH CHECK for UPDATE and ALL
        clause = f"USING ({predicate})"
    return f'CREATE POLICY "{policy.name}" ON {_table(handler)} FOR {command} {clause};'


def render_handler(handler: PermissionHandler) -> List[str]:
    statements = [f"ALTER TABLE {_table(handler)} ENABLE ROW LEVEL SECURITY;"]
    statements.extend(render_policy(handler, policy) for policy in handler.policies)
    return statements


def render_policies(handlers: Optional[List[PermissionHandler]] = None) -> List[str]:
    statements = []
    for handler in handlers or permission_registry.handlers():
        statements.extend(render_handler(handler))
    return statements


def render_drop_policies(handlers: Optional[List[PermissionHandler]] = None) -> List[str]:
    statements = []
    for handler in handlers or permission_registry.handlers():
        for policy in handler.policies:
            statements.append(f'DROP POLICY IF EXISTS "{policy.name}" ON {_table(handler)};')
        statements.append(f"ALTER TABLE {_table(handler)} DISABLE ROW LEVEL SECURITY;")
    return statements


def policy_table(handlers: Optional[List[PermissionHandler]] = None) -> List[tuple]:
    """(table, action, policy name) for every action each policy covers."""
    rows = []
    for handler in handlers or permission_registry.handlers():
        for policy in handler.policies:
            for action in Action:
                if policy.applies_to(action):
                    rows.append((handler.resource_name, action.value, policy.name))
    return rows
