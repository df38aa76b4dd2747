"""
Row level authorization for the quiz administration backend.

Main components:
- principal: the caller identity (no role data)
- oracle: unchecked role lookup used by every rule that depends on a role
- rules: pure predicates with SQL, in-memory and PostgreSQL renditions
- handlers: policy evaluator (permissive union) and registry
- handlers_impl: the per-table policy set
- core: registration and the check/authorize entry points
- routines: elevated privilege SQL routines with pinned search paths
- rls: row level security DDL rendered from the policy set
"""

from .principal import Principal, ANONYMOUS
from .oracle import RoleOracle
from .handlers import (
    Action,
    Policy,
    PermissionHandler,
    PermissionRegistry,
    permission_registry,
)
from .core import (
    authorize,
    check_admin,
    check_permissions,
    initialize_permission_handlers,
)

__all__ = [
    "Principal",
    "ANONYMOUS",
    "RoleOracle",
    "Action",
    "Policy",
    "PermissionHandler",
    "PermissionRegistry",
    "permission_registry",
    "authorize",
    "check_admin",
    "check_permissions",
    "initialize_permission_handlers",
]
