"""
Role oracle.

Answers "does principal P hold role R?" for every policy decision. The
lookup goes straight to the ``user_role`` table through the session and never
through the permission registry: the registry itself guards ``user_role`` with
an admin-only rule, so asking it would need the answer it is trying to compute.

The database side counterpart is the ``public.has_role`` routine, a security
definer function with a pinned search path (see ``permissions.routines``).
"""

from typing import List, Optional
from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from eventquiz_backend.model.role import AppRole, UserRole


class RoleOracle:
    """Unchecked, read-only access to role grants.

    Nothing is cached between calls. Each call reads the state visible to the
    session's current transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def holds_role(self, user_id: Optional[str], role: AppRole | str) -> bool:
        if user_id is None:
            return False
        role = AppRole(role)
        stmt = select(
            exists().where(UserRole.user_id == user_id, UserRole.role == role)
        )
        return bool(self.db.execute(stmt).scalar())

    def roles_of(self, user_id: Optional[str]) -> List[AppRole]:
        if user_id is None:
            return []
        stmt = select(UserRole.role).where(UserRole.user_id == user_id).order_by(UserRole.role)
        return list(self.db.execute(stmt).scalars())
