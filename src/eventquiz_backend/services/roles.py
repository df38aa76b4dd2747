import logging
from typing import List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventquiz_backend.api.exceptions import IntegrityViolation, NotFoundException, integrity_message
from eventquiz_backend.model.auth import User
from eventquiz_backend.model.role import AppRole, UserRole
from eventquiz_backend.permissions.core import authorize, check_permissions
from eventquiz_backend.permissions.handlers import Action
from eventquiz_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)


class RoleService:
    """Grants and revocations, each checked against the role grant policies."""

    def __init__(self, db: Session):
        self.db = db

    def list_roles(self, principal: Principal, user_id: str | None = None) -> List[UserRole]:
        query = check_permissions(principal, UserRole, Action.read, self.db)
        if user_id is not None:
            query = query.filter(UserRole.user_id == user_id)
        return query.order_by(UserRole.created_at).all()

    def grant_role(self, principal: Principal, user_id: str, role: AppRole | str) -> UserRole:
        """Grant ``role`` to ``user_id``. Granting an existing pair is a no-op."""
        role = AppRole(role)
        authorize(principal, UserRole, Action.create, UserRole(user_id=user_id, role=role), self.db)

        grant = self._insert_grant(user_id, role)
        logger.info(f"Granted role {role.value} to {user_id} by {principal.user_id}")
        return grant

    def seed_role(self, user_id: str, role: AppRole | str) -> UserRole:
        """Grant without policy evaluation.

        Operator path for the first administrator, who cannot be granted by
        anyone holding the role yet. Not reachable through the API.
        """
        role = AppRole(role)
        grant = self._insert_grant(user_id, role)
        logger.warning(f"Seeded role {role.value} for {user_id} outside policy evaluation")
        return grant

    def revoke_role(self, principal: Principal, user_id: str, role: AppRole | str):
        role = AppRole(role)
        query = check_permissions(principal, UserRole, Action.delete, self.db)
        grant = query.filter(UserRole.user_id == user_id, UserRole.role == role).first()

        if grant is None:
            raise NotFoundException(detail=f"Role {role.value} not granted to {user_id}")

        self.db.delete(grant)
        self.db.commit()
        logger.info(f"Revoked role {role.value} from {user_id} by {principal.user_id}")
        return {"ok": True}

    def _find_grant(self, user_id: str, role: AppRole) -> UserRole | None:
        return (
            self.db.query(UserRole)
            .filter(UserRole.user_id == user_id, UserRole.role == role)
            .first()
        )

    def _insert_grant(self, user_id: str, role: AppRole) -> UserRole:
        existing = self._find_grant(user_id, role)
        if existing is not None:
            return existing

        if self.db.get(User, user_id) is None:
            raise IntegrityViolation(detail=f"Principal {user_id} does not exist")

        grant = UserRole(user_id=user_id, role=role)
        self.db.add(grant)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # a concurrent grant of the same pair won the race
            existing = self._find_grant(user_id, role)
            if existing is not None:
                return existing
            raise IntegrityViolation(detail=integrity_message(e))

        self.db.refresh(grant)
        return grant
