"""
Identity store and profile provisioning.

Principals are owned by the identity provider. When one is created, exactly
one profile is inserted for it in the same transaction. On PostgreSQL this is
the ``on_user_created`` trigger installed by the migrations; on other
dialects the ``after_insert`` handler below does the same work. Either way a
failed profile insert aborts the whole principal creation.
"""

import logging
from typing import Any, Dict, Optional
from sqlalchemy import event, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventquiz_backend.api.exceptions import (
    IntegrityViolation,
    NotFoundException,
    ProvisioningFailure,
    integrity_message,
    violated_table,
)
from eventquiz_backend.model.auth import Profile, User
from eventquiz_backend.model.base import new_uuid

logger = logging.getLogger(__name__)


def profile_display_name(user_metadata: Optional[Dict[str, Any]], email: Optional[str]) -> Optional[str]:
    display_name = (user_metadata or {}).get("display_name")
    return display_name if display_name is not None else email


@event.listens_for(User, "after_insert")
def provision_profile(mapper, connection, target: User):
    if connection.dialect.name == "postgresql":
        # provisioned by the on_user_created trigger
        return

    try:
        connection.execute(
            insert(Profile.__table__).values(
                id=new_uuid(),
                user_id=target.id,
                display_name=profile_display_name(target.user_metadata, target.email),
                email=target.email,
            )
        )
    except IntegrityError as e:
        raise ProvisioningFailure(detail=f"Profile for principal {target.id} could not be created: {integrity_message(e)}") from e

    logger.info(f"Provisioned profile for principal {target.id}")


class IdentityService:
    """Reacts to principal lifecycle events from the identity provider."""

    def __init__(self, db: Session):
        self.db = db

    def create_principal(self, email: Optional[str], user_metadata: Optional[Dict[str, Any]] = None, user_id: Optional[str] = None) -> User:
        user = User(id=user_id or new_uuid(), email=email, user_metadata=user_metadata)
        self.db.add(user)

        try:
            self.db.flush()
        except ProvisioningFailure:
            self.db.rollback()
            logger.error(f"Provisioning failed for principal {user.id}, creation rolled back")
            raise
        except IntegrityError as e:
            self.db.rollback()
            message = integrity_message(e)
            if violated_table(e) == Profile.__tablename__:
                logger.error(f"Provisioning failed for principal {user.id}, creation rolled back")
                raise ProvisioningFailure(detail=message)
            logger.warning(f"Principal creation rejected: {message}")
            raise IntegrityViolation(detail=message)

        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_principal(self, user_id: str):
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundException(detail=f"Principal {user_id} not found")

        # profile, role grants and created quizzes go with it
        self.db.delete(user)
        self.db.commit()
        logger.info(f"Deleted principal {user_id}")
        return {"ok": True}
