import logging
from typing import Any, Optional
from enum import Enum
from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session
from sqlalchemy import exc
from eventquiz_backend.api.exceptions import (
    AuthorizationDenied,
    BadRequestException,
    IntegrityViolation,
    InternalServerException,
    NotFoundException,
    integrity_message,
)
from eventquiz_backend.interface.base import EntityInterface, ListQuery
from eventquiz_backend.permissions.core import authorize, check_permissions
from eventquiz_backend.permissions.handlers import Action
from eventquiz_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)


def _get_visible(principal: Principal, db: Session, id: str, db_type: Any, action: Action):
    """Row with ``id`` if the principal may apply ``action`` to it.

    A row the principal cannot even read is reported as not found, so the
    answer never reveals that a hidden row exists.
    """
    item = check_permissions(principal, db_type, action, db).filter(db_type.id == id).first()
    if item is not None:
        return item

    readable = check_permissions(principal, db_type, Action.read, db).filter(db_type.id == id).first()
    if readable is None:
        raise NotFoundException(detail=f"{db_type.__name__} with id [{id}] not found")

    logger.info(
        "Denied %s on %s for principal %s",
        action.value, db_type.__tablename__, principal.user_id or "anonymous"
    )
    raise AuthorizationDenied(db_type.__tablename__, action.value)


def _integrity_error(db: Session, e: exc.IntegrityError):
    db.rollback()
    message = integrity_message(e)
    logger.warning(f"Integrity violation: {message}")
    return IntegrityViolation(detail=message)


async def create_db(principal: Principal, db: Session, entity: BaseModel, interface: EntityInterface):

    db_type = interface.model
    model_dump = entity.model_dump(exclude_unset=True) if isinstance(entity, BaseModel) else dict(entity)

    if interface.pre_create is not None:
        model_dump = interface.pre_create(model_dump, principal, db)

    db_item = db_type(**model_dump)

    # evaluated on the candidate row before anything is written
    authorize(principal, db_type, Action.create, db_item, db)

    try:
        db.add(db_item)
        db.commit()
        db.refresh(db_item)
    except exc.IntegrityError as e:
        raise _integrity_error(db, e)
    except exc.SQLAlchemyError:
        db.rollback()
        logger.exception(f"Create failed for {db_type.__tablename__}")
        raise InternalServerException(detail="An unexpected database error occurred while creating.")

    return interface.get.model_validate(db_item, from_attributes=True)

async def get_id_db(principal: Principal, db: Session, id: str, interface: EntityInterface):

    db_type = interface.model

    try:
        item = check_permissions(principal, db_type, Action.read, db).filter(db_type.id == id).first()
    except exc.StatementError as e:
        raise BadRequestException(detail=str(e.orig) if hasattr(e, 'orig') else str(e))

    if item is None:
        raise NotFoundException(detail=f"{db_type.__name__} with id [{id}] not found")

    return interface.get.model_validate(item, from_attributes=True)

async def list_db(principal: Principal, db: Session, params: ListQuery, interface: EntityInterface):

    db_type = interface.model

    query = check_permissions(principal, db_type, Action.read, db)

    if interface.search is not None:
        query = interface.search(db, query, params)

    total = query.order_by(None).count()

    if params.limit != None:
        query = query.limit(params.limit)
    if params.skip != None:
        query = query.offset(params.skip)

    query_result = [interface.list.model_validate(entity, from_attributes=True) for entity in query.all()]

    return query_result, total

def update_db(principal: Principal, db: Session, id: str, entity: Any, interface: EntityInterface):

    db_type = interface.model
    db_item = _get_visible(principal, db, id, db_type, Action.update)

    if isinstance(entity, BaseModel):
        entity = entity.model_dump(exclude_unset=True)

    try:
        for key, attr in entity.items():
            if isinstance(attr, Enum):
                attr = attr.value
            setattr(db_item, key, attr)

        # the changed row must still satisfy the update policies
        authorize(principal, db_type, Action.update, db_item, db)

        db.commit()
        db.refresh(db_item)
    except HTTPException:
        db.rollback()
        raise
    except exc.IntegrityError as e:
        raise _integrity_error(db, e)
    except exc.SQLAlchemyError:
        db.rollback()
        logger.exception(f"Update failed for {db_type.__tablename__} {id}")
        raise InternalServerException(detail="An unexpected database error occurred while updating.")

    return interface.get.model_validate(db_item, from_attributes=True)

def delete_db(principal: Principal, db: Session, id: str, db_type: Any):

    entity = _get_visible(principal, db, id, db_type, Action.delete)

    try:
        # children go in the same transaction through ON DELETE CASCADE
        db.delete(entity)
        db.commit()
    except exc.IntegrityError as e:
        raise _integrity_error(db, e)
    except exc.SQLAlchemyError:
        db.rollback()
        logger.exception(f"Delete failed for {db_type.__tablename__} {id}")
        raise InternalServerException(detail="An unexpected database error occurred while deleting.")

    return {"ok": True}
