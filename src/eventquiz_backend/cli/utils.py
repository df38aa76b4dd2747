import functools
from contextlib import contextmanager
from typing import Optional

import click
from fastapi import HTTPException
from sqlalchemy.orm import Session

from eventquiz_backend.database import bind_principal, get_db
from eventquiz_backend.model.auth import User
from eventquiz_backend.permissions.principal import Principal


def handle_api_exceptions(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except HTTPException as e:
            message = e.detail.get("reason") if isinstance(e.detail, dict) else e.detail
            click.echo(f"[{click.style(str(e.status_code), fg='red')}] {message}", err=True)
            raise click.exceptions.Exit(1)

    return wrapper


@contextmanager
def session(principal_id: Optional[str] = None):
    sessions = get_db()
    db: Session = next(sessions)
    bind_principal(db, principal_id)
    try:
        yield db
    finally:
        sessions.close()


def acting_principal(db: Session, principal_id: Optional[str]) -> Principal:
    if principal_id is None:
        return Principal()
    user = db.get(User, principal_id)
    return Principal(user_id=principal_id, email=user.email if user is not None else None)
