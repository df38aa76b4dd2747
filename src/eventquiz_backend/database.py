import logging
from typing import Generator, Optional
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session

from eventquiz_backend.settings import settings

logger = logging.getLogger(__name__)

_database_options = {
    "pool_pre_ping": True,
    "pool_size": 10,
    "max_overflow": 5,
    "pool_timeout": 30,
    "pool_recycle": 300
}

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None

PRINCIPAL_SETTING = "app.principal_id"


def create_db_engine(url: str) -> Engine:
    if url.startswith("postgresql"):
        return create_engine(url, **_database_options)
    return create_engine(url)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # sqlite ignores ON DELETE CASCADE unless asked per connection
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@event.listens_for(Session, "after_begin")
def _bind_principal_to_transaction(session, transaction, connection):
    """Expose the request principal to row level security policies.

    The setting is transaction local, so it is re-applied at the start of
    every transaction the session opens.
    """
    if connection.dialect.name != "postgresql":
        return
    principal_id = session.info.get("principal_id")
    connection.execute(
        text("SELECT set_config(:name, :value, true)"),
        {"name": PRINCIPAL_SETTING, "value": principal_id or ""}
    )


def bind_principal(db: Session, principal_id: Optional[str]):
    db.info["principal_id"] = principal_id


def get_engine() -> Engine:
    global _engine, _SessionLocal
    if _engine is None:
        _engine = create_db_engine(settings.database_url())
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine


def get_db() -> Generator[Session, None, None]:

    get_engine()
    db = _SessionLocal()

    try:
        yield db
    except OperationalError:
        logger.error("Database connection failed")
        db.rollback()
        raise
    finally:
        db.close()
