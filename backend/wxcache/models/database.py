"""Database engine construction and schema versioning for SQLAlchemy."""

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import DeclarativeBase

# Any change to the tables below must bump this; a mismatch triggers a
# drop-and-recreate of the whole cache.
SCHEMA_VERSION = 1


class Base(DeclarativeBase):
    pass


def _enable_foreign_keys(dbapi_conn, _record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_store_engine(db_path: str) -> Engine:
    """Build an engine for the SQLite file at *db_path*.

    Foreign keys are switched on for every pooled connection, since SQLite
    leaves them off by default.
    """
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},  # calls are serialised by the store lock
        echo=False,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


def register_models() -> None:
    """Import the ORM models so they register with Base.metadata."""
    from . import location  # noqa: F401
    from . import weather  # noqa: F401


def read_schema_version(conn) -> int:
    return conn.execute(text("PRAGMA user_version")).scalar_one()


def write_schema_version(conn, version: int = SCHEMA_VERSION) -> None:
    # PRAGMA does not take bound parameters
    conn.execute(text(f"PRAGMA user_version = {int(version)}"))
