"""Database engine factory.

Rules only ever read from the database, so engines can be opened read-only.
On SQLite this sets `PRAGMA query_only`, which makes any accidental write fail
instead of silently modifying the data being queried. Other backends are left
untouched; use a read-only role there.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, make_url

from .dialects import DialectName

if TYPE_CHECKING:
    from sqlite3 import Connection as SQLiteConnection

    from sqlalchemy.engine import Engine


def is_sqlite(url: str | URL) -> bool:
    """Return True if the given SQLAlchemy URL or string corresponds to SQLite."""
    return make_url(str(url)).get_backend_name() == DialectName.SQLITE.value


def make_engine(url: str | URL, *, read_only: bool = False, echo: bool = False) -> Engine:
    """Create a SQLAlchemy Engine for the given URL.

    Args:
        url: Database connection URL (str or :class:`URL`).
        read_only: If True and the backend is SQLite, refuse writes on every
            connection.
        echo: If True, log SQL statements.

    Returns:
        Engine: Configured SQLAlchemy Engine.
    """

    engine = create_engine(url, echo=echo)

    if read_only and is_sqlite(url):

        @event.listens_for(engine, "connect")
        def _sqlite_query_only(dbapi_conn: SQLiteConnection, conn_record):  # type: ignore #pylint: disable=W0613
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA query_only=ON;")
            cur.close()

    return engine
