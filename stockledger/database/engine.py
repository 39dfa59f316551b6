import logging
import sqlite3
import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool

from stockledger.config import Settings, get_settings


app_settings: Settings = get_settings()
logger = logging.getLogger(__name__)

_SQLITE_BUSY_TIMEOUT_SECONDS = 30
_SQLITE_BUSY_TIMEOUT_MS = _SQLITE_BUSY_TIMEOUT_SECONDS * 1000


def _is_sqlite_memory(url) -> bool:
    sqlite_db = url.database
    if sqlite_db in (None, "", ":memory:"):
        return True
    return url.query.get("mode") == "memory"


def _install_sqlite_pragmas(engine, is_memory: bool) -> None:
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA busy_timeout={_SQLITE_BUSY_TIMEOUT_MS}")
            if not is_memory:
                try:
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA synchronous=NORMAL")
                except sqlite3.DatabaseError:
                    pass
        finally:
            cursor.close()


def _install_query_logging(engine, slow_query_ms: int) -> None:
    @event.listens_for(engine, "before_cursor_execute")
    def _start_timer(conn, _cursor, _statement, _parameters, _context, _executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def _log_query(conn, _cursor, statement, parameters, _context, _executemany):
        started = conn.info["query_start_time"].pop()
        elapsed_ms = (time.perf_counter() - started) * 1000
        if slow_query_ms and elapsed_ms > slow_query_ms:
            logger.warning(
                "Slow database query detected (%.1fms > %sms): %s",
                elapsed_ms,
                slow_query_ms,
                statement,
                extra={"context": {"params": parameters}},
            )
        elif logger.isEnabledFor(logging.DEBUG):
            logger.debug("Database query executed in %.1fms: %s", elapsed_ms, statement)

    @event.listens_for(engine, "handle_error")
    def _log_error(exception_context):
        logger.error(
            "Database error occurred: %s",
            exception_context.original_exception,
            extra={"context": {"statement": exception_context.statement}},
        )


def create_db_engine(database_url: str, *, slow_query_ms: int = 0):
    db_url = make_url(database_url)
    is_sqlite = db_url.get_backend_name() == "sqlite"
    is_memory = is_sqlite and _is_sqlite_memory(db_url)

    connect_args = {}
    engine_kwargs: dict[str, object] = dict(pool_pre_ping=True)
    if is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": _SQLITE_BUSY_TIMEOUT_SECONDS}
        if is_memory:
            engine_kwargs.update(poolclass=StaticPool)

    db_engine = create_engine(
        database_url,
        connect_args=connect_args,
        **engine_kwargs,
    )
    if is_sqlite:
        _install_sqlite_pragmas(db_engine, is_memory)
    _install_query_logging(db_engine, slow_query_ms)
    return db_engine


engine = create_db_engine(
    app_settings.DATABASE_URL,
    slow_query_ms=app_settings.SLOW_QUERY_MS,
)
