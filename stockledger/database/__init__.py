from stockledger.database.base import Base
from stockledger.database.engine import create_db_engine, engine
from stockledger.database.session import SessionLocal, get_db, make_session_factory, session_scope

__all__ = [
    "Base",
    "SessionLocal",
    "create_db_engine",
    "engine",
    "get_db",
    "make_session_factory",
    "session_scope",
]
