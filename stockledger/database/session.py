from contextlib import contextmanager

from sqlalchemy.orm import sessionmaker

from stockledger.database.engine import engine


def make_session_factory(bind):
    """Sessions commit explicitly in the services and keep loaded rows usable afterwards."""
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


SessionLocal = make_session_factory(engine)


@contextmanager
def session_scope(factory=None):
    session = (factory or SessionLocal)()
    try:
        yield session
    finally:
        session.close()


def get_db():
    with session_scope() as db:
        yield db
