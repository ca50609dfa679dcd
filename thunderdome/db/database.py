"""Generate database sessions"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from thunderdome.db.schema import Base


def make_session_factory(database_url: str, echo: bool = False) -> sessionmaker[Session]:
    """Connect to `database_url` and ensure all tables are created."""
    engine = create_engine(database_url, echo=echo)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)


@contextmanager
def get_db(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
