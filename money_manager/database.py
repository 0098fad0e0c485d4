from contextlib import contextmanager
from typing import Iterator

from sqlmodel import SQLModel, Session, create_engine

from money_manager.core.config import DATABASE_URL, SQL_ECHO


def build_engine(url: str, echo: bool = False):
    connect_args = {}
    if url.startswith("sqlite"):
        # Las sesiones se usan desde el threadpool de FastAPI
        connect_args = {"check_same_thread": False, "timeout": 30}
    return create_engine(url, echo=echo, connect_args=connect_args)


engine = build_engine(DATABASE_URL, echo=SQL_ECHO)


def create_db_and_tables(bind=None):
    # importar los modelos para registrar las tablas en el metadata
    from money_manager.models import account, category, investment, notification, share_link, transaction, transfer, user  # noqa: F401
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """Commit everything done inside the block, or roll all of it back."""
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
