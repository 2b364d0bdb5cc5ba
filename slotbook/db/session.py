from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from slotbook.base.config import settings


def make_engine(database_url: str = settings.DATABASE_URL):
    # SQLite connections are shared with worker threads
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args, future=True)


engine = make_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)

Base = declarative_base()


def init_db(bind=None) -> None:
    from slotbook.db import models  # noqa: F401  registers tables on Base

    Base.metadata.create_all(bind=bind or engine)
