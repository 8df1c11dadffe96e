from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from agenda.core import config


def _connect_args(url: str) -> dict:
    # SQLite connections are shared across the FastAPI threadpool.
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    config.DATABASE_URL,
    echo=config.DATABASE_ECHO,
    connect_args=_connect_args(config.DATABASE_URL),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
