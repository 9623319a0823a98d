from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from app.config import get_settings

Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """Engine for the given URL. In-memory SQLite shares one connection across threads."""
    kwargs = {"echo": False}
    if database_url.startswith("sqlite"):
        # SQLite needs check_same_thread=False for FastAPI
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine | None = None) -> None:
    """Create missing tables (dev / SQLite). Production schemas come from Alembic."""
    import app.models  # noqa: F401 - register models on Base.metadata

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
