import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url

        # Configure engine based on database type
        if url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if _is_memory_sqlite(url):
                # One shared connection, otherwise every session sees an empty database
                kwargs["poolclass"] = StaticPool
            self.engine = create_engine(url, echo=echo, **kwargs)
        elif "mysql" in url:
            self.engine = create_engine(
                url,
                poolclass=QueuePool,
                pool_size=10,
                pool_recycle=3600,
                pool_pre_ping=True,  # Verify connections before using
                echo=echo,
            )
        else:
            # Generic configuration for other databases
            self.engine = create_engine(url, echo=echo)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def init_db(self):
        """Create all tables."""
        # Import models so they register on Base.metadata
        import prompt_library.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database initialized: %s", self.url.split("@")[-1])

    def drop_all(self):
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()
        logger.info("Database disconnected")


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
