import asyncio
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import normalize_database_url
from .models import Base

logger = logging.getLogger(__name__)


class Database:
    """
    Process-wide handle to the relational store.

    Construct exactly one per process (the FastAPI lifespan does this and
    keeps it on ``app.state.database``) and pass it to every TaskRepository.
    The engine and its connection pool are created lazily on first use and
    live until ``close()``; nothing here is stored in module globals, so a
    hot reload that rebuilds the app rebuilds the handle with it.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = normalize_database_url(url)
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker] = None

    def _engine_options(self) -> dict:
        options = {"echo": self.echo, "pool_pre_ping": True}
        if self.url.startswith("postgresql"):
            # Conservative settings for hosted databases
            options.update(
                pool_size=5,
                max_overflow=10,
                pool_timeout=20,
                pool_recycle=300,  # 5 minutes
            )
        return options

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(self.url, **self._engine_options())
            logger.info("Database engine created for %s", self.url.split("://", 1)[0])
        return self._engine

    def session(self) -> AsyncSession:
        """Open a new session; use it as an async context manager"""
        if self._sessionmaker is None:
            self._sessionmaker = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._sessionmaker()

    async def init(self, max_retries: int = 3, retry_delay: float = 5) -> None:
        """Create all tables, retrying while the database comes up"""
        for attempt in range(max_retries):
            try:
                async with self.engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
                logger.info("Database tables created successfully")
                return
            except Exception as e:
                logger.warning(
                    "Database connection attempt %d/%d failed: %s",
                    attempt + 1, max_retries, e,
                )
                if attempt < max_retries - 1:
                    await asyncio.sleep(retry_delay)
                else:
                    logger.error("All database connection attempts failed")
                    raise

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections"""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
            logger.info("Database connections closed")
