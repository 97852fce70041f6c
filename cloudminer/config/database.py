"""Database engine and session factory."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cloudminer.config.settings import settings


def create_engine(database_url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """Create async engine for the ledger database."""
    return create_async_engine(
        database_url or settings.database_url,
        echo=settings.database_echo if echo is None else echo,
    )


def create_session_maker(engine: AsyncEngine | None = None) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to the given engine."""
    if engine is None:
        engine = create_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
