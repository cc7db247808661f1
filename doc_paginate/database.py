# doc_paginate/database.py
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from doc_paginate.config import settings

# Base class for collections paginated through SQLAlchemyGateway
Base = declarative_base()


def create_engine(database_url: str | None = None) -> AsyncEngine:
    return create_async_engine(
        database_url or settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        pool_pre_ping=True,  # Validate connections before use
    )


def create_session_factory(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Session factory for the gateway.

    Count and find each open their own session from this factory, so the
    two can run at the same time without sharing a connection.
    """
    return async_sessionmaker(
        engine or create_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,  # Pagination only reads
    )
