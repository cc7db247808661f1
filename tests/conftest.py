# tests/conftest.py
import os
import sys
from typing import AsyncGenerator

# Add project root to path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import pytest
import pytest_asyncio
from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import relationship

from doc_paginate.database import Base, create_engine, create_session_factory


class Author(Base):
    __tablename__ = "authors"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)

    articles = relationship("Article", back_populates="author")


class Article(Base):
    __tablename__ = "articles"
    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    deleted = Column(Boolean, nullable=True, default=False)

    author_id = Column(Integer, ForeignKey("authors.id"), nullable=False)
    author = relationship("Author", back_populates="articles")
    comments = relationship("Comment", back_populates="article", order_by="Comment.id")


class Comment(Base):
    __tablename__ = "comments"
    id = Column(Integer, primary_key=True)
    body = Column(String, nullable=False)

    article_id = Column(Integer, ForeignKey("articles.id"), nullable=False)
    article = relationship("Article", back_populates="comments")


@pytest.fixture
def database_url(tmp_path) -> str:
    """File-backed SQLite so count and find can hold separate connections."""
    return f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}"


@pytest_asyncio.fixture
async def db_engine(database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)


@pytest_asyncio.fixture
async def seeded(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """25 articles: ids 1-20 live, 21-25 soft-deleted.

    Odd ids belong to Ada (author 1), even ids to Grace (author 2).
    Article 1 has two comments, article 2 has one.
    """
    async with session_factory() as session:
        session.add_all([Author(id=1, name="Ada"), Author(id=2, name="Grace")])
        session.add_all(
            [
                Article(
                    id=i,
                    title=f"Article {i:02d}",
                    author_id=1 if i % 2 else 2,
                    deleted=i > 20,
                )
                for i in range(1, 26)
            ]
        )
        session.add_all(
            [
                Comment(id=1, body="First!", article_id=1),
                Comment(id=2, body="Nice read", article_id=1),
                Comment(id=3, body="Typo in para 2", article_id=2),
            ]
        )
        await session.commit()
