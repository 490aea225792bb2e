"""
Pytest configuration and fixtures for testing
"""
import os

# Cheap bcrypt rounds for tests; must be set before settings are imported
os.environ.setdefault("BCRYPT_COST", "4")

import pytest
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from infrastructure.postgres_connection import Base
from infrastructure.password_hashing import hash_password
from models.user import User
from models.like import Like
from datetime import datetime, UTC


# Test database URL - using file-based SQLite to avoid in-memory connection issues
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"


@pytest.fixture(scope="function")
async def db_engine():
    """Create a test database engine"""
    # Remove test database if it exists
    if os.path.exists("./test.db"):
        os.remove("./test.db")

    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=NullPool,
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables and close
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()

    # Remove test database file
    if os.path.exists("./test.db"):
        os.remove("./test.db")


@pytest.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session"""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


async def _add_user(session: AsyncSession, nickname: str, email: str, password: str) -> User:
    now = datetime.now(UTC)
    user = User(
        nickname=nickname,
        email=email,
        password=hash_password(password),
        created_at=now,
        updated_at=now,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def test_user_1(db_session: AsyncSession) -> User:
    """Create a test user 1 (password: password_1)"""
    return await _add_user(db_session, "TestUser1", "user1@example.com", "password_1")


@pytest.fixture
async def test_user_2(db_session: AsyncSession) -> User:
    """Create a test user 2 (password: password_2)"""
    return await _add_user(db_session, "TestUser2", "user2@example.com", "password_2")


@pytest.fixture
async def existing_like(db_session: AsyncSession, test_user_1: User) -> Like:
    """Create a like by user 1 on post 42"""
    like = Like(
        user_id=test_user_1.id,
        post_id=42,
        created_at=datetime.now(UTC),
        updated_at=datetime.now(UTC)
    )
    db_session.add(like)
    await db_session.commit()
    await db_session.refresh(like)
    return like
