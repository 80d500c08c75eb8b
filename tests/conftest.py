"""Pytest configuration and fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import sessionmaker

from labelmatch.models.mapping import Base
from labelmatch.models.records import MasterRecord


@pytest.fixture
def masters():
    """A small product catalog."""
    return [
        MasterRecord(id=1, name="ジャワカレー", unit_price=398.0),
        MasterRecord(id=2, name="バーモントカレー 甘口", unit_price=348.0),
        MasterRecord(id=3, name="コンソメ", unit_price=298.0),
        MasterRecord(id=4, name="【P】特製チャーシューだれ"),
        MasterRecord(id=5, name="北海道バター", unit_price=520.0, allergen_text="乳"),
    ]


@pytest.fixture
def db_engine():
    """Create in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """Create database session for testing."""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
async def async_db_engine():
    """Create async SQLite database for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def async_session(async_db_engine):
    """Create async database session for testing."""
    async_session_maker = async_sessionmaker(
        async_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session_maker() as session:
        yield session
