"""
Idea Board - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set testing environment
os.environ['DEBUG'] = 'false'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite://'

from ideaboard.config import Settings
from ideaboard.database import Base, get_db
from ideaboard.main import app
from ideaboard.services.idea_board import IdeaBoard
from ideaboard.services.store import SqlAlchemyDocumentStore
from tests.fakes import (
    FakeTaskService,
    FakeUserDirectory,
    InterceptingStore,
    RecordingNotifier,
    RecordingPoints,
)

# Test database setup
test_engine = create_async_engine(
    'sqlite+aiosqlite://',
    connect_args={'check_same_thread': False},
    poolclass=StaticPool,
    echo=False,
)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ============================================
# Fixtures
# ============================================

@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        AUTO_APPROVAL_THRESHOLD=3,
        HIGH_PRIORITY_VOTE_THRESHOLD=5,
        VOTE_UPDATE_MAX_RETRIES=3,
        SIDE_EFFECT_MAX_ATTEMPTS=1,
    )


@pytest.fixture
def store(db_session: AsyncSession) -> InterceptingStore:
    return InterceptingStore(SqlAlchemyDocumentStore(db_session))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def points() -> RecordingPoints:
    return RecordingPoints()


@pytest.fixture
def task_service() -> FakeTaskService:
    return FakeTaskService()


@pytest.fixture
def users() -> FakeUserDirectory:
    return FakeUserDirectory({'user-123': 'Test User'})


@pytest.fixture
def board(store, notifier, points, task_service, users, test_settings) -> IdeaBoard:
    return IdeaBoard(
        store=store,
        notifier=notifier,
        points=points,
        tasks=task_service,
        users=users,
        settings=test_settings,
    )


@pytest.fixture
async def idea(board):
    """A freshly submitted idea."""
    return await board.create_idea(
        'team-123',
        'hackathon-123',
        {
            'title': 'Revolutionary Feature',
            'description': 'A game-changing idea',
            'tags': ['frontend', 'innovation'],
            'created_by': 'user-123',
        },
        'Test User',
    )


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()
