import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from typing import AsyncGenerator
from src.main import app
from src.database import get_db, Base
from src.rules.schemas import RuleCreate, RuleVersionCreate, SourceRef
from src.rules.service import RuleService

# In-memory SQLite keeps the suite independent of a running Postgres.
# StaticPool shares the single connection so every session sees the same tables.
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database (and session) for each test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestingSessionLocal = sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with TestingSessionLocal() as session:
        yield session

    await test_engine.dispose()

@pytest_asyncio.fixture(scope="function")
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Client for testing API endpoints."""
    # Override the get_db dependency to use our test session
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_rule_version(db_session: AsyncSession):
    """Factory: create (or reuse) a rule and append a version, optionally approving it."""
    service = RuleService(db_session)

    async def _make(
        content: str = "Firms must meet periodic reporting obligations.",
        jurisdiction: str = "EU",
        project_id: str = "project-p",
        topic_key: str = "reporting",
        rule_id=None,
        approve: bool = True,
    ):
        if rule_id is None:
            rule = await service.create_rule(
                RuleCreate(project_id=project_id, jurisdiction=jurisdiction, topic_key=topic_key)
            )
            rule_id = rule.id
        rule_version = await service.upsert_rule_version(
            rule_id,
            RuleVersionCreate(
                content=content,
                source_refs=[SourceRef(source_document_id="doc-1", excerpt="Art. 1")],
            ),
        )
        if approve:
            rule_version = await service.approve_rule_version(rule_version.id, approver="curator@test")
        return rule_version

    return _make
