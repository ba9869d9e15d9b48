from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from src.config import settings

# pre_ping drops connections the database closed between requests
engine = create_async_engine(
    str(settings.SQLALCHEMY_DATABASE_URI),
    echo=False,
    pool_pre_ping=True,
)

# expire_on_commit=False: services hand committed rows straight to response models
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db():
    """One session per request. Services own commit and rollback; this only closes."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
