import asyncio
from src.database import engine, Base

# Import all models to ensure they are registered in Base.metadata
from src.context.models import UserContext
from src.rules.models import Rule, RuleVersion
from src.snapshots.models import Snapshot
from src.review.models import ChangeCandidate, ReviewTask
from src.audit.models import AuditEvent

async def init_models():
    async with engine.begin() as conn:
        # await conn.run_sync(Base.metadata.drop_all) # Optional: Reset DB
        await conn.run_sync(Base.metadata.create_all)
    print("Database tables created.")

if __name__ == "__main__":
    asyncio.run(init_models())
