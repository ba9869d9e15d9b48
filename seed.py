"""Seed the demo walkthrough: one EU rule with an approved v1, published as S1 for the demo project."""
import asyncio
from datetime import date

from src.database import AsyncSessionLocal
from src.context.models import AllowedScope
from src.context.schemas import UserContextUpdate
from src.context.service import UserContextService
from src.rules.schemas import RuleCreate, RuleVersionCreate, SourceRef
from src.rules.service import RuleService
from src.snapshots.service import SnapshotService

DEMO_PROJECT_ID = "demo-project"


async def seed_data():
    async with AsyncSessionLocal() as session:
        context = await UserContextService(session).get_user_context(DEMO_PROJECT_ID)
        if context.kb_snapshot_id is not None:
            print(f"Project {DEMO_PROJECT_ID} already points at snapshot {context.kb_snapshot_id}")
            return

        await UserContextService(session).set_user_context(
            DEMO_PROJECT_ID,
            UserContextUpdate(locale="en-GB", jurisdiction="EU", allowed_scope=AllowedScope.EDUCATION_ONLY),
        )

        rules = RuleService(session)
        rule = await rules.create_rule(
            RuleCreate(project_id=DEMO_PROJECT_ID, jurisdiction="EU", topic_key="reporting")
        )
        v1 = await rules.upsert_rule_version(
            rule.id,
            RuleVersionCreate(
                content="Firms must meet periodic reporting obligations to the supervisory authority.",
                source_refs=[SourceRef(source_document_id="eu-reg-2024-01", excerpt="Article 12")],
            ),
        )
        await rules.approve_rule_version(v1.id, approver="curator@demo")

        snapshot = await SnapshotService(session).publish_snapshot(DEMO_PROJECT_ID, "EU", date.today())
        print(f"Seeded rule {rule.id}, version {v1.id}, snapshot {snapshot.id}")

if __name__ == "__main__":
    asyncio.run(seed_data())
