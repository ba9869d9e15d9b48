import logging
from datetime import date
from typing import List
from uuid import UUID

from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.audit.models import AuditEventType
from src.audit.service import AuditService
from src.context.service import UserContextService
from src.rules.models import RuleVersion, RuleVersionStatus
from src.snapshots.models import Snapshot
from src.snapshots.schemas import KbSearchItem, KbSearchResult
from src.shared.errors import ErrorCode, KnowledgeBaseError

logger = logging.getLogger(__name__)


def tokenize(query: str) -> List[str]:
    return [token for token in query.lower().split() if token]


class SnapshotService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def _approved_rule_version_ids(self, jurisdiction: str) -> List[str]:
        result = await self.db.execute(
            select(RuleVersion.id)
            .where(
                RuleVersion.jurisdiction == jurisdiction,
                RuleVersion.status == RuleVersionStatus.APPROVED,
            )
            .order_by(RuleVersion.id)
        )
        return [str(rule_version_id) for rule_version_id in result.scalars().all()]

    async def publish_snapshot(self, project_id: str, jurisdiction: str, as_of_date: date) -> Snapshot:
        """
        Freeze every approved rule version in the jurisdiction into a new snapshot
        and repoint the project's active snapshot at it.

        Snapshot insert, pointer update and audit row commit together or not at all.
        """
        included_ids = await self._approved_rule_version_ids(jurisdiction)
        if not included_ids:
            raise KnowledgeBaseError(
                ErrorCode.NO_APPROVED_RULES,
                f"No approved rule versions in jurisdiction {jurisdiction}",
            )

        snapshot = Snapshot(
            jurisdiction=jurisdiction,
            as_of_date=as_of_date,
            included_rule_version_ids=included_ids,
        )
        try:
            self.db.add(snapshot)
            await self.db.flush()

            await UserContextService(self.db).point_to_snapshot(project_id, snapshot.id)

            self.audit.record(
                AuditEventType.SNAPSHOT_PUBLISHED,
                project_id=project_id,
                subject_id=snapshot.id,
                subject_type="snapshot",
                detail={
                    "jurisdiction": jurisdiction,
                    "as_of_date": as_of_date.isoformat(),
                    "included_count": len(included_ids),
                },
            )
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.error(f"Publishing snapshot for {jurisdiction} (project {project_id}) failed; rolled back")
            raise

        await self.db.refresh(snapshot)
        logger.info(
            f"Snapshot {snapshot.id} published for {jurisdiction} with "
            f"{len(included_ids)} rule versions; project {project_id} now points at it"
        )
        return snapshot

    async def get_snapshot(self, snapshot_id: UUID) -> Snapshot:
        snapshot = await self.db.get(Snapshot, snapshot_id)
        if not snapshot:
            raise KnowledgeBaseError(ErrorCode.SNAPSHOT_NOT_FOUND, f"Snapshot {snapshot_id} not found")
        return snapshot

    async def list_snapshots(self, jurisdiction: str) -> List[Snapshot]:
        result = await self.db.execute(
            select(Snapshot)
            .where(Snapshot.jurisdiction == jurisdiction)
            .order_by(desc(Snapshot.published_at))
        )
        return list(result.scalars().all())

    async def search_kb(self, snapshot_id: UUID, jurisdiction: str, query: str) -> KbSearchResult:
        """
        Keyword search restricted to the snapshot's frozen rule versions.

        A version matches when every whitespace token of the query is a
        case-insensitive substring of its content; an empty query matches all.
        Results keep the snapshot's own ordering.
        """
        snapshot = await self.get_snapshot(snapshot_id)
        if snapshot.jurisdiction != jurisdiction:
            raise KnowledgeBaseError(
                ErrorCode.JURISDICTION_MISMATCH,
                f"Snapshot {snapshot_id} belongs to {snapshot.jurisdiction}, not {jurisdiction}",
            )

        included_ids = list(snapshot.included_rule_version_ids or [])
        if not included_ids:
            return KbSearchResult(items=[])

        result = await self.db.execute(
            select(RuleVersion).where(RuleVersion.id.in_([UUID(i) for i in included_ids]))
        )
        by_id = {str(rv.id): rv for rv in result.scalars().all()}

        tokens = tokenize(query)
        items = []
        for rule_version_id in included_ids:
            rule_version = by_id.get(rule_version_id)
            if rule_version is None:
                continue
            haystack = rule_version.content.lower()
            if not all(token in haystack for token in tokens):
                continue
            items.append(KbSearchItem(
                rule_version_id=rule_version.id,
                excerpt=rule_version.content[:settings.SEARCH_EXCERPT_LENGTH],
            ))
        return KbSearchResult(items=items)
