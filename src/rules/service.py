import logging
from typing import List
from uuid import UUID

from sqlalchemy import select, desc, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.audit.models import AuditEventType
from src.audit.service import AuditService
from src.rules.models import Rule, RuleVersion, RuleVersionStatus
from src.rules.schemas import RuleCreate, RuleVersionCreate
from src.shared.errors import ErrorCode, KnowledgeBaseError
from src.shared.models import utcnow

logger = logging.getLogger(__name__)


class RuleService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_rule(self, rule_in: RuleCreate) -> Rule:
        # Duplicate (jurisdiction, topic_key) pairs are allowed
        rule = Rule(
            project_id=rule_in.project_id,
            jurisdiction=rule_in.jurisdiction,
            topic_key=rule_in.topic_key,
        )
        self.db.add(rule)
        await self.db.flush()

        self.audit.record(
            AuditEventType.RULE_CREATED,
            project_id=rule.project_id,
            subject_id=rule.id,
            subject_type="rule",
            detail={"jurisdiction": rule.jurisdiction, "topic_key": rule.topic_key},
        )
        await self.db.commit()
        await self.db.refresh(rule)
        logger.info(f"Rule {rule.id} created for {rule.jurisdiction}/{rule.topic_key}")
        return rule

    async def get_rule(self, rule_id: UUID) -> Rule:
        rule = await self.db.get(Rule, rule_id)
        if not rule:
            raise KnowledgeBaseError(ErrorCode.RULE_NOT_FOUND, f"Rule {rule_id} not found")
        return rule

    async def _lock_rule(self, rule_id: UUID) -> Rule:
        """Load the rule row FOR UPDATE so concurrent allocators queue behind each other."""
        result = await self.db.execute(
            select(Rule).where(Rule.id == rule_id).with_for_update()
        )
        rule = result.scalar_one_or_none()
        if not rule:
            raise KnowledgeBaseError(ErrorCode.RULE_NOT_FOUND, f"Rule {rule_id} not found")
        return rule

    async def _next_version(self, rule_id: UUID) -> int:
        result = await self.db.execute(
            select(func.max(RuleVersion.version)).where(RuleVersion.rule_id == rule_id)
        )
        current = result.scalar_one_or_none()
        return (current or 0) + 1

    async def upsert_rule_version(self, rule_id: UUID, version_in: RuleVersionCreate) -> RuleVersion:
        """
        Append a new draft version to a rule's history.

        The version number is max(existing) + 1. Allocation runs under a row lock
        on the rule and is backed by the (rule_id, version) unique constraint; a
        collision rolls back and re-reads the max, up to VERSION_ALLOCATION_RETRIES.
        """
        if not version_in.source_refs:
            raise KnowledgeBaseError(
                ErrorCode.SOURCE_REFS_REQUIRED,
                "A rule version must cite at least one source document.",
            )
        source_refs = [ref.model_dump(exclude_none=True) for ref in version_in.source_refs]

        for attempt in range(1, settings.VERSION_ALLOCATION_RETRIES + 1):
            rule = await self._lock_rule(rule_id)
            next_version = await self._next_version(rule_id)

            rule_version = RuleVersion(
                rule_id=rule.id,
                jurisdiction=rule.jurisdiction,
                topic_key=rule.topic_key,
                version=next_version,
                content=version_in.content,
                status=RuleVersionStatus.DRAFT,
                source_refs=source_refs,
            )
            self.db.add(rule_version)
            try:
                await self.db.flush()
                self.audit.record(
                    AuditEventType.RULE_VERSION_CREATED,
                    project_id=rule.project_id,
                    subject_id=rule_version.id,
                    subject_type="rule_version",
                    detail={"rule_id": str(rule.id), "version": next_version},
                )
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.warning(
                    f"Version {next_version} of rule {rule_id} taken concurrently "
                    f"(attempt {attempt}/{settings.VERSION_ALLOCATION_RETRIES})"
                )
                continue

            await self.db.refresh(rule_version)
            logger.info(f"Rule version {rule_version.id} (v{next_version}) drafted for rule {rule_id}")
            return rule_version

        raise KnowledgeBaseError(
            ErrorCode.VERSION_CONFLICT,
            f"Could not allocate a version for rule {rule_id} after "
            f"{settings.VERSION_ALLOCATION_RETRIES} attempts",
        )

    async def get_rule_version(self, rule_version_id: UUID) -> RuleVersion:
        rule_version = await self.db.get(RuleVersion, rule_version_id)
        if not rule_version:
            raise KnowledgeBaseError(
                ErrorCode.RULE_VERSION_NOT_FOUND, f"Rule version {rule_version_id} not found"
            )
        return rule_version

    async def list_rule_versions(self, rule_id: UUID) -> List[RuleVersion]:
        await self.get_rule(rule_id)
        result = await self.db.execute(
            select(RuleVersion)
            .where(RuleVersion.rule_id == rule_id)
            .order_by(desc(RuleVersion.version))
        )
        return list(result.scalars().all())

    async def approve_rule_version(self, rule_version_id: UUID, approver: str) -> RuleVersion:
        """
        Promote a draft to approved. One-way: there is no reject or rollback.
        Re-approving records the latest approver and timestamp.
        """
        rule_version = await self.get_rule_version(rule_version_id)
        rule = await self.db.get(Rule, rule_version.rule_id)

        rule_version.status = RuleVersionStatus.APPROVED
        rule_version.approved_by = approver
        rule_version.approved_at = utcnow()

        self.audit.record(
            AuditEventType.RULE_VERSION_APPROVED,
            project_id=rule.project_id if rule else None,
            actor=approver,
            subject_id=rule_version.id,
            subject_type="rule_version",
            detail={"version": rule_version.version, "jurisdiction": rule_version.jurisdiction},
        )
        await self.db.commit()
        await self.db.refresh(rule_version)
        logger.info(f"Rule version {rule_version.id} approved by {approver}")
        return rule_version
