import logging
from typing import List, Optional, Set
from uuid import UUID

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from src.audit.models import AuditEventType
from src.audit.service import AuditService
from src.review.models import (
    ChangeCandidate,
    ReviewTask,
    ReviewTaskStatus,
    ReviewDecision,
    ReviewRole,
    RiskLevel,
    role_for_risk,
)
from src.review.schemas import ChangeCandidateCreate
from src.rules.models import RuleVersion, RuleVersionStatus
from src.shared.errors import ErrorCode, KnowledgeBaseError
from src.shared.models import utcnow

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_change_candidate(self, candidate_in: ChangeCandidateCreate) -> ChangeCandidate:
        # Pure record creation: proposed ids are not checked against the store here,
        # publish_if_ready is where they must resolve to approved versions.
        candidate = ChangeCandidate(
            project_id=candidate_in.project_id,
            jurisdiction=candidate_in.jurisdiction,
            diff_summary=candidate_in.diff_summary,
            risk_level=candidate_in.risk_level,
            proposed_rule_version_ids=[str(i) for i in candidate_in.proposed_rule_version_ids],
        )
        self.db.add(candidate)
        await self.db.flush()

        self.audit.record(
            AuditEventType.CHANGE_CANDIDATE_CREATED,
            project_id=candidate.project_id,
            subject_id=candidate.id,
            subject_type="change_candidate",
            detail={"risk_level": candidate.risk_level.value, "jurisdiction": candidate.jurisdiction},
        )
        await self.db.commit()
        await self.db.refresh(candidate)
        logger.info(f"Change candidate {candidate.id} ({candidate.risk_level.value} risk) recorded for {candidate.jurisdiction}")
        return candidate

    async def get_change_candidate(self, change_candidate_id: UUID) -> ChangeCandidate:
        candidate = await self.db.get(ChangeCandidate, change_candidate_id)
        if not candidate:
            raise KnowledgeBaseError(
                ErrorCode.CHANGE_CANDIDATE_NOT_FOUND, f"Change candidate {change_candidate_id} not found"
            )
        return candidate

    async def create_review_task(self, change_candidate_id: UUID) -> ReviewTask:
        candidate = await self.get_change_candidate(change_candidate_id)

        task = ReviewTask(
            change_candidate_id=candidate.id,
            status=ReviewTaskStatus.OPEN,
            assigned_role=role_for_risk(candidate.risk_level),
        )
        self.db.add(task)
        await self.db.flush()

        self.audit.record(
            AuditEventType.REVIEW_TASK_CREATED,
            project_id=candidate.project_id,
            subject_id=task.id,
            subject_type="review_task",
            detail={"change_candidate_id": str(candidate.id), "assigned_role": task.assigned_role.value},
        )
        await self.db.commit()
        await self.db.refresh(task)
        logger.info(f"Review task {task.id} opened for candidate {candidate.id}, assigned to {task.assigned_role.value}")
        return task

    async def get_review_task(self, review_task_id: UUID) -> ReviewTask:
        task = await self.db.get(ReviewTask, review_task_id)
        if not task:
            raise KnowledgeBaseError(ErrorCode.REVIEW_TASK_NOT_FOUND, f"Review task {review_task_id} not found")
        return task

    async def list_review_tasks(self, status: Optional[ReviewTaskStatus] = None) -> List[ReviewTask]:
        stmt = select(ReviewTask).order_by(ReviewTask.created_at)
        if status is not None:
            stmt = stmt.where(ReviewTask.status == status)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def submit_decision(
        self,
        review_task_id: UUID,
        decision: ReviewDecision,
        decided_by_role: ReviewRole,
        decided_by: str,
    ) -> ReviewTask:
        """
        Record the single, final decision on a review task.

        A curator may reject a high-risk change but never approve one. The
        open -> decided transition is a conditional update, so of two racing
        decisions exactly one lands.
        """
        task = await self.get_review_task(review_task_id)
        candidate = await self.get_change_candidate(task.change_candidate_id)

        if (
            candidate.risk_level == RiskLevel.HIGH
            and decision == ReviewDecision.APPROVE
            and decided_by_role != ReviewRole.EXPERT
        ):
            logger.warning(
                f"{decided_by} ({decided_by_role.value}) tried to approve high-risk candidate {candidate.id}"
            )
            raise KnowledgeBaseError(
                ErrorCode.FORBIDDEN_ROLE,
                "Only an expert may approve a high-risk change.",
            )

        result = await self.db.execute(
            update(ReviewTask)
            .where(
                ReviewTask.id == review_task_id,
                ReviewTask.status == ReviewTaskStatus.OPEN,
            )
            .values(
                status=ReviewTaskStatus.DECIDED,
                decision=decision,
                decided_at=utcnow(),
                decided_by=decided_by,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise KnowledgeBaseError(
                ErrorCode.REVIEW_TASK_ALREADY_DECIDED,
                f"Review task {review_task_id} has already been decided",
            )

        self.audit.record(
            AuditEventType.REVIEW_DECIDED,
            project_id=candidate.project_id,
            actor=decided_by,
            subject_id=task.id,
            subject_type="review_task",
            detail={"decision": decision.value, "decided_by_role": decided_by_role.value},
        )
        await self.db.commit()
        await self.db.refresh(task)
        logger.info(f"Review task {task.id} decided: {decision.value} by {decided_by} ({decided_by_role.value})")
        return task

    async def _count_undecided_tasks(self) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(ReviewTask).where(ReviewTask.status != ReviewTaskStatus.DECIDED)
        )
        return result.scalar_one()

    async def _approved_subset(self, rule_version_ids: Set[UUID]) -> Set[UUID]:
        if not rule_version_ids:
            return set()
        result = await self.db.execute(
            select(RuleVersion.id).where(
                RuleVersion.id.in_(list(rule_version_ids)),
                RuleVersion.status == RuleVersionStatus.APPROVED,
            )
        )
        return set(result.scalars().all())

    async def publish_if_ready(self, jurisdiction: str) -> bool:
        """
        Gate a publish on the review subsystem being settled.

        1. No review task anywhere may still be open. This is deliberately global:
           an open task in any jurisdiction means review is mid-flight.
        2. Every rule version proposed by an approved change in this jurisdiction
           must itself be approved. Approving a change does not promote its
           versions; approve_rule_version still has to run.
        """
        open_count = await self._count_undecided_tasks()
        if open_count > 0:
            logger.warning(f"Publish for {jurisdiction} not ready: {open_count} review task(s) still open")
            raise KnowledgeBaseError(ErrorCode.NOT_READY, f"{open_count} review task(s) still open")

        result = await self.db.execute(
            select(ChangeCandidate.proposed_rule_version_ids)
            .join(ReviewTask, ReviewTask.change_candidate_id == ChangeCandidate.id)
            .where(
                ReviewTask.decision == ReviewDecision.APPROVE,
                ChangeCandidate.jurisdiction == jurisdiction,
            )
        )
        proposed: Set[UUID] = set()
        for proposed_ids in result.scalars().all():
            proposed.update(UUID(i) for i in proposed_ids or [])

        unapproved = proposed - await self._approved_subset(proposed)
        if unapproved:
            logger.warning(
                f"Publish for {jurisdiction} not ready: {len(unapproved)} proposed rule version(s) not approved"
            )
            raise KnowledgeBaseError(
                ErrorCode.NOT_READY,
                "Approved changes reference rule versions that are not approved: "
                + ", ".join(sorted(str(i) for i in unapproved)),
            )

        return True
