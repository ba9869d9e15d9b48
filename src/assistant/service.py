import logging
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from src.agents.answer.agent import build_policy_safe_answer
from src.agents.answer.nodes import refusal
from src.assistant.schemas import (
    AnswerEnvelope,
    AnswerOrchestrator,
    AnswerResult,
    KbSearchFn,
    RegulatoryContext,
)
from src.context.models import UserContext
from src.context.service import UserContextService
from src.snapshots.schemas import KbSearchResult
from src.snapshots.service import SnapshotService
from src.shared.errors import KnowledgeBaseError

logger = logging.getLogger(__name__)


async def _no_results(query: str) -> KbSearchResult:
    return KbSearchResult(items=[])


class AnswerService:
    """
    Fail-closed gateway between a project and the answer orchestrator.

    Without an active snapshot the orchestrator gets an empty snapshot id and a
    search that never returns anything, so the result is a refusal whatever the
    orchestrator does internally. Its output is checked against the citation
    contract before it is returned.
    """

    def __init__(self, db: AsyncSession, orchestrator: AnswerOrchestrator = build_policy_safe_answer):
        self.db = db
        self.orchestrator = orchestrator

    def _envelope(self, context: UserContext, kb_snapshot_id: str) -> AnswerEnvelope:
        return AnswerEnvelope(
            trace_id=f"trace_{uuid4().hex}",
            locale=context.locale,
            kb_snapshot_id=kb_snapshot_id,
            allowed_scope=context.allowed_scope,
            regulatory_context=RegulatoryContext(jurisdiction=context.jurisdiction),
        )

    def _bind_search(self, snapshot_id: UUID, jurisdiction: str, trace_id: str) -> KbSearchFn:
        snapshots = SnapshotService(self.db)

        async def kb_search(query: str) -> KbSearchResult:
            try:
                return await snapshots.search_kb(snapshot_id, jurisdiction, query)
            except KnowledgeBaseError as e:
                # e.g. the context's jurisdiction was changed after publishing
                logger.warning(f"[{trace_id}] search on snapshot {snapshot_id} failed: {e.code.value}")
                return KbSearchResult(items=[])

        return kb_search

    def _refuse(self, envelope: AnswerEnvelope, reason: str) -> AnswerResult:
        return AnswerResult(
            trace_id=envelope.trace_id,
            locale=envelope.locale,
            allowed_scope=envelope.allowed_scope,
            kb_snapshot_id=envelope.kb_snapshot_id or None,
            **refusal(reason),
        )

    def _enforce_contract(self, envelope: AnswerEnvelope, result: AnswerResult) -> AnswerResult:
        if result.refused:
            return result.model_copy(update={"citations": []})
        if not envelope.kb_snapshot_id:
            logger.error(f"[{envelope.trace_id}] orchestrator answered without a snapshot; refusing")
            return self._refuse(envelope, "no_snapshot")
        if not result.citations or any(
            c.kb_snapshot_id != envelope.kb_snapshot_id for c in result.citations
        ):
            logger.error(f"[{envelope.trace_id}] orchestrator broke the citation contract; refusing")
            return self._refuse(envelope, "citation_contract")
        return result

    async def answer(self, project_id: str, question: str) -> AnswerResult:
        context = await UserContextService(self.db).get_user_context(project_id)

        if context.kb_snapshot_id is None:
            envelope = self._envelope(context, "")
            kb_search = _no_results
        else:
            envelope = self._envelope(context, str(context.kb_snapshot_id))
            kb_search = self._bind_search(context.kb_snapshot_id, context.jurisdiction, envelope.trace_id)

        try:
            result = await self.orchestrator(envelope, question, kb_search)
        except Exception as e:
            logger.error(f"[{envelope.trace_id}] answer orchestrator failed for project {project_id}: {e}", exc_info=True)
            return self._refuse(envelope, "orchestrator_error")

        result = self._enforce_contract(envelope, result)
        logger.info(
            f"[{envelope.trace_id}] project {project_id} answered "
            f"(refused={result.refused}, citations={len(result.citations)})"
        )
        return result
