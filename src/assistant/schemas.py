from typing import Awaitable, Callable, List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from src.context.models import AllowedScope
from src.snapshots.schemas import KbSearchResult


class RegulatoryContext(BaseModel):
    jurisdiction: str


class AnswerEnvelope(BaseModel):
    trace_id: str
    locale: str
    kb_snapshot_id: str = Field("", description="Empty when the project has no active snapshot")
    allowed_scope: AllowedScope
    regulatory_context: RegulatoryContext


class Citation(BaseModel):
    kb_snapshot_id: str
    rule_version_id: UUID
    excerpt: Optional[str] = None


class AnswerResult(BaseModel):
    trace_id: str
    refused: bool
    refusal_reason: Optional[str] = None
    answer: Optional[str] = None
    citations: List[Citation] = []
    locale: str
    allowed_scope: AllowedScope
    kb_snapshot_id: Optional[str] = None


class AnswerRequest(BaseModel):
    question: str


# kb_search(query) -> {items}; the only thing an orchestrator may call
KbSearchFn = Callable[[str], Awaitable[KbSearchResult]]

# orchestrator(envelope, question, kb_search) -> AnswerResult
AnswerOrchestrator = Callable[[AnswerEnvelope, str, KbSearchFn], Awaitable[AnswerResult]]
