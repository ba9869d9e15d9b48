from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.agents.answer.agent import build_policy_safe_answer
from src.assistant.schemas import AnswerRequest, AnswerResult, AnswerOrchestrator
from src.assistant.service import AnswerService

router = APIRouter(prefix="/projects", tags=["assistant"])


def get_answer_orchestrator() -> AnswerOrchestrator:
    """Dependency so hosts can plug in their own orchestrator."""
    return build_policy_safe_answer


@router.post("/{project_id}/answer", response_model=AnswerResult)
async def answer_question(
    project_id: str,
    request: AnswerRequest,
    db: AsyncSession = Depends(get_db),
    orchestrator: AnswerOrchestrator = Depends(get_answer_orchestrator),
):
    service = AnswerService(db, orchestrator=orchestrator)
    return await service.answer(project_id, request.question)
