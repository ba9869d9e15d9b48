from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.review.models import ReviewTaskStatus
from src.review.schemas import (
    ChangeCandidateCreate,
    ChangeCandidateResponse,
    ReviewTaskCreated,
    ReviewTaskResponse,
    SubmitDecisionRequest,
    DecisionResponse,
    PublishReadinessRequest,
    PublishReadinessResponse,
)
from src.review.service import ReviewService
from src.shared.errors import KnowledgeBaseError

router = APIRouter(tags=["review"])


@router.post("/change-candidates", response_model=ChangeCandidateResponse)
async def create_change_candidate(
    candidate: ChangeCandidateCreate,
    db: AsyncSession = Depends(get_db),
):
    service = ReviewService(db)
    return await service.create_change_candidate(candidate)


@router.get("/change-candidates/{change_candidate_id}", response_model=ChangeCandidateResponse)
async def get_change_candidate(
    change_candidate_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = ReviewService(db)
    try:
        return await service.get_change_candidate(change_candidate_id)
    except KnowledgeBaseError as e:
        raise e.to_http_exception()


@router.post("/change-candidates/{change_candidate_id}/review-tasks", response_model=ReviewTaskCreated)
async def create_review_task(
    change_candidate_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = ReviewService(db)
    try:
        return await service.create_review_task(change_candidate_id)
    except KnowledgeBaseError as e:
        raise e.to_http_exception()


@router.get("/review-tasks", response_model=List[ReviewTaskResponse])
async def list_review_tasks(
    status: Optional[ReviewTaskStatus] = None,
    db: AsyncSession = Depends(get_db),
):
    service = ReviewService(db)
    return await service.list_review_tasks(status)


@router.get("/review-tasks/{review_task_id}", response_model=ReviewTaskResponse)
async def get_review_task(
    review_task_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = ReviewService(db)
    try:
        return await service.get_review_task(review_task_id)
    except KnowledgeBaseError as e:
        raise e.to_http_exception()


@router.post("/review-tasks/{review_task_id}/decision", response_model=DecisionResponse)
async def submit_decision(
    review_task_id: UUID,
    request: SubmitDecisionRequest,
    db: AsyncSession = Depends(get_db),
):
    service = ReviewService(db)
    try:
        task = await service.submit_decision(
            review_task_id, request.decision, request.decided_by_role, request.decided_by
        )
    except KnowledgeBaseError as e:
        raise e.to_http_exception()
    return DecisionResponse(id=task.id, status=task.status)


@router.post("/review/publish-readiness", response_model=PublishReadinessResponse)
async def publish_if_ready(
    request: PublishReadinessRequest,
    db: AsyncSession = Depends(get_db),
):
    service = ReviewService(db)
    try:
        await service.publish_if_ready(request.jurisdiction)
    except KnowledgeBaseError as e:
        raise e.to_http_exception()
    return PublishReadinessResponse(published=True)
