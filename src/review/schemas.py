from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict

from src.review.models import RiskLevel, ReviewRole, ReviewTaskStatus, ReviewDecision


class ChangeCandidateCreate(BaseModel):
    project_id: str
    jurisdiction: str
    diff_summary: str
    risk_level: RiskLevel
    proposed_rule_version_ids: List[UUID] = Field(
        default=[], description="Rule versions this change would promote"
    )


class ChangeCandidateResponse(BaseModel):
    id: UUID
    project_id: str
    jurisdiction: str
    detected_at: datetime
    diff_summary: str
    risk_level: RiskLevel
    proposed_rule_version_ids: List[UUID]

    model_config = ConfigDict(from_attributes=True)


class ReviewTaskCreated(BaseModel):
    id: UUID
    assigned_role: ReviewRole

    model_config = ConfigDict(from_attributes=True)


class ReviewTaskResponse(BaseModel):
    id: UUID
    change_candidate_id: UUID
    status: ReviewTaskStatus
    assigned_role: ReviewRole
    decision: Optional[ReviewDecision] = None
    decided_at: Optional[datetime] = None
    decided_by: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SubmitDecisionRequest(BaseModel):
    decision: ReviewDecision
    decided_by_role: ReviewRole
    decided_by: str


class DecisionResponse(BaseModel):
    id: UUID
    status: ReviewTaskStatus


class PublishReadinessRequest(BaseModel):
    jurisdiction: str


class PublishReadinessResponse(BaseModel):
    published: bool = True
