from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict

from src.rules.models import RuleVersionStatus


class SourceRef(BaseModel):
    source_document_id: str = Field(..., description="Identifier of the reviewed source document")
    excerpt: Optional[str] = Field(None, description="Supporting passage from the source")


class RuleCreate(BaseModel):
    project_id: str
    jurisdiction: str
    topic_key: str


class RuleResponse(BaseModel):
    id: UUID
    project_id: str
    jurisdiction: str
    topic_key: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RuleVersionCreate(BaseModel):
    content: str
    # Emptiness is checked by the service so it surfaces as SOURCE_REFS_REQUIRED
    source_refs: List[SourceRef] = []


class RuleVersionResponse(BaseModel):
    id: UUID
    rule_id: UUID
    jurisdiction: str
    topic_key: str
    version: int
    content: str
    status: RuleVersionStatus
    source_refs: List[SourceRef]
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ApproveRuleVersionRequest(BaseModel):
    approver: str


class RuleVersionApprovalResponse(BaseModel):
    rule_version_id: UUID
    status: RuleVersionStatus
