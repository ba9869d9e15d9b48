from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict


class PublishSnapshotRequest(BaseModel):
    project_id: str
    jurisdiction: str
    as_of_date: date


class SnapshotResponse(BaseModel):
    id: UUID
    jurisdiction: str
    as_of_date: date
    included_rule_version_ids: List[UUID]
    published_at: datetime

    model_config = ConfigDict(from_attributes=True)


class KbSearchRequest(BaseModel):
    jurisdiction: str
    query: str = ""


class KbSearchItem(BaseModel):
    rule_version_id: UUID
    excerpt: Optional[str] = None


class KbSearchResult(BaseModel):
    items: List[KbSearchItem] = []
