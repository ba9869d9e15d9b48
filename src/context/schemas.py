from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict

from src.context.models import AllowedScope


class UserContextUpdate(BaseModel):
    locale: str
    jurisdiction: str
    allowed_scope: AllowedScope


class UserContextResponse(BaseModel):
    project_id: str
    locale: str
    jurisdiction: str
    allowed_scope: AllowedScope
    kb_snapshot_id: Optional[UUID] = None

    model_config = ConfigDict(from_attributes=True)
