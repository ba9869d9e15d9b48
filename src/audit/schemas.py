from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.audit.models import AuditEventType


class AuditEventResponse(BaseModel):
    id: UUID
    project_id: Optional[str] = None
    event_type: AuditEventType
    actor: Optional[str] = None
    subject_id: Optional[UUID] = None
    subject_type: Optional[str] = None
    detail: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
