from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from src.audit.models import AuditEvent, AuditEventType


class AuditService:
    """Append-only governance trail. Writes join the caller's transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def record(
        self,
        event_type: AuditEventType,
        project_id: Optional[str] = None,
        actor: Optional[str] = None,
        subject_id: Optional[UUID] = None,
        subject_type: Optional[str] = None,
        detail: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        event = AuditEvent(
            project_id=project_id,
            event_type=event_type,
            actor=actor,
            subject_id=subject_id,
            subject_type=subject_type,
            detail=detail,
        )
        self.db.add(event)
        return event

    async def list_events(self, project_id: str) -> List[AuditEvent]:
        stmt = (
            select(AuditEvent)
            .where(AuditEvent.project_id == project_id)
            .order_by(desc(AuditEvent.created_at))
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
