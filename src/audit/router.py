from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.audit.schemas import AuditEventResponse
from src.audit.service import AuditService

router = APIRouter(prefix="/projects", tags=["audit"])


@router.get("/{project_id}/audit", response_model=List[AuditEventResponse])
async def list_audit_events(
    project_id: str,
    db: AsyncSession = Depends(get_db),
):
    service = AuditService(db)
    return await service.list_events(project_id)
