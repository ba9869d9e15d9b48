from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.context.schemas import UserContextUpdate, UserContextResponse
from src.context.service import UserContextService

router = APIRouter(prefix="/projects", tags=["context"])


@router.get("/{project_id}/context", response_model=UserContextResponse)
async def get_user_context(
    project_id: str,
    db: AsyncSession = Depends(get_db),
):
    service = UserContextService(db)
    return await service.get_user_context(project_id)


@router.put("/{project_id}/context", response_model=UserContextResponse)
async def set_user_context(
    project_id: str,
    context: UserContextUpdate,
    db: AsyncSession = Depends(get_db),
):
    service = UserContextService(db)
    return await service.set_user_context(project_id, context)
