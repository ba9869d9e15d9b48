from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.snapshots.schemas import (
    PublishSnapshotRequest,
    SnapshotResponse,
    KbSearchRequest,
    KbSearchResult,
)
from src.snapshots.service import SnapshotService
from src.shared.errors import KnowledgeBaseError

router = APIRouter(prefix="/snapshots", tags=["snapshots"])


@router.post("", response_model=SnapshotResponse)
async def publish_snapshot(
    request: PublishSnapshotRequest,
    db: AsyncSession = Depends(get_db),
):
    service = SnapshotService(db)
    try:
        return await service.publish_snapshot(request.project_id, request.jurisdiction, request.as_of_date)
    except KnowledgeBaseError as e:
        raise e.to_http_exception()


@router.get("", response_model=List[SnapshotResponse])
async def list_snapshots(
    jurisdiction: str,
    db: AsyncSession = Depends(get_db),
):
    service = SnapshotService(db)
    return await service.list_snapshots(jurisdiction)


@router.get("/{snapshot_id}", response_model=SnapshotResponse)
async def get_snapshot(
    snapshot_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = SnapshotService(db)
    try:
        return await service.get_snapshot(snapshot_id)
    except KnowledgeBaseError as e:
        raise e.to_http_exception()


@router.post("/{snapshot_id}/search", response_model=KbSearchResult)
async def search_kb(
    snapshot_id: UUID,
    request: KbSearchRequest,
    db: AsyncSession = Depends(get_db),
):
    service = SnapshotService(db)
    try:
        return await service.search_kb(snapshot_id, request.jurisdiction, request.query)
    except KnowledgeBaseError as e:
        raise e.to_http_exception()
