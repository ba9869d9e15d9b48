from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.rules.schemas import (
    RuleCreate,
    RuleResponse,
    RuleVersionCreate,
    RuleVersionResponse,
    ApproveRuleVersionRequest,
    RuleVersionApprovalResponse,
)
from src.rules.service import RuleService
from src.shared.errors import KnowledgeBaseError

router = APIRouter(tags=["rules"])


@router.post("/rules", response_model=RuleResponse)
async def create_rule(
    rule: RuleCreate,
    db: AsyncSession = Depends(get_db),
):
    service = RuleService(db)
    return await service.create_rule(rule)


@router.get("/rules/{rule_id}", response_model=RuleResponse)
async def get_rule(
    rule_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = RuleService(db)
    try:
        return await service.get_rule(rule_id)
    except KnowledgeBaseError as e:
        raise e.to_http_exception()


@router.post("/rules/{rule_id}/versions", response_model=RuleVersionResponse)
async def upsert_rule_version(
    rule_id: UUID,
    request: RuleVersionCreate,
    db: AsyncSession = Depends(get_db),
):
    service = RuleService(db)
    try:
        return await service.upsert_rule_version(rule_id, request)
    except KnowledgeBaseError as e:
        raise e.to_http_exception()


@router.get("/rules/{rule_id}/versions", response_model=List[RuleVersionResponse])
async def list_rule_versions(
    rule_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = RuleService(db)
    try:
        return await service.list_rule_versions(rule_id)
    except KnowledgeBaseError as e:
        raise e.to_http_exception()


@router.get("/rule-versions/{rule_version_id}", response_model=RuleVersionResponse)
async def get_rule_version(
    rule_version_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    service = RuleService(db)
    try:
        return await service.get_rule_version(rule_version_id)
    except KnowledgeBaseError as e:
        raise e.to_http_exception()


@router.post("/rule-versions/{rule_version_id}/approve", response_model=RuleVersionApprovalResponse)
async def approve_rule_version(
    rule_version_id: UUID,
    request: ApproveRuleVersionRequest,
    db: AsyncSession = Depends(get_db),
):
    service = RuleService(db)
    try:
        rule_version = await service.approve_rule_version(rule_version_id, request.approver)
    except KnowledgeBaseError as e:
        raise e.to_http_exception()
    return RuleVersionApprovalResponse(rule_version_id=rule_version.id, status=rule_version.status)
