from fastapi import APIRouter

from src.context.router import router as context_router
from src.rules.router import router as rules_router
from src.snapshots.router import router as snapshots_router
from src.review.router import router as review_router
from src.assistant.router import router as assistant_router
from src.audit.router import router as audit_router

api_router = APIRouter()

api_router.include_router(context_router)
api_router.include_router(rules_router)
api_router.include_router(snapshots_router)
api_router.include_router(review_router)
api_router.include_router(assistant_router)
api_router.include_router(audit_router)
