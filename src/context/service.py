import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.context.models import AllowedScope, UserContext
from src.context.schemas import UserContextUpdate

logger = logging.getLogger(__name__)


def default_context(project_id: str) -> UserContext:
    """Transient context for a project that has never been configured."""
    return UserContext(
        project_id=project_id,
        locale=settings.DEFAULT_LOCALE,
        jurisdiction=settings.DEFAULT_JURISDICTION,
        allowed_scope=AllowedScope(settings.DEFAULT_ALLOWED_SCOPE),
        kb_snapshot_id=None,
    )


class UserContextService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_context(self, project_id: str) -> UserContext:
        """Return the stored context, or synthesized defaults without persisting them."""
        context = await self.db.get(UserContext, project_id)
        if context is None:
            return default_context(project_id)
        return context

    async def set_user_context(self, project_id: str, context_in: UserContextUpdate) -> UserContext:
        """Upsert locale, jurisdiction and scope. The snapshot pointer is left alone."""
        context = await self.db.get(UserContext, project_id)
        if context is None:
            context = UserContext(project_id=project_id, kb_snapshot_id=None)
            self.db.add(context)

        context.locale = context_in.locale
        context.jurisdiction = context_in.jurisdiction
        context.allowed_scope = context_in.allowed_scope

        await self.db.commit()
        await self.db.refresh(context)
        logger.info(f"User context for project {project_id} set to {context.jurisdiction}/{context.allowed_scope.value}")
        return context

    async def point_to_snapshot(self, project_id: str, snapshot_id: UUID) -> UserContext:
        """Repoint the active snapshot inside the caller's transaction (no commit).

        Projects without a stored context get one built from the defaults so the
        pointer is never lost.
        """
        context: Optional[UserContext] = await self.db.get(UserContext, project_id)
        if context is None:
            context = default_context(project_id)
            self.db.add(context)
        context.kb_snapshot_id = snapshot_id
        await self.db.flush()
        return context
