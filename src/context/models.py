from enum import Enum
from sqlalchemy import Column, String, ForeignKey
from src.database import Base
from src.shared.models import value_enum


class AllowedScope(str, Enum):
    EDUCATION_ONLY = "education_only"
    GENERIC_INFO = "generic_info"
    ESCALATION_REQUIRED = "escalation_required"


class UserContext(Base):
    """Per-project pointer to locale, jurisdiction, scope and active snapshot."""
    __tablename__ = "user_contexts"

    project_id = Column(String, primary_key=True)
    locale = Column(String, nullable=False)
    jurisdiction = Column(String, nullable=False)
    allowed_scope = Column(value_enum(AllowedScope), nullable=False)

    # Null means no active snapshot: answers must refuse
    kb_snapshot_id = Column(ForeignKey("snapshots.id"), nullable=True)
