from enum import Enum
from sqlalchemy import Column, String, Text, ForeignKey, DateTime
from src.database import Base
from src.shared.models import AuditMixin, JSONType, utcnow, value_enum


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class ReviewRole(str, Enum):
    CURATOR = "curator"
    EXPERT = "expert"

class ReviewTaskStatus(str, Enum):
    OPEN = "open"
    DECIDED = "decided"

class ReviewDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


def role_for_risk(risk_level: RiskLevel) -> ReviewRole:
    """Segregation of duties: only experts may sign off high-risk changes."""
    return ReviewRole.EXPERT if risk_level == RiskLevel.HIGH else ReviewRole.CURATOR


class ChangeCandidate(Base, AuditMixin):
    """A proposed set of edits. Its disposition lives entirely in its review tasks."""
    __tablename__ = "change_candidates"

    project_id = Column(String, nullable=False, index=True)
    jurisdiction = Column(String, nullable=False, index=True)
    detected_at = Column(DateTime, default=utcnow, nullable=False)
    diff_summary = Column(Text, nullable=False)
    risk_level = Column(value_enum(RiskLevel), nullable=False)
    proposed_rule_version_ids = Column(JSONType, nullable=False)


class ReviewTask(Base, AuditMixin):
    __tablename__ = "review_tasks"

    change_candidate_id = Column(ForeignKey("change_candidates.id"), nullable=False, index=True)
    status = Column(value_enum(ReviewTaskStatus), default=ReviewTaskStatus.OPEN, nullable=False, index=True)

    # Derived once from the candidate's risk level, never re-derived
    assigned_role = Column(value_enum(ReviewRole), nullable=False)

    decision = Column(value_enum(ReviewDecision), nullable=True)
    decided_at = Column(DateTime, nullable=True)
    decided_by = Column(String, nullable=True)
