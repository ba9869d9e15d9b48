from enum import Enum
from sqlalchemy import Column, String, Uuid
from src.database import Base
from src.shared.models import AuditMixin, JSONType, value_enum


class AuditEventType(str, Enum):
    RULE_CREATED = "RULE_CREATED"
    RULE_VERSION_CREATED = "RULE_VERSION_CREATED"
    RULE_VERSION_APPROVED = "RULE_VERSION_APPROVED"
    SNAPSHOT_PUBLISHED = "SNAPSHOT_PUBLISHED"
    CHANGE_CANDIDATE_CREATED = "CHANGE_CANDIDATE_CREATED"
    REVIEW_TASK_CREATED = "REVIEW_TASK_CREATED"
    REVIEW_DECIDED = "REVIEW_DECIDED"


class AuditEvent(Base, AuditMixin):
    __tablename__ = "audit_events"

    project_id = Column(String, nullable=True, index=True)
    event_type = Column(value_enum(AuditEventType), nullable=False)
    actor = Column(String, nullable=True)
    subject_id = Column(Uuid(as_uuid=True), nullable=True)
    subject_type = Column(String, nullable=True)  # "rule" | "rule_version" | "snapshot" | "change_candidate" | "review_task"
    detail = Column(JSONType, nullable=True)
