from enum import Enum
from sqlalchemy import Column, String, Text, ForeignKey, Integer, DateTime, UniqueConstraint, Index
from src.database import Base
from src.shared.models import AuditMixin, JSONType, value_enum


class RuleVersionStatus(str, Enum):
    DRAFT = "draft"
    APPROVED = "approved"


class Rule(Base, AuditMixin):
    """Identity of a recurring topic within a jurisdiction. Never mutated or deleted."""
    __tablename__ = "rules"

    project_id = Column(String, nullable=False, index=True)
    jurisdiction = Column(String, nullable=False)
    topic_key = Column(String, nullable=False)


class RuleVersion(Base, AuditMixin):
    __tablename__ = "rule_versions"
    __table_args__ = (
        UniqueConstraint("rule_id", "version", name="uq_rule_versions_rule_id_version"),
        Index("ix_rule_versions_jurisdiction_status", "jurisdiction", "status"),
    )

    rule_id = Column(ForeignKey("rules.id"), nullable=False, index=True)

    # Denormalized from the Rule at creation time
    jurisdiction = Column(String, nullable=False)
    topic_key = Column(String, nullable=False)

    version = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    status = Column(value_enum(RuleVersionStatus), default=RuleVersionStatus.DRAFT, nullable=False)

    # [{"source_document_id": ..., "excerpt": ...}], never empty
    source_refs = Column(JSONType, nullable=False)

    approved_by = Column(String, nullable=True)
    approved_at = Column(DateTime, nullable=True)
