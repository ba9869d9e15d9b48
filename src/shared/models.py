import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, JSON, Uuid, Enum as SAEnum
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on Postgres, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UUIDMixin:
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

class CreatedAtMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False)

class AuditMixin(UUIDMixin, CreatedAtMixin):
    """UUID primary key plus creation timestamp for append-only records."""
    pass


def value_enum(enum_cls):
    """SQLAlchemy Enum that stores member values ("draft") rather than names."""
    return SAEnum(
        enum_cls,
        name=enum_cls.__name__.lower(),
        values_callable=lambda members: [m.value for m in members],
    )
