from sqlalchemy import Column, String, Date, DateTime
from src.database import Base
from src.shared.models import UUIDMixin, JSONType, utcnow


class Snapshot(Base, UUIDMixin):
    """Immutable published bundle of approved rule versions for one jurisdiction.

    ``included_rule_version_ids`` is fixed at creation (string ids, ordered by id)
    and no code path updates a snapshot row afterwards.
    """
    __tablename__ = "snapshots"

    jurisdiction = Column(String, nullable=False, index=True)
    as_of_date = Column(Date, nullable=False)
    included_rule_version_ids = Column(JSONType, nullable=False)
    published_at = Column(DateTime, default=utcnow, nullable=False)
