from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String, Text

from approval_flow.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Template(Base):
    __tablename__ = "templates"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    form_schema = Column(JSON, nullable=False, default=dict)
    workflow_snapshot = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
