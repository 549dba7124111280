from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.schema import Index

from approval_flow.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApprovalRequest(Base):
    __tablename__ = "approval_requests"

    id = Column(String(36), primary_key=True, index=True)
    title = Column(String, nullable=False)
    requester_id = Column(String, nullable=False, index=True)

    # Always equal to the status derived from flow_process.
    status = Column(String, nullable=False, default="pending", index=True)

    flow_process = Column(JSON, nullable=False)
    form_data = Column(JSON, nullable=False, default=dict)

    # Optimistic concurrency token, bumped on every flow write.
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return f"<ApprovalRequest {self.id} [{self.status}]>"


class ApprovalLog(Base):
    """Append-only audit trail for an approval request."""

    __tablename__ = "approval_logs"

    id = Column(String(36), primary_key=True)
    approval_id = Column(
        String(36),
        ForeignKey("approval_requests.id", ondelete="CASCADE"),
        nullable=False,
    )
    actor_id = Column(String, nullable=False)
    action_type = Column(String, nullable=False)
    content = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_approval_logs_approval_created", "approval_id", "created_at"),
    )
