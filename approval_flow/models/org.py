from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String

from approval_flow.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Department(Base):
    __tablename__ = "departments"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String, nullable=False)

    # users and departments reference each other; this side is added after both tables exist.
    manager_id = Column(
        String(36),
        ForeignKey(
            "users.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_departments_manager_id_users",
        ),
        nullable=True,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class User(Base):
    """Directory entry for a person who can request or approve.

    `id` is the same opaque string used as a token subject and as a step's
    `approver_id`. No credentials are stored here.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, index=True)
    email = Column(String, nullable=False, unique=True)
    full_name = Column(String, nullable=False)
    position = Column(String, nullable=True)
    department_id = Column(
        String(36),
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
    )
    status = Column(String, nullable=False, default="ACTIVE", index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        CheckConstraint("status IN ('ACTIVE', 'INACTIVE')", name="ck_users_status"),
    )

    def __repr__(self) -> str:
        return f"<User {self.id} {self.full_name}>"
