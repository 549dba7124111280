import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from approval_flow.core.errors import ConflictError, NotFoundError
from approval_flow.database import SessionLocal
from approval_flow.models.org import Department, User

logger = logging.getLogger(__name__)

ACTIVE = "ACTIVE"
INACTIVE = "INACTIVE"


@dataclass(frozen=True)
class ManagerInfo:
    manager_id: str
    manager_name: str
    department_name: str


def _get_db() -> Session:
    return SessionLocal()


def create_department(name: str, *, manager_id: Optional[str] = None) -> Department:
    db = _get_db()
    try:
        if manager_id is not None and db.get(User, str(manager_id)) is None:
            raise NotFoundError("User not found")

        row = Department(id=str(uuid.uuid4()), name=name, manager_id=manager_id)
        db.add(row)
        db.commit()
        db.refresh(row)

        logger.info("Department created", extra={"department_id": row.id})
        return row
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def assign_manager(department_id: str, manager_id: str) -> Department:
    db = _get_db()
    try:
        department = db.get(Department, str(department_id))
        if department is None:
            raise NotFoundError("Department not found")
        if db.get(User, str(manager_id)) is None:
            raise NotFoundError("User not found")

        department.manager_id = str(manager_id)
        db.commit()
        db.refresh(department)

        logger.info(
            "Department manager assigned",
            extra={"department_id": department.id, "manager_id": department.manager_id},
        )
        return department
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def create_user(
    email: str,
    full_name: str,
    *,
    user_id: Optional[str] = None,
    position: Optional[str] = None,
    department_id: Optional[str] = None,
    status: str = ACTIVE,
) -> User:
    db = _get_db()
    try:
        if department_id is not None and db.get(Department, str(department_id)) is None:
            raise NotFoundError("Department not found")

        row = User(
            id=str(user_id) if user_id else str(uuid.uuid4()),
            email=email,
            full_name=full_name,
            position=position,
            department_id=department_id,
            status=status,
        )
        db.add(row)
        db.commit()
        db.refresh(row)

        logger.info("User created", extra={"user_id": row.id, "department_id": row.department_id})
        return row
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("User id or email already exists") from exc
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def list_users() -> List[User]:
    """Active users ordered by name, for picking approvers."""
    db = _get_db()
    try:
        return (
            db.query(User)
            .filter(User.status == ACTIVE)
            .order_by(User.full_name.asc(), User.id.asc())
            .all()
        )
    finally:
        db.close()


def get_manager(user_id: str) -> ManagerInfo:
    """Direct manager of the user's department."""
    db = _get_db()
    try:
        user = db.get(User, str(user_id))
        if user is None:
            raise NotFoundError("User not found")

        department = db.get(Department, user.department_id) if user.department_id else None
        if department is None or department.manager_id is None:
            raise NotFoundError("No manager assigned")

        manager = db.get(User, department.manager_id)
        if manager is None:
            raise NotFoundError("No manager assigned")

        return ManagerInfo(
            manager_id=manager.id,
            manager_name=manager.full_name,
            department_name=department.name,
        )
    finally:
        db.close()
