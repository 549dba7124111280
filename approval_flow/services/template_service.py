import logging
import uuid
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from approval_flow.core.errors import NotFoundError
from approval_flow.database import SessionLocal
from approval_flow.models.flow import FlowProcess
from approval_flow.models.template import Template
from approval_flow.services import flow_engine

logger = logging.getLogger(__name__)


def _get_db() -> Session:
    return SessionLocal()


def create_template(
    name: str,
    workflow_snapshot: FlowProcess,
    *,
    description: Optional[str] = None,
    form_schema: Any = None,
) -> Template:
    snapshot = flow_engine.fresh_flow(workflow_snapshot)

    db = _get_db()
    try:
        row = Template(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            form_schema=form_schema if form_schema is not None else {},
            workflow_snapshot=snapshot.to_dict(),
        )
        db.add(row)
        db.commit()
        db.refresh(row)

        logger.info(
            "Template created",
            extra={"template_id": row.id, "step_count": len(snapshot.steps)},
        )
        return row
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def list_templates() -> List[Template]:
    db = _get_db()
    try:
        return db.query(Template).order_by(Template.created_at.desc()).all()
    finally:
        db.close()


def get_template(template_id: str) -> Template:
    db = _get_db()
    try:
        row = db.query(Template).filter(Template.id == str(template_id)).first()
        if row is None:
            raise NotFoundError("Template not found")
        return row
    finally:
        db.close()


def snapshot_of(template: Template) -> FlowProcess:
    """Independent FlowProcess copy of the template's workflow, ready to seed a request."""
    return flow_engine.fresh_flow(FlowProcess.from_dict(template.workflow_snapshot))
