import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from approval_flow.core.errors import ConflictError, InvalidStateError, NotFoundError
from approval_flow.database import SessionLocal
from approval_flow.models.approval import ApprovalLog, ApprovalRequest
from approval_flow.models.flow import (
    ApprovalAction,
    FlowProcess,
    LogAction,
    RequestStatus,
    StepStatus,
)
from approval_flow.services import flow_engine, template_service

logger = logging.getLogger(__name__)

LIST_SCOPES = ("all", "mine", "inbox")

_SCAN_BATCH = 200

_ACTION_LOG = {
    ApprovalAction.APPROVE: LogAction.APPROVED,
    ApprovalAction.REJECT: LogAction.REJECTED,
}


@dataclass(frozen=True)
class ActionResult:
    request: ApprovalRequest
    outcome: flow_engine.Outcome


def _get_db() -> Session:
    return SessionLocal()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _get_request(db: Session, request_id: str) -> ApprovalRequest:
    row = db.query(ApprovalRequest).filter(ApprovalRequest.id == str(request_id)).first()
    if row is None:
        raise NotFoundError("Request not found")
    return row


def _insert_log(
    db: Session,
    request_id: str,
    actor_id: str,
    action: LogAction,
    content: Optional[str] = None,
) -> ApprovalLog:
    log = ApprovalLog(
        id=str(uuid.uuid4()),
        approval_id=str(request_id),
        actor_id=str(actor_id),
        action_type=action.value,
        content=content,
        created_at=_utc_now(),
    )
    db.add(log)
    db.commit()
    db.refresh(log)
    return log


def _append_log_best_effort(
    request_id: str,
    actor_id: str,
    action: LogAction,
    content: Optional[str] = None,
) -> Optional[ApprovalLog]:
    """Append a log entry after the flow has been committed.

    The flow change is already durable at this point, so a failed insert is
    logged and reported as None rather than raised.
    """
    db = _get_db()
    try:
        return _insert_log(db, request_id, actor_id, action, content)
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "Approval log append failed",
            extra={
                "approval_id": str(request_id),
                "actor_id": str(actor_id),
                "action_type": action.value,
            },
        )
        return None
    finally:
        db.close()


def _persist_transition(
    db: Session,
    request_id: str,
    expected_version: int,
    flow: FlowProcess,
    status: RequestStatus,
) -> None:
    """Write `flow` and `status` only if the row is still at `expected_version`."""
    if status != flow_engine.derive_status(flow):
        raise InvalidStateError("Request status does not match its flow")

    updated = (
        db.query(ApprovalRequest)
        .filter(
            ApprovalRequest.id == str(request_id),
            ApprovalRequest.version == int(expected_version),
        )
        .update(
            {
                ApprovalRequest.flow_process: flow.to_dict(),
                ApprovalRequest.status: status.value,
                ApprovalRequest.version: int(expected_version) + 1,
                ApprovalRequest.updated_at: _utc_now(),
            },
            synchronize_session=False,
        )
    )
    if updated != 1:
        raise ConflictError("Request was modified by another action; reload and retry")


def create_request(
    title: str,
    requester_id: str,
    form_data: Any,
    flow: FlowProcess,
) -> ApprovalRequest:
    flow = flow_engine.fresh_flow(flow)

    db = _get_db()
    try:
        now = _utc_now()
        request = ApprovalRequest(
            id=str(uuid.uuid4()),
            title=title,
            requester_id=str(requester_id),
            status=flow_engine.derive_status(flow).value,
            flow_process=flow.to_dict(),
            form_data=form_data if form_data is not None else {},
            version=1,
            created_at=now,
            updated_at=now,
        )
        db.add(request)
        db.commit()
        db.refresh(request)

        logger.info(
            "Approval request created",
            extra={
                "approval_id": request.id,
                "requester_id": request.requester_id,
                "step_count": len(flow.steps),
            },
        )

        _append_log_best_effort(request.id, requester_id, LogAction.CREATED)
        return request
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def create_request_from_template(
    template_id: str,
    requester_id: str,
    form_data: Any,
    *,
    title: Optional[str] = None,
) -> ApprovalRequest:
    template = template_service.get_template(template_id)

    if not title:
        title = f"{template.name} - {_utc_now():%Y-%m-%d %H:%M}"

    return create_request(
        title=title,
        requester_id=requester_id,
        form_data=form_data,
        flow=template_service.snapshot_of(template),
    )


def get_request(request_id: str) -> ApprovalRequest:
    db = _get_db()
    try:
        return _get_request(db, request_id)
    finally:
        db.close()


def _awaits(flow: FlowProcess, actor_id: str) -> bool:
    step = flow.step_at(flow.current_step)
    return step is not None and step.status == StepStatus.PENDING and step.approver_id == actor_id


def list_requests(
    actor_id: Optional[str] = None,
    *,
    scope: str = "all",
    limit: Optional[int] = None,
) -> List[ApprovalRequest]:
    """Newest first. `limit` caps the filtered result, never the scan."""
    if scope not in LIST_SCOPES:
        raise ValueError(f"Unknown scope: {scope}")
    if scope != "all" and actor_id is None:
        raise ValueError(f"Scope '{scope}' requires an actor")

    db = _get_db()
    try:
        query = db.query(ApprovalRequest).order_by(
            ApprovalRequest.created_at.desc(), ApprovalRequest.id.asc()
        )

        if scope == "all":
            if limit is not None:
                query = query.limit(int(limit))
            return query.all()

        if scope == "inbox":
            query = query.filter(ApprovalRequest.status == RequestStatus.PENDING.value)

        actor_id = str(actor_id)
        matches = []
        # Approver ids live inside the JSON flow, so the match runs in Python.
        for row in query.yield_per(_SCAN_BATCH):
            flow = FlowProcess.from_dict(row.flow_process or {})

            if scope == "mine":
                hit = row.requester_id == actor_id or actor_id in flow.approver_ids
            else:
                hit = _awaits(flow, actor_id)

            if hit:
                matches.append(row)
                if limit is not None and len(matches) >= int(limit):
                    break

        return matches
    finally:
        db.close()


def act(
    request_id: str,
    action: ApprovalAction,
    actor_id: str,
    *,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ActionResult:
    action = ApprovalAction(action)

    db = _get_db()
    try:
        request = _get_request(db, request_id)
        read_version = request.version
        flow = FlowProcess.from_dict(request.flow_process)

        # Read for context only; the engine is the sole approver gate.
        approver_id = flow_engine.expected_approver(flow)

        transition = flow_engine.apply(flow, action, actor_id, now=now)
        status = flow_engine.overall_status(transition.outcome)

        _persist_transition(db, request.id, read_version, transition.flow, status)
        db.commit()
        db.refresh(request)

        logger.info(
            "Approval step decided",
            extra={
                "approval_id": request.id,
                "actor_id": str(actor_id),
                "approver_id": approver_id,
                "outcome": transition.outcome.value,
                "step": flow.current_step,
            },
        )

        content = reason if action == ApprovalAction.REJECT else None
        _append_log_best_effort(request.id, actor_id, _ACTION_LOG[action], content)

        return ActionResult(request=request, outcome=transition.outcome)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def approve(request_id: str, actor_id: str) -> ActionResult:
    return act(request_id, ApprovalAction.APPROVE, actor_id)


def reject(request_id: str, actor_id: str, reason: str) -> ActionResult:
    return act(request_id, ApprovalAction.REJECT, actor_id, reason=reason)


def comment(request_id: str, actor_id: str, content: str) -> ApprovalLog:
    db = _get_db()
    try:
        _get_request(db, request_id)
        return _insert_log(db, request_id, actor_id, LogAction.COMMENT, content)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def list_logs(request_id: str) -> List[ApprovalLog]:
    db = _get_db()
    try:
        _get_request(db, request_id)
        return (
            db.query(ApprovalLog)
            .filter(ApprovalLog.approval_id == str(request_id))
            .order_by(ApprovalLog.created_at.asc(), ApprovalLog.id.asc())
            .all()
        )
    finally:
        db.close()
