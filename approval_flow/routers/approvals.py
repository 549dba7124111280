from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from approval_flow.core.errors import FlowError, http_status
from approval_flow.deps.auth import require_auth
from approval_flow.schemas.approval import (
    ApprovalActionResponse,
    ApprovalLogResponse,
    ApprovalRequestResponse,
    CommentRequest,
    CreateApprovalRequest,
    CreateFromTemplateRequest,
    RejectRequest,
)
from approval_flow.services import approval_service
from approval_flow.services.approval_service import ActionResult

router = APIRouter(prefix="/approvals", tags=["Approvals"])


def _http_error(exc: FlowError) -> HTTPException:
    return HTTPException(status_code=http_status(exc), detail=str(exc))


def _action_response(result: ActionResult) -> ApprovalActionResponse:
    body = ApprovalRequestResponse.model_validate(result.request).model_dump()
    return ApprovalActionResponse(outcome=result.outcome.value, **body)


@router.post("", response_model=ApprovalRequestResponse)
def create_approval(
    payload: CreateApprovalRequest,
    user_id: str = Depends(require_auth),
):
    try:
        return approval_service.create_request(
            title=payload.title,
            requester_id=user_id,
            form_data=payload.form_data,
            flow=payload.flow_process.to_flow(),
        )
    except FlowError as exc:
        raise _http_error(exc) from exc


@router.post("/from-template/{template_id}", response_model=ApprovalRequestResponse)
def create_approval_from_template(
    template_id: str,
    payload: CreateFromTemplateRequest,
    user_id: str = Depends(require_auth),
):
    try:
        return approval_service.create_request_from_template(
            template_id,
            requester_id=user_id,
            form_data=payload.form_data,
            title=payload.title,
        )
    except FlowError as exc:
        raise _http_error(exc) from exc


@router.get("", response_model=List[ApprovalRequestResponse])
def list_approvals(
    scope: str = Query("all", pattern="^(all|mine|inbox)$"),
    user_id: str = Depends(require_auth),
):
    return approval_service.list_requests(user_id, scope=scope)


@router.get("/{request_id}", response_model=ApprovalRequestResponse)
def get_approval(
    request_id: str,
    _user_id: str = Depends(require_auth),
):
    try:
        return approval_service.get_request(request_id)
    except FlowError as exc:
        raise _http_error(exc) from exc


@router.post("/{request_id}/approve", response_model=ApprovalActionResponse)
def approve_request(
    request_id: str,
    user_id: str = Depends(require_auth),
):
    try:
        result = approval_service.approve(request_id, actor_id=user_id)
    except FlowError as exc:
        raise _http_error(exc) from exc

    return _action_response(result)


@router.post("/{request_id}/reject", response_model=ApprovalActionResponse)
def reject_request(
    request_id: str,
    payload: RejectRequest,
    user_id: str = Depends(require_auth),
):
    try:
        result = approval_service.reject(request_id, actor_id=user_id, reason=payload.reason)
    except FlowError as exc:
        raise _http_error(exc) from exc

    return _action_response(result)


@router.post("/{request_id}/comments", response_model=ApprovalLogResponse)
def add_comment(
    request_id: str,
    payload: CommentRequest,
    user_id: str = Depends(require_auth),
):
    try:
        return approval_service.comment(request_id, actor_id=user_id, content=payload.content)
    except FlowError as exc:
        raise _http_error(exc) from exc


@router.get("/{request_id}/logs", response_model=List[ApprovalLogResponse])
def get_logs(
    request_id: str,
    _user_id: str = Depends(require_auth),
):
    try:
        return approval_service.list_logs(request_id)
    except FlowError as exc:
        raise _http_error(exc) from exc
