from typing import List

from fastapi import APIRouter, Depends, HTTPException

from approval_flow.core.authorization import Role, require_role
from approval_flow.core.errors import FlowError, http_status
from approval_flow.deps.auth import require_auth
from approval_flow.schemas.template import TemplateCreate, TemplateResponse
from approval_flow.services import template_service

router = APIRouter(prefix="/templates", tags=["Templates"])


@router.post("", response_model=TemplateResponse)
def create_template(
    payload: TemplateCreate,
    _role: Role = Depends(require_role(Role.MANAGER)),
):
    try:
        return template_service.create_template(
            name=payload.name,
            workflow_snapshot=payload.workflow_snapshot.to_flow(),
            description=payload.description,
            form_schema=payload.form_schema,
        )
    except FlowError as exc:
        raise HTTPException(status_code=http_status(exc), detail=str(exc)) from exc


@router.get("", response_model=List[TemplateResponse])
def list_templates(_user_id: str = Depends(require_auth)):
    return template_service.list_templates()


@router.get("/{template_id}", response_model=TemplateResponse)
def get_template(
    template_id: str,
    _user_id: str = Depends(require_auth),
):
    try:
        return template_service.get_template(template_id)
    except FlowError as exc:
        raise HTTPException(status_code=http_status(exc), detail=str(exc)) from exc
