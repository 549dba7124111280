from fastapi import APIRouter, Depends, HTTPException

from approval_flow.core.authorization import Role, require_role
from approval_flow.core.errors import FlowError, http_status
from approval_flow.schemas.org import DepartmentCreate, DepartmentManagerUpdate, DepartmentResponse
from approval_flow.services import org_service

router = APIRouter(prefix="/departments", tags=["Departments"])


@router.post("", response_model=DepartmentResponse)
def create_department(
    payload: DepartmentCreate,
    _role: Role = Depends(require_role(Role.ADMIN)),
):
    try:
        return org_service.create_department(payload.name, manager_id=payload.manager_id)
    except FlowError as exc:
        raise HTTPException(status_code=http_status(exc), detail=str(exc)) from exc


@router.put("/{department_id}/manager", response_model=DepartmentResponse)
def assign_manager(
    department_id: str,
    payload: DepartmentManagerUpdate,
    _role: Role = Depends(require_role(Role.ADMIN)),
):
    try:
        return org_service.assign_manager(department_id, payload.manager_id)
    except FlowError as exc:
        raise HTTPException(status_code=http_status(exc), detail=str(exc)) from exc
