from typing import List

from fastapi import APIRouter, Depends, HTTPException

from approval_flow.core.authorization import Role, require_role
from approval_flow.core.errors import FlowError, http_status
from approval_flow.deps.auth import require_auth
from approval_flow.schemas.org import ManagerResponse, UserCreate, UserResponse
from approval_flow.services import org_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserResponse)
def create_user(
    payload: UserCreate,
    _role: Role = Depends(require_role(Role.ADMIN)),
):
    try:
        return org_service.create_user(
            email=payload.email,
            full_name=payload.full_name,
            user_id=payload.id,
            position=payload.position,
            department_id=payload.department_id,
            status=payload.status,
        )
    except FlowError as exc:
        raise HTTPException(status_code=http_status(exc), detail=str(exc)) from exc


@router.get("", response_model=List[UserResponse])
def list_users(_user_id: str = Depends(require_auth)):
    return org_service.list_users()


@router.get("/{user_id}/manager", response_model=ManagerResponse)
def get_manager(
    user_id: str,
    _user_id: str = Depends(require_auth),
):
    try:
        return org_service.get_manager(user_id)
    except FlowError as exc:
        raise HTTPException(status_code=http_status(exc), detail=str(exc)) from exc
