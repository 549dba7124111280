from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1)
    manager_id: Optional[str] = None


class DepartmentManagerUpdate(BaseModel):
    manager_id: str = Field(..., min_length=1)


class DepartmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    manager_id: Optional[str]


class UserCreate(BaseModel):
    id: Optional[str] = Field(default=None, min_length=1, max_length=36)
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    full_name: str = Field(..., min_length=2)
    position: Optional[str] = None
    department_id: Optional[str] = None
    status: str = Field(default="ACTIVE", pattern="^(ACTIVE|INACTIVE)$")


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    email: str
    position: Optional[str]


class ManagerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    manager_id: str
    manager_name: str
    department_name: str
