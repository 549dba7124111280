from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from approval_flow.schemas.approval import FlowProcessPayload


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    form_schema: Any = Field(default_factory=dict)
    workflow_snapshot: FlowProcessPayload


class TemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str]
    form_schema: Any
    workflow_snapshot: FlowProcessPayload
    created_at: datetime
    updated_at: datetime
