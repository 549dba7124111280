from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from approval_flow.models.flow import ApprovalStep, FlowProcess, StepStatus


class ApprovalStepPayload(BaseModel):
    seq: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    approver_id: str = Field(..., min_length=1)
    status: StepStatus = StepStatus.PENDING
    timestamp: Optional[datetime] = None


class FlowProcessPayload(BaseModel):
    current_step: int = 1
    steps: List[ApprovalStepPayload]

    def to_flow(self) -> FlowProcess:
        return FlowProcess(
            current_step=self.current_step,
            steps=tuple(
                ApprovalStep(
                    seq=s.seq,
                    name=s.name,
                    approver_id=s.approver_id,
                    status=s.status,
                    timestamp=s.timestamp,
                )
                for s in self.steps
            ),
        )


class CreateApprovalRequest(BaseModel):
    title: str = Field(..., min_length=1)
    form_data: Any = Field(default_factory=dict)
    flow_process: FlowProcessPayload


class CreateFromTemplateRequest(BaseModel):
    form_data: Any = Field(default_factory=dict)
    title: Optional[str] = None


class RejectRequest(BaseModel):
    reason: str = Field(..., min_length=1)


class CommentRequest(BaseModel):
    content: str = Field(..., min_length=1)


class ApprovalRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    requester_id: str
    status: str
    flow_process: FlowProcessPayload
    form_data: Any
    version: int
    created_at: datetime
    updated_at: datetime


class ApprovalActionResponse(ApprovalRequestResponse):
    outcome: str


class ApprovalLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    approval_id: str
    actor_id: str
    action_type: str
    content: Optional[str]
    created_at: datetime
