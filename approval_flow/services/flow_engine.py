"""Sequential approval state machine.

A FlowProcess advances one step at a time. Each step is decided exactly once
by its designated approver:

    step k pending --approve--> step k approved, pointer k+1   (ADVANCED)
    last step pending --approve--> last step approved           (COMPLETED)
    step k pending --reject--> step k rejected, pointer stays k (REJECTED)

A rejected step or an approved last step is terminal: every further action
fails with AlreadyProcessedError.

Everything here is pure. Inputs are never mutated; `apply` returns a new flow.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from approval_flow.core.errors import (
    AlreadyProcessedError,
    ForbiddenError,
    InvalidFlowError,
    InvalidStateError,
)
from approval_flow.models.flow import (
    ApprovalAction,
    ApprovalStep,
    FlowProcess,
    RequestStatus,
    StepStatus,
)


class Outcome(str, Enum):
    ADVANCED = "advanced"
    COMPLETED = "completed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Transition:
    outcome: Outcome
    flow: FlowProcess


_OUTCOME_STATUS = {
    Outcome.ADVANCED: RequestStatus.PENDING,
    Outcome.COMPLETED: RequestStatus.APPROVED,
    Outcome.REJECTED: RequestStatus.REJECTED,
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def current_step(flow: FlowProcess) -> ApprovalStep:
    step = flow.step_at(flow.current_step)
    if step is None:
        raise InvalidStateError("Current step not found")
    return step


def expected_approver(flow: FlowProcess) -> str:
    return current_step(flow).approver_id


def apply(
    flow: FlowProcess,
    action: ApprovalAction,
    actor_id: str,
    *,
    now: Optional[datetime] = None,
) -> Transition:
    """
    Decide the step at `flow.current_step` on behalf of `actor_id`.

    Raises:
        InvalidStateError: current_step does not index a step
        AlreadyProcessedError: the current step is no longer pending
        ForbiddenError: actor_id is not the current step's approver
    """
    action = ApprovalAction(action)
    step = current_step(flow)

    if step.status != StepStatus.PENDING:
        raise AlreadyProcessedError("Already processed")

    if str(actor_id) != step.approver_id:
        raise ForbiddenError("You are not the current approver")

    if now is None:
        now = _utc_now()

    idx = flow.current_step - 1
    steps = list(flow.steps)

    if action == ApprovalAction.REJECT:
        steps[idx] = replace(step, status=StepStatus.REJECTED, timestamp=now)
        return Transition(Outcome.REJECTED, replace(flow, steps=tuple(steps)))

    steps[idx] = replace(step, status=StepStatus.APPROVED, timestamp=now)

    if flow.current_step < len(steps):
        return Transition(
            Outcome.ADVANCED,
            replace(flow, current_step=flow.current_step + 1, steps=tuple(steps)),
        )

    return Transition(Outcome.COMPLETED, replace(flow, steps=tuple(steps)))


def overall_status(outcome: Outcome) -> RequestStatus:
    return _OUTCOME_STATUS[Outcome(outcome)]


def derive_status(flow: FlowProcess) -> RequestStatus:
    statuses = [s.status for s in flow.steps]
    if StepStatus.REJECTED in statuses:
        return RequestStatus.REJECTED
    if statuses and all(s == StepStatus.APPROVED for s in statuses):
        return RequestStatus.APPROVED
    return RequestStatus.PENDING


def validate_flow(flow: FlowProcess) -> None:
    if not flow.steps:
        raise InvalidFlowError("Flow must have at least one step")

    for i, step in enumerate(flow.steps, start=1):
        if step.seq != i:
            raise InvalidFlowError("Step seq must be 1..N in order without gaps")
        if not step.approver_id:
            raise InvalidFlowError(f"Step {i} has no approver")


def fresh_flow(flow: FlowProcess) -> FlowProcess:
    """Copy of `flow` rewound to step 1 with every step pending."""
    validate_flow(flow)
    return FlowProcess(
        current_step=1,
        steps=tuple(
            replace(s, status=StepStatus.PENDING, timestamp=None) for s in flow.steps
        ),
    )
