from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Tuple


class StepStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class LogAction(str, Enum):
    CREATED = "CREATED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMMENT = "COMMENT"


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


@dataclass(frozen=True)
class ApprovalStep:
    seq: int
    name: str
    approver_id: str
    status: StepStatus = StepStatus.PENDING
    timestamp: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict) -> "ApprovalStep":
        return cls(
            seq=int(data["seq"]),
            name=str(data["name"]),
            approver_id=str(data["approver_id"]),
            status=StepStatus(data.get("status") or StepStatus.PENDING.value),
            timestamp=_parse_timestamp(data.get("timestamp")),
        )

    def to_dict(self) -> dict:
        return {
            "seq": self.seq,
            "name": self.name,
            "approver_id": self.approver_id,
            "status": self.status.value,
            "timestamp": _format_timestamp(self.timestamp),
        }


@dataclass(frozen=True)
class FlowProcess:
    """An ordered approval chain plus a 1-based pointer to the active step.

    Values are immutable; transitions produce a new FlowProcess.
    """

    current_step: int
    steps: Tuple[ApprovalStep, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any iterable of steps but always store a tuple.
        object.__setattr__(self, "steps", tuple(self.steps))

    @classmethod
    def from_dict(cls, data: dict) -> "FlowProcess":
        return cls(
            current_step=int(data.get("current_step", 1)),
            steps=tuple(ApprovalStep.from_dict(s) for s in data.get("steps") or []),
        )

    def to_dict(self) -> dict:
        return {
            "current_step": self.current_step,
            "steps": [s.to_dict() for s in self.steps],
        }

    def step_at(self, seq: int) -> Optional[ApprovalStep]:
        if 1 <= seq <= len(self.steps):
            return self.steps[seq - 1]
        return None

    @property
    def approver_ids(self) -> set:
        return {s.approver_id for s in self.steps}
