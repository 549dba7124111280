from approval_flow.models.approval import ApprovalLog, ApprovalRequest
from approval_flow.models.org import Department, User
from approval_flow.models.template import Template

__all__ = [
    "ApprovalLog",
    "ApprovalRequest",
    "Department",
    "Template",
    "User",
]
