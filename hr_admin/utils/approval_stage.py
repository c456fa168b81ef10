from enum import Enum
from typing import Tuple

from hr_admin.core.exceptions import ApprovalLevelMismatch, InvalidTransition


class ApprovalStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


APPROVAL_STAGES = {
    1: "Awaiting HR Approval",
    2: "Awaiting Supervisor/Division Manager Approval",
    3: "Awaiting Vice President Approval",
    4: "Awaiting President Approval",
}

FALLBACK_STAGE = "Pending Review"
FINAL_LEVEL = 4

APPROVE = "approve"
REJECT = "reject"


def stage_label(level, status) -> str:
    """Human-readable position of a request in its approval workflow."""
    status = ApprovalStatus(status)
    if status == ApprovalStatus.APPROVED:
        return "Fully Approved"
    if status == ApprovalStatus.REJECTED:
        return "Rejected"
    return APPROVAL_STAGES.get(level, FALLBACK_STAGE)


def advance(
        action: str,
        approver_level: int,
        current_level: int,
        status,
        final_level: int = FINAL_LEVEL,
) -> Tuple[ApprovalStatus, int]:
    """
    Next (status, level) of a request after an approver acts on it.

    Rejection keeps the level. Approval at ``final_level`` makes the
    request Approved; any lower level moves it up by one.
    """
    if action not in (APPROVE, REJECT):
        raise InvalidTransition("Invalid action")

    # anything but Pending is terminal, including Completed / Cancelled
    status = getattr(status, "value", status)
    if status != ApprovalStatus.PENDING.value:
        raise InvalidTransition(f"Request is already {str(status).lower()}")

    if approver_level != current_level:
        raise ApprovalLevelMismatch()

    if action == REJECT:
        return ApprovalStatus.REJECTED, current_level

    if approver_level >= final_level:
        return ApprovalStatus.APPROVED, approver_level
    return ApprovalStatus.PENDING, approver_level + 1
