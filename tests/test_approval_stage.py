import pytest

from hr_admin.core.exceptions import ApprovalLevelMismatch, InvalidTransition
from hr_admin.schemas.booking_schemas import booking_stage
from hr_admin.schemas.loan_schema import loan_stage
from hr_admin.utils.approval_stage import ApprovalStatus, advance, stage_label


@pytest.mark.parametrize(
    "level, label",
    [
        (1, "Awaiting HR Approval"),
        (2, "Awaiting Supervisor/Division Manager Approval"),
        (3, "Awaiting Vice President Approval"),
        (4, "Awaiting President Approval"),
    ],
)
def test_pending_levels(level, label):
    assert stage_label(level, "Pending") == label


def test_approved_wins_over_level():
    assert stage_label(3, "Approved") == "Fully Approved"
    assert stage_label(3, "Approved") == stage_label(3, ApprovalStatus.APPROVED)


def test_rejected():
    assert stage_label(2, "Rejected") == "Rejected"


@pytest.mark.parametrize("level", [0, 5, 99, -1])
def test_unknown_pending_level_falls_back(level):
    assert stage_label(level, "Pending") == "Pending Review"


def test_unknown_status_is_an_error():
    with pytest.raises(ValueError):
        stage_label(1, "Archived")


def test_resource_adapters():
    assert loan_stage(4, "Completed") == "Fully Approved"
    assert loan_stage(2, "Pending") == "Awaiting Supervisor/Division Manager Approval"
    assert booking_stage(1, "Cancelled") == "Cancelled"
    assert booking_stage(2, "Approved") == "Fully Approved"


def test_approve_below_final_moves_up_one_level():
    assert advance("approve", 1, 1, "Pending") == (ApprovalStatus.PENDING, 2)


def test_approve_at_final_level_approves():
    assert advance("approve", 4, 4, "Pending") == (ApprovalStatus.APPROVED, 4)
    assert advance("approve", 2, 2, "Pending", final_level=2) == (ApprovalStatus.APPROVED, 2)


def test_reject_keeps_level():
    assert advance("reject", 3, 3, "Pending") == (ApprovalStatus.REJECTED, 3)


def test_level_mismatch():
    with pytest.raises(ApprovalLevelMismatch):
        advance("approve", 2, 1, "Pending")


@pytest.mark.parametrize("status", ["Approved", "Rejected", "Completed", "Cancelled"])
def test_terminal_requests_cannot_move(status):
    with pytest.raises(InvalidTransition):
        advance("approve", 1, 1, status)


def test_unknown_action():
    with pytest.raises(InvalidTransition):
        advance("escalate", 1, 1, "Pending")
