from datetime import date, datetime, timedelta
from decimal import Decimal

from conftest import auth
from hr_admin.models.approval_action_model import ApprovalAction
from hr_admin.models.benefits_model import MedicalLOA, MedicalReimbursement
from hr_admin.models.employee_model import Employee
from hr_admin.models.house_booking_model import HouseBooking
from hr_admin.models.loan_model import LoanDeduction
from hr_admin.utils.loan_rules import first_deduction_date


def _submit_salary_loan(client, employee_id, amount=9000, term=3):
    res = client.post(
        "/loans",
        json={"loan_type": "salary", "amount": amount, "repayment_term": term},
        headers=auth(employee_id),
    )
    assert res.status_code == 200, res.text
    return res.json()["loan_id"]


def _act(client, approver_id, request_type, action, request_id, comment=None):
    return client.post(
        f"/approval/{request_type}/{action}",
        json={"id": request_id, "comment": comment},
        headers=auth(approver_id),
    )


def test_loan_walks_all_four_levels_then_gets_a_schedule(client, db, staff, approval_chain):
    loan_id = _submit_salary_loan(client, staff.employee_id)

    stages = []
    for approver_id in approval_chain:
        res = _act(client, approver_id, "salary-loan", "approve", loan_id)
        assert res.status_code == 200, res.text
        stages.append(res.json()["approval_stage"])

    assert stages == [
        "Awaiting Supervisor/Division Manager Approval",
        "Awaiting Vice President Approval",
        "Awaiting President Approval",
        "Fully Approved",
    ]

    rows = (
        db.query(LoanDeduction)
        .filter(LoanDeduction.loan_id == loan_id)
        .order_by(LoanDeduction.deduction_date.asc())
        .all()
    )
    assert len(rows) == 3
    assert rows[0].deduction_date == first_deduction_date(date.today())
    assert sum(r.amount for r in rows) == Decimal("9000.00")
    assert db.query(ApprovalAction).filter(ApprovalAction.request_id == loan_id).count() == 4


def test_wrong_level_is_refused(client, staff, approval_chain):
    loan_id = _submit_salary_loan(client, staff.employee_id)

    res = _act(client, approval_chain[1], "salary-loan", "approve", loan_id)
    assert res.status_code == 403
    assert res.json()["error_code"] == "ERR_APPROVAL_LEVEL_MISMATCH"


def test_rejection_needs_a_comment_and_is_final(client, staff, approval_chain):
    loan_id = _submit_salary_loan(client, staff.employee_id)
    hr = approval_chain[0]

    assert _act(client, hr, "salary-loan", "reject", loan_id, comment="no").status_code == 400

    res = _act(client, hr, "salary-loan", "reject", loan_id, comment="Incomplete documents")
    assert res.status_code == 200
    assert res.json()["status"] == "Rejected"
    assert res.json()["current_approval_level"] == 1
    assert res.json()["approval_stage"] == "Rejected"

    again = _act(client, hr, "salary-loan", "approve", loan_id)
    assert again.status_code == 400
    assert again.json()["error_code"] == "ERR_INVALID_TRANSITION"


def test_request_type_must_match_the_loan(client, staff, approval_chain):
    loan_id = _submit_salary_loan(client, staff.employee_id)
    assert _act(client, approval_chain[0], "car-loan", "approve", loan_id).status_code == 404
    assert _act(client, approval_chain[0], "pet-loan", "approve", loan_id).status_code == 400


def test_non_approver_is_forbidden(client, staff, manager):
    loan_id = _submit_salary_loan(client, staff.employee_id)
    res = _act(client, manager.employee_id, "salary-loan", "approve", loan_id)
    assert res.status_code == 403


def test_unknown_action(client, staff, approval_chain):
    loan_id = _submit_salary_loan(client, staff.employee_id)
    res = _act(client, approval_chain[0], "salary-loan", "escalate", loan_id)
    assert res.status_code == 400


def test_medical_loa_is_final_at_level_one(client, db, staff, hr_manager):
    loa = MedicalLOA(
        employee_id=staff.employee_id,
        hospital_name="St. Luke's",
        visit_date=date.today(),
        reason_type="Consultation",
    )
    db.add(loa)
    db.commit()

    res = _act(client, hr_manager.employee_id, "medical-loa", "approve", loa.loa_id)
    assert res.status_code == 200
    assert res.json()["status"] == "Approved"


def test_final_reimbursement_approval_draws_down_benefits(client, db, staff, approval_chain):
    claim = MedicalReimbursement(
        employee_id=staff.employee_id,
        patient_type="outpatient",
        admission_date=date.today(),
        total_amount=Decimal("30000.00"),
        claim_method="cash",
    )
    db.add(claim)
    db.commit()

    for approver_id in approval_chain:
        assert _act(client, approver_id, "medical-reimbursement", "approve", claim.reimbursement_id).status_code == 200

    db.expire_all()
    emp = db.get(Employee, staff.employee_id)
    assert emp.benefits_amount_remaining == Decimal("70000.00")


def test_house_booking_needs_two_levels(client, db, staff, approval_chain):
    start = datetime.now().replace(microsecond=0) + timedelta(days=3)
    booking = HouseBooking(
        employee_id=staff.employee_id,
        property_name="Baguio Staff House",
        property_location="Baguio",
        nature_of_stay="Vacation",
        reason_for_use="Family trip",
        checkin_at=start,
        checkout_at=start + timedelta(days=2),
    )
    db.add(booking)
    db.commit()

    first = _act(client, approval_chain[0], "house-booking", "approve", booking.booking_id)
    assert first.json()["status"] == "Pending"
    second = _act(client, approval_chain[1], "house-booking", "approve", booking.booking_id)
    assert second.json()["status"] == "Approved"


def test_pending_queue_shows_requests_at_my_level(client, staff, approval_chain):
    loan_id = _submit_salary_loan(client, staff.employee_id)

    queue = client.get("/approval/requests", headers=auth(approval_chain[0])).json()
    assert queue["approval_level"] == 1
    assert [(r["request_type"], r["request_id"]) for r in queue["requests"]] == [("salary-loan", loan_id)]

    assert client.get("/approval/requests", headers=auth(approval_chain[1])).json()["requests"] == []

    _act(client, approval_chain[0], "salary-loan", "approve", loan_id)
    history = client.get(f"/approval/salary-loan/{loan_id}/history", headers=auth(staff.employee_id)).json()
    assert [h["status"] for h in history] == ["Approved"]
