from conftest import add_approved_loan, auth
from hr_admin.routers import loans_router
from hr_admin.utils.loan_rules import CAR_LOAN, HOUSING_LOAN, SALARY_LOAN


def test_submit_salary_loan(client, staff):
    res = client.post(
        "/loans",
        json={"loan_type": "salary", "amount": 20000, "repayment_term": 6, "purpose": "Tuition"},
        headers=auth(staff.employee_id),
    )
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["loan_type"] == SALARY_LOAN
    assert body["status"] == "Pending"
    assert body["current_approval_level"] == 1
    assert body["approval_stage"] == "Awaiting HR Approval"


def test_class_c_cannot_apply_for_car_loan(client, staff):
    res = client.post(
        "/loans",
        json={
            "loan_type": "car", "amount": 500000, "repayment_term": 36,
            "car_make": "Toyota", "car_model": "Vios", "car_year": "2024",
        },
        headers=auth(staff.employee_id),
    )
    assert res.status_code == 409


def test_second_salary_loan_is_ineligible(client, staff):
    headers = auth(staff.employee_id)
    body = {"loan_type": "salary", "amount": 1000, "repayment_term": 2}
    assert client.post("/loans", json=body, headers=headers).status_code == 200

    check = client.get("/loans/eligibility?loan_type=salary", headers=headers).json()
    assert check["eligible"] is False
    assert client.post("/loans", json=body, headers=headers).status_code == 409


def test_housing_loan_needs_property_details(client, manager):
    res = client.post(
        "/loans",
        json={"loan_type": "housing", "amount": 900000, "repayment_term": 60},
        headers=auth(manager.employee_id),
    )
    assert res.status_code == 400


def test_loan_too_small_for_its_term_is_rejected(client, staff):
    res = client.post(
        "/loans",
        json={"loan_type": "salary", "amount": 1, "repayment_term": 120},
        headers=auth(staff.employee_id),
    )
    assert res.status_code == 422


def test_admin_list_merges_loan_types(client, db, staff, manager, hr_manager):
    add_approved_loan(db, staff.employee_id, [1000])
    add_approved_loan(db, manager.employee_id, [2000], loan_type=CAR_LOAN)

    res = client.get("/loans", headers=auth(hr_manager.employee_id))
    assert res.status_code == 200
    body = res.json()
    assert {x["loan_type"] for x in body["loans"]} == {SALARY_LOAN, CAR_LOAN}
    assert body["errors"] == {}


def test_admin_list_reports_a_failing_source(client, db, staff, manager, hr_manager, monkeypatch):
    add_approved_loan(db, staff.employee_id, [1000])
    add_approved_loan(db, manager.employee_id, [2000], loan_type=CAR_LOAN)

    real = loans_router._loans_of_type

    def flaky(session, loan_type, statuses=None, employee_id=None):
        if loan_type == HOUSING_LOAN:
            raise RuntimeError("housing source unavailable")
        return real(session, loan_type, statuses, employee_id)

    monkeypatch.setattr(loans_router, "_loans_of_type", flaky)

    body = client.get("/loans", headers=auth(hr_manager.employee_id)).json()
    assert len(body["loans"]) == 2
    assert body["errors"] == {HOUSING_LOAN: "housing source unavailable"}


def test_deductions_views(client, db, staff, hr_manager):
    loan = add_approved_loan(db, staff.employee_id, [1000, 1000])

    admin_view = client.get("/loans/deductions", headers=auth(hr_manager.employee_id)).json()
    assert len(admin_view["loans"]) == 1
    row = admin_view["loans"][0]
    assert row["loan_id"] == loan.loan_id
    assert row["paid_amount"] == 0
    assert row["remaining_amount"] == 2000
    assert row["remaining_months"] == 2
    assert len(row["deductions"]) == 2

    mine = client.get("/loans/my-deductions", headers=auth(staff.employee_id)).json()
    assert [x["loan_id"] for x in mine["loans"]] == [loan.loan_id]

    other = client.get("/loans/my-deductions", headers=auth(hr_manager.employee_id)).json()
    assert other["loans"] == []


def test_single_loan_visible_to_owner_only(client, db, staff, manager):
    loan = add_approved_loan(db, staff.employee_id, [1000])
    assert client.get(f"/loans/{loan.loan_id}", headers=auth(staff.employee_id)).status_code == 200
    assert client.get(f"/loans/{loan.loan_id}", headers=auth(manager.employee_id)).status_code == 404


def test_only_pending_or_rejected_loans_can_be_deleted(client, db, staff, hr_manager):
    loan = add_approved_loan(db, staff.employee_id, [1000])
    res = client.delete(f"/loans/{loan.loan_id}", headers=auth(hr_manager.employee_id))
    assert res.status_code == 400
