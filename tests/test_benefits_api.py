from datetime import date, timedelta

from conftest import auth


def _claim(**overrides):
    body = {
        "patient_type": "Inpatient",
        "admission_date": str(date.today() - timedelta(days=5)),
        "discharge_date": str(date.today() - timedelta(days=2)),
        "total_amount": 25000,
        "claim_method": "salary",
    }
    body.update(overrides)
    return body


def test_submit_reimbursement(client, staff):
    res = client.post("/benefits/medical-reimbursements", json=_claim(), headers=auth(staff.employee_id))
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["patient_type"] == "inpatient"
    assert body["approval_stage"] == "Awaiting HR Approval"


def test_reimbursement_cannot_exceed_balance(client, staff):
    # Class C allowance is 100,000
    res = client.post(
        "/benefits/medical-reimbursements", json=_claim(total_amount=150000), headers=auth(staff.employee_id)
    )
    assert res.status_code == 400


def test_future_dates_are_rejected(client, staff):
    tomorrow = str(date.today() + timedelta(days=1))
    res = client.post(
        "/benefits/medical-reimbursements",
        json=_claim(admission_date=tomorrow, discharge_date=None),
        headers=auth(staff.employee_id),
    )
    assert res.status_code == 400


def test_discharge_before_admission(client, staff):
    res = client.post(
        "/benefits/medical-reimbursements",
        json=_claim(discharge_date=str(date.today() - timedelta(days=10))),
        headers=auth(staff.employee_id),
    )
    assert res.status_code == 400


def test_loa_and_admin_listing(client, staff, hr_manager):
    res = client.post(
        "/benefits/medical-loas",
        json={"hospital_name": "Makati Med", "visit_date": str(date.today()), "reason_type": "Check-up"},
        headers=auth(staff.employee_id),
    )
    assert res.status_code == 200, res.text
    loa_id = res.json()["loa_id"]

    listing = client.get("/benefits/medical-loas?status=Pending", headers=auth(hr_manager.employee_id)).json()
    assert [x["loa_id"] for x in listing] == [loa_id]

    upd = client.put(
        f"/benefits/medical-loas/{loa_id}", json={"preferred_doctor": "Dr. Cruz"}, headers=auth(hr_manager.employee_id)
    )
    assert upd.json()["preferred_doctor"] == "Dr. Cruz"

    assert client.get("/benefits/medical-loas", headers=auth(staff.employee_id)).status_code == 403
    assert client.delete(f"/benefits/medical-loas/{loa_id}", headers=auth(hr_manager.employee_id)).status_code == 200


def test_balance(client, manager):
    body = client.get("/benefits/balance", headers=auth(manager.employee_id)).json()
    assert body["benefits_package"] == "Package B"
    assert body["benefits_amount_remaining"] == 200000
