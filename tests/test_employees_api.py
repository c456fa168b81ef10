from decimal import Decimal

from conftest import add_employee, auth
from hr_admin.models.activity_log_model import ActivityLog
from hr_admin.models.employee_model import Employee


def _new(**overrides):
    body = {
        "first_name": "Ana",
        "last_name": "Reyes",
        "email": "Ana.Reyes@Example.com",
        "position": "Manager",
        "department": "Operations",
    }
    body.update(overrides)
    return body


def test_positions_are_public_reference_data(client):
    res = client.get("/admin/positions")
    assert res.status_code == 200
    names = [p["name"] for p in res.json()]
    assert "HR Manager" in names
    assert len(names) == 13


def test_next_id_preview(client, db, hr_manager):
    add_employee(db, "MGR001", "Manager")
    add_employee(db, "MGR003", "Manager")
    add_employee(db, "AST002", "Assistant")

    res = client.get("/admin/employees/next-id?position=Manager", headers=auth(hr_manager.employee_id))
    assert res.json() == {"position": "Manager", "employee_id": "MGR004"}


def test_create_derives_id_salary_role_and_benefits(client, db, hr_manager):
    res = client.post("/admin/employees", json=_new(), headers=auth(hr_manager.employee_id))
    assert res.status_code == 200, res.text
    body = res.json()

    assert body["employee_id"] == "MGR001"
    assert body["email"] == "ana.reyes@example.com"
    assert body["salary"] == 85000
    assert body["role_class"] == "Class B"
    assert body["benefits_package"] == "Package B"
    assert body["benefits_amount_remaining"] == 200000

    log = db.query(ActivityLog).filter(ActivityLog.module == "EMPLOYEES").one()
    assert log.action == "CREATE"
    assert log.user_id == hr_manager.employee_id


def test_explicit_salary_wins(client, hr_manager):
    res = client.post("/admin/employees", json=_new(salary=90000), headers=auth(hr_manager.employee_id))
    assert res.json()["salary"] == 90000


def test_duplicate_email_and_unknown_position(client, hr_manager):
    headers = auth(hr_manager.employee_id)
    assert client.post("/admin/employees", json=_new(), headers=headers).status_code == 200
    assert client.post("/admin/employees", json=_new(), headers=headers).status_code == 400
    assert client.post(
        "/admin/employees", json=_new(email="x@example.com", position="Astronaut"), headers=headers
    ).status_code == 400


def test_position_change_rederives_role_and_keeps_used_benefits(client, db, hr_manager):
    emp = add_employee(db, "CLK001", "Clerk", benefits_amount_remaining=Decimal("60000.00"))

    res = client.put(
        f"/admin/employees/{emp.employee_id}", json={"position": "Manager"}, headers=auth(hr_manager.employee_id)
    )
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["role_class"] == "Class B"
    assert body["salary"] == 85000
    assert body["benefits_amount"] == 200000
    # 40,000 was already used
    assert body["benefits_amount_remaining"] == 160000
    # the ID never changes
    assert body["employee_id"] == "CLK001"


def test_search_sort_and_paginate(client, db, hr_manager):
    add_employee(db, "CLK001", "Clerk", first_name="Zed")
    add_employee(db, "CLK002", "Clerk", first_name="Amy")
    headers = auth(hr_manager.employee_id)

    res = client.get("/admin/employees?position=Clerk&sort_by=first_name", headers=headers).json()
    assert res["total"] == 2
    assert [e["first_name"] for e in res["employees"]] == ["Amy", "Zed"]

    res = client.get("/admin/employees?search=zed", headers=headers).json()
    assert [e["employee_id"] for e in res["employees"]] == ["CLK001"]

    res = client.get("/admin/employees?page=2&page_size=1&position=Clerk", headers=headers).json()
    assert res["total"] == 2
    assert len(res["employees"]) == 1

    assert client.get("/admin/employees?sort_by=password", headers=headers).status_code == 400


def test_delete_is_a_soft_deactivation(client, db, hr_manager, staff):
    res = client.delete(f"/admin/employees/{staff.employee_id}", headers=auth(hr_manager.employee_id))
    assert res.status_code == 200

    db.expire_all()
    assert db.get(Employee, staff.employee_id).is_active is False

    # a deactivated employee can no longer call the API
    res = client.get("/loans/mine", headers=auth(staff.employee_id))
    assert res.status_code == 401


def test_approver_management(client, db, hr_manager, manager):
    headers = auth(hr_manager.employee_id)
    res = client.post(
        "/admin/approvers",
        json={"employee_id": manager.employee_id, "approval_level": "Department Supervisor", "numeric_level": 2},
        headers=headers,
    )
    assert res.status_code == 200, res.text
    approver_id = res.json()["approver_id"]

    assert client.post(
        "/admin/approvers",
        json={"employee_id": manager.employee_id, "approval_level": "Again", "numeric_level": 3},
        headers=headers,
    ).status_code == 400

    levels = [a["numeric_level"] for a in client.get("/admin/approvers", headers=headers).json()]
    assert levels == [1, 2]

    assert client.delete(f"/admin/approvers/{approver_id}", headers=headers).status_code == 200


def test_staff_cannot_manage_employees(client, staff):
    res = client.get("/admin/employees", headers=auth(staff.employee_id))
    assert res.status_code == 403
