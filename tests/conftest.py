import os
import tempfile

# configure before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BACKUP_DIR"] = tempfile.mkdtemp(prefix="hr_admin_backups_")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from hr_admin.core.security import create_access_token
from hr_admin.models.employee_model import Approver, Employee
from hr_admin.models.loan_model import Loan, LoanDeduction
from hr_admin.utils.database import Base, get_db
from hr_admin.utils.loan_rules import SALARY_LOAN
from hr_admin.utils.position_data import benefits_for, position_salary, role_class

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        s = TestingSessionLocal()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = override_get_db
    # no context manager: startup hooks (create_all on the real engine, seeding) stay off
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(employee_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(employee_id)}"}


def add_employee(db, employee_id: str, position: str, department: str = "HR", **overrides) -> Employee:
    rc = role_class(position)
    package, allowance = benefits_for(rc)
    fields = dict(
        employee_id=employee_id,
        first_name="Test",
        last_name=employee_id,
        email=f"{employee_id.lower()}@example.com",
        position=position,
        department=department,
        salary=Decimal(position_salary(position)),
        role_class=rc,
        benefits_package=package or None,
        benefits_amount=allowance,
        benefits_amount_remaining=allowance,
        is_active=True,
    )
    fields.update(overrides)
    emp = Employee(**fields)
    db.add(emp)
    db.commit()
    return emp


def add_approver(db, employee_id: str, level: int, title: str) -> Approver:
    approver = Approver(employee_id=employee_id, approval_level=title, numeric_level=level, can_approve=True)
    db.add(approver)
    db.commit()
    return approver


def add_approved_loan(db, employee_id: str, amounts, loan_type: str = SALARY_LOAN, start_year: int = 2031) -> Loan:
    """Approved loan with one monthly deduction per amount, due the 15th from January ``start_year``."""
    amounts = [Decimal(str(a)) for a in amounts]
    loan = Loan(
        employee_id=employee_id,
        loan_type=loan_type,
        amount=sum(amounts),
        repayment_term=len(amounts),
        status="Approved",
        current_approval_level=4,
    )
    db.add(loan)
    db.flush()
    for i, a in enumerate(amounts):
        db.add(
            LoanDeduction(
                loan_id=loan.loan_id,
                deduction_date=date(start_year, i + 1, 15),
                amount=a,
                status="Unpaid",
                payment_amount=Decimal("0.00"),
            )
        )
    db.commit()
    db.refresh(loan)
    return loan


@pytest.fixture
def staff(db):
    return add_employee(db, "CLK001", "Clerk", department="Finance")


@pytest.fixture
def manager(db):
    return add_employee(db, "MGR001", "Manager", department="Operations")


@pytest.fixture
def hr_manager(db):
    emp = add_employee(db, "HRM001", "HR Manager")
    add_approver(db, emp.employee_id, 1, "HR Manager")
    return emp


@pytest.fixture
def sys_admin(db):
    return add_employee(db, "ADM001", "System Administrator", department="IT")


@pytest.fixture
def approval_chain(db, hr_manager):
    """HR Manager (1), Supervisor (2), Division Manager (3), Senior Manager (4)."""
    sup = add_employee(db, "SUP001", "Department Supervisor")
    dm = add_employee(db, "DM001", "Division Manager")
    sm = add_employee(db, "SM001", "Senior Manager")
    add_approver(db, sup.employee_id, 2, "Department Supervisor")
    add_approver(db, dm.employee_id, 3, "Vice President")
    add_approver(db, sm.employee_id, 4, "President")
    return [hr_manager.employee_id, sup.employee_id, dm.employee_id, sm.employee_id]
