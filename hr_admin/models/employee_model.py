from sqlalchemy import (
    Column, String, Date, DateTime, Numeric, Boolean, Integer, ForeignKey
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hr_admin.utils.database import Base


class Employee(Base):
    __tablename__ = "employees"

    # e.g. MGR004 (position prefix + 3-digit sequence)
    employee_id = Column(String(20), primary_key=True, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, nullable=False)
    phone = Column(String(30), nullable=True)

    position = Column(String(100), nullable=False, index=True)
    department = Column(String(100), nullable=False, index=True)

    salary = Column(Numeric(12, 2), nullable=False, default=0)
    role_class = Column(String(20), nullable=False, default="Class C")

    benefits_package = Column(String(50), nullable=True)
    benefits_amount = Column(Numeric(12, 2), nullable=False, default=0)
    benefits_amount_remaining = Column(Numeric(12, 2), nullable=False, default=0)

    hire_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    approver = relationship("Approver", back_populates="employee", uselist=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Approver(Base):
    __tablename__ = "approvers"

    approver_id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(
        String(20),
        ForeignKey("employees.employee_id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    # position title, e.g. "HR Manager" / "Vice President"
    approval_level = Column(String(100), nullable=False)
    # 1..4, matched against a request's current_approval_level
    numeric_level = Column(Integer, nullable=False)
    can_approve = Column(Boolean, nullable=False, default=True)

    employee = relationship("Employee", back_populates="approver")
