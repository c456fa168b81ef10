# hr_admin/models/loan_model.py

from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    Numeric,
    Text,
    Boolean,
    ForeignKey,
    Index,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hr_admin.utils.database import Base


class Loan(Base):
    __tablename__ = "loans"

    __table_args__ = (
        Index("ix_loans_type_status", "loan_type", "status"),
        Index("ix_loans_employee_status", "employee_id", "status"),
    )

    loan_id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(
        String(20), ForeignKey("employees.employee_id", ondelete="RESTRICT"), nullable=False, index=True
    )

    # Salary Loan / Housing Loan / Car Loan
    loan_type = Column(String(20), nullable=False)

    amount = Column(Numeric(12, 2), nullable=False)
    repayment_term = Column(Integer, nullable=False)  # months
    purpose = Column(Text, nullable=True)

    # car loans
    car_make = Column(String(60), nullable=True)
    car_model = Column(String(60), nullable=True)
    car_year = Column(String(4), nullable=True)

    # housing loans
    property_type = Column(String(60), nullable=True)
    property_address = Column(Text, nullable=True)

    # Pending / Approved / Rejected / Completed
    status = Column(String(20), nullable=False, default="Pending")
    current_approval_level = Column(Integer, nullable=False, default=1)

    submitted_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee")

    deductions = relationship(
        "LoanDeduction",
        back_populates="loan",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="LoanDeduction.deduction_date",
        passive_deletes=True,
    )


class LoanDeduction(Base):
    __tablename__ = "loan_deductions"

    deduction_id = Column(Integer, primary_key=True, index=True)
    loan_id = Column(Integer, ForeignKey("loans.loan_id", ondelete="CASCADE"), nullable=False, index=True)

    deduction_date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)  # scheduled, never changes

    # Unpaid / PartiallyPaid / Paid
    status = Column(String(20), nullable=False, default="Unpaid")
    payment_amount = Column(Numeric(12, 2), nullable=False, default=0)
    actual_deduction_date = Column(Date, nullable=True)
    payment_notes = Column(Text, nullable=True)
    is_early_payment = Column(Boolean, nullable=False, default=False)

    loan = relationship("Loan", back_populates="deductions")


class LoanPaymentHistory(Base):
    __tablename__ = "loan_payment_history"

    payment_id = Column(Integer, primary_key=True, index=True)
    loan_id = Column(Integer, ForeignKey("loans.loan_id", ondelete="CASCADE"), nullable=False, index=True)
    loan_type = Column(String(20), nullable=False)

    payment_amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(DateTime, server_default=func.now(), nullable=False)
    transaction_id = Column(String(40), nullable=False, unique=True)
    notes = Column(Text, nullable=True)
    payment_method = Column(String(30), nullable=False, default="Early Payment")

    recorded_by = Column(String(20), ForeignKey("employees.employee_id"), nullable=True)
