# hr_admin/models/benefits_model.py
from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, Text, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hr_admin.utils.database import Base


class MedicalReimbursement(Base):
    __tablename__ = "medical_reimbursements"

    reimbursement_id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String(20), ForeignKey("employees.employee_id"), nullable=False, index=True)

    patient_type = Column(String(20), nullable=False)  # inpatient / outpatient
    admission_date = Column(Date, nullable=False)
    discharge_date = Column(Date, nullable=True)

    total_amount = Column(Numeric(12, 2), nullable=False)
    claim_method = Column(String(20), nullable=False)  # cash / salary
    remarks = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="Pending")
    current_approval_level = Column(Integer, nullable=False, default=1)

    submitted_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee")


class MedicalLOA(Base):
    __tablename__ = "medical_loas"

    loa_id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String(20), ForeignKey("employees.employee_id"), nullable=False, index=True)

    hospital_name = Column(String(150), nullable=False)
    visit_date = Column(Date, nullable=False)
    reason_type = Column(String(60), nullable=False)
    preferred_doctor = Column(String(120), nullable=True)
    remarks = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="Pending")
    current_approval_level = Column(Integer, nullable=False, default=1)

    submitted_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee")
