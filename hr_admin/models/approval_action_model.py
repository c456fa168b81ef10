from sqlalchemy import (
    Column, Integer, String, DateTime, Text, ForeignKey, UniqueConstraint
)
from sqlalchemy.sql import func
from hr_admin.utils.database import Base


class ApprovalAction(Base):
    __tablename__ = "approval_actions"
    __table_args__ = (
        UniqueConstraint("request_type", "request_id", "approval_level", name="uq_approval_per_level"),
    )

    action_id = Column(Integer, primary_key=True, index=True)

    # salary-loan / housing-loan / car-loan / medical-reimbursement / medical-loa / house-booking
    request_type = Column(String(40), nullable=False, index=True)
    request_id = Column(Integer, nullable=False, index=True)

    approver_employee_id = Column(String(20), ForeignKey("employees.employee_id"), nullable=False)
    approval_level = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False)  # Approved / Rejected
    comment = Column(Text, nullable=True)
    approved_at = Column(DateTime, server_default=func.now(), nullable=False)
