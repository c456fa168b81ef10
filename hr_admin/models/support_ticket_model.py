from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hr_admin.utils.database import Base


class SupportTicket(Base):
    __tablename__ = "support_tickets"

    ticket_id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String(20), ForeignKey("employees.employee_id"), nullable=False, index=True)

    subject = Column(String(200), nullable=False)
    category = Column(String(60), nullable=False)
    message = Column(Text, nullable=False)

    # Unread / Read / In Progress / Resolved
    status = Column(String(20), nullable=False, default="Unread", index=True)
    resolution_comment = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee")
