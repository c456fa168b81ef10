from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hr_admin.utils.database import Base


class HouseBooking(Base):
    __tablename__ = "house_bookings"
    __table_args__ = (
        Index("ix_house_bookings_property_status", "property_name", "status"),
    )

    booking_id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String(20), ForeignKey("employees.employee_id"), nullable=False, index=True)

    property_name = Column(String(120), nullable=False)
    property_location = Column(String(200), nullable=False)
    nature_of_stay = Column(String(60), nullable=False)
    reason_for_use = Column(Text, nullable=False)

    checkin_at = Column(DateTime, nullable=False)
    checkout_at = Column(DateTime, nullable=False)
    number_of_guests = Column(Integer, nullable=False, default=1)

    # Pending / Approved / Rejected / Cancelled
    status = Column(String(20), nullable=False, default="Pending")
    current_approval_level = Column(Integer, nullable=False, default=1)

    submitted_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee")
