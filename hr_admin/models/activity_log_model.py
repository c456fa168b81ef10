from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from hr_admin.utils.database import Base


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    log_id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(20), nullable=True, index=True)

    action = Column(String(20), nullable=False, index=True)  # CREATE/UPDATE/DELETE/APPROVE/REJECT/...
    module = Column(String(40), nullable=False)
    details = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="SUCCESS")

    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)
