from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hr_admin.core.security import require_hr_admin
from hr_admin.models.benefits_model import MedicalLOA, MedicalReimbursement
from hr_admin.models.employee_model import Employee
from hr_admin.models.house_booking_model import HouseBooking
from hr_admin.models.loan_model import Loan
from hr_admin.models.support_ticket_model import SupportTicket
from hr_admin.schemas import DashboardStatsOut
from hr_admin.utils.database import get_db

router = APIRouter(prefix="/admin", tags=["Dashboard"])


@router.get("/dashboard-stats", response_model=DashboardStatsOut)
def dashboard_stats(
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    pending_benefits = (
        db.query(MedicalReimbursement).filter(MedicalReimbursement.status == "Pending").count()
        + db.query(MedicalLOA).filter(MedicalLOA.status == "Pending").count()
    )
    return DashboardStatsOut(
        total_employees=db.query(Employee).filter(Employee.is_active.is_(True)).count(),
        pending_loans=db.query(Loan).filter(Loan.status == "Pending").count(),
        pending_benefits=pending_benefits,
        pending_bookings=db.query(HouseBooking).filter(HouseBooking.status == "Pending").count(),
        unresolved_tickets=db.query(SupportTicket).filter(SupportTicket.status != "Resolved").count(),
    )
