from pydantic import BaseModel


class DashboardStatsOut(BaseModel):
    total_employees: int
    pending_loans: int
    pending_benefits: int
    pending_bookings: int
    unresolved_tickets: int
