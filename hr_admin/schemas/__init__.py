from hr_admin.schemas.employee_schemas import (
    ApproverCreate,
    ApproverOut,
    EmployeeCreate,
    EmployeeListOut,
    EmployeeOut,
    EmployeeUpdate,
    NextEmployeeIdOut,
    PositionOut,
)
from hr_admin.schemas.support_schemas import TicketCreate, TicketOut, TicketStatusUpdate
from hr_admin.schemas.activity_log_schemas import ActivityLogListOut, ActivityLogOut
from hr_admin.schemas.dashboard_schemas import DashboardStatsOut
