# Automatically load all models so metadata knows them
from hr_admin.models.activity_log_model import ActivityLog
from hr_admin.models.approval_action_model import ApprovalAction
from hr_admin.models.benefits_model import MedicalLOA, MedicalReimbursement
from hr_admin.models.database_backup_model import BackupSchedule, DatabaseBackup
from hr_admin.models.employee_model import Approver, Employee
from hr_admin.models.house_booking_model import HouseBooking
from hr_admin.models.loan_model import Loan, LoanDeduction, LoanPaymentHistory
from hr_admin.models.support_ticket_model import SupportTicket
