"""
Domain exceptions for the HR admin backend.

Each carries an ``error_code`` and the HTTP status it maps to; the handler
registered in ``main.py`` renders them with ``to_dict()``.
"""
from typing import Optional


class HRAdminException(Exception):
    """Base exception for all HR admin specific errors."""

    error_code: str = "ERR_HR_ADMIN"
    default_message: str = "An error occurred in the HR admin service."
    status_code: int = 400

    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "error": self.message,
            "details": self.details,
        }


# Payment-related exceptions
class InvalidAmount(HRAdminException):
    """Raised when a payment amount is zero or negative."""

    error_code = "ERR_INVALID_AMOUNT"
    default_message = "Payment amount must be greater than zero."
    status_code = 400


class NoOutstandingInstallments(HRAdminException):
    """Raised when every deduction of a loan is already paid."""

    error_code = "ERR_NO_OUTSTANDING_INSTALLMENTS"
    default_message = "No unpaid deductions found for this loan."
    status_code = 400


class RowAllocationFailed(HRAdminException):
    """Raised when a single deduction write fails part-way through a payment."""

    error_code = "ERR_ROW_ALLOCATION_FAILED"
    default_message = "Payment could not be applied to every deduction."
    status_code = 502


class LedgerWriteFailed(HRAdminException):
    """Raised when the payment history entry cannot be written."""

    error_code = "ERR_LEDGER_WRITE_FAILED"
    default_message = "Failed to record payment."
    status_code = 500


# Auth-related exceptions
class Unauthenticated(HRAdminException):
    error_code = "ERR_UNAUTHENTICATED"
    default_message = "Unauthorized - Please log in"
    status_code = 401


class Forbidden(HRAdminException):
    error_code = "ERR_FORBIDDEN"
    default_message = "Forbidden - Admin access required"
    status_code = 403


# Workflow-related exceptions
class InvalidTransition(HRAdminException):
    """Raised when an approval action is not allowed from the current state."""

    error_code = "ERR_INVALID_TRANSITION"
    default_message = "Invalid approval transition attempted."
    status_code = 400


class ApprovalLevelMismatch(HRAdminException):
    """Raised when an approver acts on a request waiting at another level."""

    error_code = "ERR_APPROVAL_LEVEL_MISMATCH"
    default_message = "You are not authorized to approve/reject at the current level"
    status_code = 403
