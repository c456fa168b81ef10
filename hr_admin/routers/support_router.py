from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import case
from sqlalchemy.orm import Session

from hr_admin.core.security import get_current_employee, require_hr_admin
from hr_admin.models.employee_model import Employee
from hr_admin.models.support_ticket_model import SupportTicket
from hr_admin.schemas import TicketCreate, TicketOut, TicketStatusUpdate
from hr_admin.utils.activity import log_activity
from hr_admin.utils.database import get_db

router = APIRouter(prefix="/support", tags=["Support"])

# admin inbox order
STATUS_ORDER = {"Unread": 0, "In Progress": 1, "Read": 2, "Resolved": 3}


# SUBMIT
@router.post("/tickets", response_model=TicketOut)
def submit_ticket(
        payload: TicketCreate,
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    ticket = SupportTicket(
        employee_id=me.employee_id,
        subject=payload.subject.strip(),
        category=payload.category.strip(),
        message=payload.message.strip(),
        status="Unread",
    )
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    return ticket


@router.get("/tickets/mine", response_model=list[TicketOut])
def my_tickets(
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    return (
        db.query(SupportTicket)
        .filter(SupportTicket.employee_id == me.employee_id)
        .order_by(SupportTicket.created_at.desc(), SupportTicket.ticket_id.desc())
        .all()
    )


# ADMIN LIST
@router.get("/tickets", response_model=list[TicketOut])
def list_tickets(
        status: Optional[str] = Query(None),
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    q = db.query(SupportTicket)
    if status:
        q = q.filter(SupportTicket.status == status)

    rank = case(STATUS_ORDER, value=SupportTicket.status, else_=len(STATUS_ORDER))
    return q.order_by(rank, SupportTicket.created_at.desc(), SupportTicket.ticket_id.desc()).all()


# ADMIN STATUS UPDATE
@router.put("/tickets/{ticket_id}", response_model=TicketOut)
def update_ticket_status(
        ticket_id: int,
        payload: TicketStatusUpdate,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    ticket = db.query(SupportTicket).filter(SupportTicket.ticket_id == ticket_id).first()
    if not ticket:
        raise HTTPException(404, "Ticket not found")

    ticket.status = payload.status
    if payload.resolution_comment is not None:
        ticket.resolution_comment = payload.resolution_comment.strip() or None

    log_activity(
        db, admin.employee_id, "UPDATE", "SUPPORT",
        f"Ticket #{ticket_id} marked {payload.status}",
    )
    db.commit()
    db.refresh(ticket)
    return ticket
