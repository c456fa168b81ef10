from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from hr_admin.core.security import get_current_employee, require_hr_admin
from hr_admin.models.employee_model import Employee
from hr_admin.models.house_booking_model import HouseBooking
from hr_admin.schemas.booking_schemas import CANCELLED, BookedSlotOut, BookingCreate, BookingOut
from hr_admin.services.booking_service import (
    CLEANING_BUFFER,
    MAX_STAY,
    employee_conflict,
    property_conflict,
)
from hr_admin.utils.activity import log_activity
from hr_admin.utils.database import get_db

router = APIRouter(prefix="/house-bookings", tags=["House Booking"])


def _get_booking_or_404(db: Session, booking_id: int) -> HouseBooking:
    b = db.query(HouseBooking).filter(HouseBooking.booking_id == booking_id).first()
    if not b:
        raise HTTPException(404, "Booking not found")
    return b


# SUBMIT
@router.post("", response_model=BookingOut)
def submit_booking(
        payload: BookingCreate,
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    if payload.number_of_guests < 1:
        raise HTTPException(400, "Number of guests must be at least 1")

    checkin, checkout = payload.checkin_at, payload.checkout_at
    if checkin <= datetime.now():
        raise HTTPException(400, "Check-in must be in the future")
    if checkout <= checkin:
        raise HTTPException(400, "Check-out must be after check-in")
    if checkout - checkin > MAX_STAY:
        raise HTTPException(400, "Maximum stay is 5 days")

    if employee_conflict(db, me.employee_id, checkin, checkout):
        raise HTTPException(409, "You already have an approved booking during this period")
    if property_conflict(db, payload.property_name, checkin, checkout):
        raise HTTPException(
            409,
            "This property is already booked or within a 3-hour cleaning period during the specified time",
        )

    booking = HouseBooking(
        employee_id=me.employee_id,
        **payload.model_dump(),
        status="Pending",
        current_approval_level=1,
    )
    db.add(booking)
    db.flush()
    log_activity(
        db, me.employee_id, "CREATE", "HOUSE_BOOKING",
        f"Booked {booking.property_name} #{booking.booking_id} from {checkin:%Y-%m-%d %H:%M}",
    )
    db.commit()
    db.refresh(booking)
    return booking


# MY BOOKINGS
@router.get("/mine", response_model=list[BookingOut])
def my_bookings(
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    return (
        db.query(HouseBooking)
        .filter(HouseBooking.employee_id == me.employee_id)
        .order_by(HouseBooking.checkin_at.desc())
        .all()
    )


# AVAILABILITY
@router.get("/availability", response_model=list[BookedSlotOut])
def property_availability(
        property_name: str = Query(...),
        db: Session = Depends(get_db),
        _me: Employee = Depends(get_current_employee),
):
    """Approved upcoming stays of a property, with the time it frees up again."""
    rows = (
        db.query(HouseBooking)
        .filter(
            HouseBooking.property_name == property_name,
            HouseBooking.status == "Approved",
            HouseBooking.checkout_at >= datetime.now() - CLEANING_BUFFER,
        )
        .order_by(HouseBooking.checkin_at.asc())
        .all()
    )
    return [
        BookedSlotOut(
            booking_id=b.booking_id,
            checkin_at=b.checkin_at,
            checkout_at=b.checkout_at,
            available_from=b.checkout_at + CLEANING_BUFFER,
        )
        for b in rows
    ]


# CANCEL (owner, pending only)
@router.post("/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking(
        booking_id: int,
        db: Session = Depends(get_db),
        me: Employee = Depends(get_current_employee),
):
    booking = _get_booking_or_404(db, booking_id)
    if booking.employee_id != me.employee_id:
        raise HTTPException(404, "Booking not found")
    if booking.status != "Pending":
        raise HTTPException(400, f"Only pending bookings can be cancelled (booking is {booking.status})")

    booking.status = CANCELLED
    log_activity(db, me.employee_id, "CANCEL", "HOUSE_BOOKING", f"Cancelled booking #{booking_id}")
    db.commit()
    db.refresh(booking)
    return booking


# ADMIN LIST
@router.get("", response_model=list[BookingOut])
def list_bookings(
        status: Optional[str] = Query(None),
        property_name: Optional[str] = None,
        db: Session = Depends(get_db),
        _admin: Employee = Depends(require_hr_admin),
):
    q = db.query(HouseBooking)
    if status:
        q = q.filter(HouseBooking.status == status)
    if property_name:
        q = q.filter(HouseBooking.property_name == property_name)
    return q.order_by(HouseBooking.submitted_at.desc(), HouseBooking.booking_id.desc()).all()


# ADMIN DELETE
@router.delete("/{booking_id}")
def delete_booking(
        booking_id: int,
        db: Session = Depends(get_db),
        admin: Employee = Depends(require_hr_admin),
):
    booking = _get_booking_or_404(db, booking_id)
    log_activity(db, admin.employee_id, "DELETE", "HOUSE_BOOKING", f"Deleted booking #{booking_id}")
    db.delete(booking)
    db.commit()
    return {"message": "Booking deleted successfully"}
