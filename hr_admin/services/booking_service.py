from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from hr_admin.models.house_booking_model import HouseBooking

MAX_STAY = timedelta(days=5)
CLEANING_BUFFER = timedelta(hours=3)


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and end_a > start_b


def employee_conflict(
        db: Session,
        employee_id: str,
        checkin: datetime,
        checkout: datetime,
        exclude_id: Optional[int] = None,
) -> Optional[HouseBooking]:
    """An approved booking of the same employee at any property that overlaps."""
    q = db.query(HouseBooking).filter(
        HouseBooking.employee_id == employee_id,
        HouseBooking.status == "Approved",
    )
    if exclude_id is not None:
        q = q.filter(HouseBooking.booking_id != exclude_id)
    for b in q.all():
        if overlaps(checkin, checkout, b.checkin_at, b.checkout_at):
            return b
    return None


def property_conflict(
        db: Session,
        property_name: str,
        checkin: datetime,
        checkout: datetime,
        exclude_id: Optional[int] = None,
) -> Optional[HouseBooking]:
    """
    An approved booking of the property that overlaps, counting the
    cleaning buffer after each checkout as occupied.
    """
    q = db.query(HouseBooking).filter(
        HouseBooking.property_name == property_name,
        HouseBooking.status == "Approved",
    )
    if exclude_id is not None:
        q = q.filter(HouseBooking.booking_id != exclude_id)
    for b in q.all():
        if overlaps(checkin, checkout, b.checkin_at, b.checkout_at + CLEANING_BUFFER):
            return b
    return None
