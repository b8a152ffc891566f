# barbershop/rules.py

"""
Business rules for booking and cancelling. Each check raises
ValidationError with a user-facing message, or returns None.
"""

from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlmodel import Session, select

from .config import BookingConfig
from .core import day_bounds, from_storage, is_valid_slot_boundary, to_local, utc_now
from .errors import ValidationError
from .models import Appointment, CANCELLED


def _grid_minutes(width: int) -> str:
    marks = [f":{m:02d}" for m in range(0, 60, width)]
    if len(marks) == 1:
        return marks[0]
    return ", ".join(marks[:-1]) + ", or " + marks[-1]


def validate_advance_booking(ts: datetime, config: BookingConfig, now: Optional[datetime] = None):
    now = from_storage(now or utc_now())
    ts = from_storage(ts)

    if not is_valid_slot_boundary(ts, config.slot_width_minutes, config.shop_tz):
        raise ValidationError(
            f"Appointments must start at {_grid_minutes(config.slot_width_minutes)} past the hour"
        )

    same_day = to_local(ts, config.shop_tz).date() == to_local(now, config.shop_tz).date()
    if same_day and ts < now + timedelta(minutes=config.same_day_notice_minutes):
        raise ValidationError(
            f"Same-day appointments must be booked at least "
            f"{config.same_day_notice_minutes} minutes in advance"
        )

    if ts < now:
        raise ValidationError("Cannot book appointments in the past")

    if ts > now + relativedelta(months=config.max_advance_months):
        raise ValidationError(
            f"Cannot book appointments more than {config.max_advance_months} months in advance"
        )


def count_appointments_on_day(
    session: Session,
    customer_id: int,
    ts: datetime,
    config: BookingConfig,
    exclude_id: Optional[int] = None,
) -> int:
    """Active appointments of the customer on the calendar day of `ts`."""
    tz = config.day_boundary_tz
    day_start, day_end = day_bounds(to_local(ts, tz).date(), tz)
    stmt = (
        select(func.count())
        .select_from(Appointment)
        .where(Appointment.customer_id == customer_id)
        .where(Appointment.appointment_date >= day_start)
        .where(Appointment.appointment_date < day_end)
        .where((Appointment.status.is_(None)) | (Appointment.status != CANCELLED))
    )
    if exclude_id is not None:
        stmt = stmt.where(Appointment.id != exclude_id)
    return session.exec(stmt).one()


def check_max_appointments_per_day(
    session: Session,
    customer_id: int,
    ts: datetime,
    config: BookingConfig,
    exclude_id: Optional[int] = None,
):
    cap = config.max_appointments_per_day
    if count_appointments_on_day(session, customer_id, ts, config, exclude_id) >= cap:
        plural = "s" if cap != 1 else ""
        raise ValidationError(f"You can only have {cap} appointment{plural} per day")


def can_cancel(ts: datetime, config: BookingConfig, now: Optional[datetime] = None) -> bool:
    deadline = from_storage(ts) - timedelta(hours=config.cancellation_deadline_hours)
    return not from_storage(now or utc_now()) > deadline


def check_cancellation_deadline(ts: datetime, config: BookingConfig, now: Optional[datetime] = None):
    if not can_cancel(ts, config, now):
        hours = config.cancellation_deadline_hours
        raise ValidationError(
            f"Appointments must be cancelled at least {hours} hour{'s' if hours != 1 else ''} in advance"
        )
