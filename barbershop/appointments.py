# barbershop/appointments.py

"""
Appointment creation, cancellation and status changes.

Creation re-checks every rule inside one store transaction: the barber row
is locked, rules and conflicts are evaluated against what the transaction
sees, and the insert happens before the commit. A uniqueness violation
raised by the store (two requests racing for the same start) is reported
as a booking conflict.
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .catalog import find_service
from .config import BookingConfig, get_booking_config
from .conflicts import find_barber_conflict, find_customer_conflict
from .core import day_bounds, from_storage, parse_date, parse_instant, utc_now
from .db import is_uniqueness_violation, transaction
from .errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from .models import Appointment, CANCELLED, User
from .rules import check_cancellation_deadline, check_max_appointments_per_day, validate_advance_booking

logger = logging.getLogger(__name__)

UNKNOWN_BARBER = "Unknown Barber"

SLOT_TAKEN_MESSAGE = "This time slot is already booked for this barber. Please choose another time or barber."


def _to_price(value) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid price '{value}'")


def appointment_payload(appointment: Appointment, barber: Optional[User]) -> dict:
    """Wire representation, with barber display info."""
    service = appointment.service
    return {
        "id": appointment.id,
        "customer_id": appointment.customer_id,
        "barber_id": appointment.barber_id,
        "appointment_date": from_storage(appointment.appointment_date),
        "service_id": service.key if service is not None else None,
        "service_type": appointment.service_type,
        "price": appointment.price,
        "duration": appointment.duration,
        "notes": appointment.notes,
        "status": appointment.status,
        "barber": {
            "id": appointment.barber_id,
            "name": barber.name if barber is not None else UNKNOWN_BARBER,
        },
    }


def enrich_with_barber(session: Session, appointment: Appointment) -> dict:
    return appointment_payload(appointment, session.get(User, appointment.barber_id))


class AppointmentService:
    def __init__(self, config: Optional[BookingConfig] = None, clock: Callable[[], datetime] = utc_now):
        self.config = config or get_booking_config()
        self.clock = clock

    # -- creation ---------------------------------------------------------

    def _lock_barber(self, session: Session, barber_id: int) -> User:
        barber = session.exec(
            select(User).where(User.id == barber_id).with_for_update()
        ).first()
        if barber is None:
            raise NotFoundError("Invalid barber ID")
        if barber.role != "barber":
            raise ValidationError("Selected user is not a barber")
        return barber

    def _resolve_service(self, session: Session, service_key: Optional[str], expected_price):
        if not service_key:
            return None
        service = find_service(session, service_key)
        if service is None:
            raise NotFoundError("Invalid service ID")
        if not service.is_active:
            raise ValidationError("Service is not available")
        if expected_price is not None and _to_price(expected_price) != service.price:
            raise ConflictError(
                f"Price {expected_price} does not match service {service.name} "
                f"(expected {service.price})"
            )
        return service

    def create_appointment(
        self,
        session: Session,
        customer_id: int,
        barber_id: int,
        appointment_date,
        service_key: Optional[str] = None,
        expected_price=None,
        notes: Optional[str] = None,
    ) -> dict:
        config = self.config
        now = self.clock()
        start = parse_instant(appointment_date, config.shop_tz)

        try:
            with transaction(session):
                barber = self._lock_barber(session, barber_id)
                service = self._resolve_service(session, service_key, expected_price)
                duration = service.duration if service is not None else None

                validate_advance_booking(start, config, now)
                check_max_appointments_per_day(session, customer_id, start, config)

                if find_customer_conflict(session, customer_id, start, duration, config):
                    raise ConflictError(
                        "You already have an appointment that overlaps with this time slot. "
                        "Please select a different time."
                    )
                if find_barber_conflict(session, barber_id, start, duration, config):
                    raise ConflictError(SLOT_TAKEN_MESSAGE)

                appointment = Appointment(
                    customer_id=customer_id,
                    barber_id=barber_id,
                    appointment_date=start,
                    service_id=service.id if service is not None else None,
                    service=service,
                    service_type=service.name if service is not None else None,
                    price=service.price if service is not None else None,
                    duration=duration,
                    notes=notes or None,
                )
                session.add(appointment)
                session.flush()
                payload = appointment_payload(appointment, barber)
        except IntegrityError as exc:
            if not is_uniqueness_violation(exc):
                raise
            logger.warning(
                "Booking race lost: barber=%s customer=%s start=%s",
                barber_id, customer_id, start.isoformat(),
            )
            raise ConflictError(SLOT_TAKEN_MESSAGE) from exc
        except (ValidationError, ConflictError, NotFoundError) as exc:
            logger.info(
                "Booking rejected: barber=%s customer=%s start=%s: %s",
                barber_id, customer_id, start.isoformat(), exc.message,
            )
            raise

        logger.info(
            "Created appointment %s: barber=%s customer=%s start=%s",
            payload["id"], barber_id, customer_id, start.isoformat(),
        )
        return payload

    # -- cancellation -----------------------------------------------------

    def cancel_appointment(self, session: Session, appointment_id: int, customer_id: int) -> None:
        """Customer-initiated cancellation: the row is deleted."""
        with transaction(session):
            appointment = session.get(Appointment, appointment_id)
            if appointment is None:
                raise NotFoundError("Appointment not found")
            if appointment.customer_id != customer_id:
                raise ForbiddenError("Access denied")
            check_cancellation_deadline(appointment.appointment_date, self.config, self.clock())
            session.delete(appointment)

        logger.info("Customer %s cancelled appointment %s", customer_id, appointment_id)

    def set_appointment_status(
        self,
        session: Session,
        appointment_id: int,
        barber_id: int,
        status: str,
    ) -> dict:
        """Barber-initiated cancellation: the row stays, flagged cancelled."""
        if status != CANCELLED:
            raise ValidationError("Invalid status - can only cancel appointments")

        with transaction(session):
            appointment = session.get(Appointment, appointment_id)
            if appointment is None:
                raise NotFoundError("Appointment not found")
            if appointment.barber_id != barber_id:
                raise ForbiddenError("You can only update your own appointments")
            appointment.status = status
            session.add(appointment)
            session.flush()
            payload = enrich_with_barber(session, appointment)

        logger.info("Barber %s set appointment %s to %s", barber_id, appointment_id, status)
        return payload

    # -- listing ----------------------------------------------------------

    def list_customer_appointments(self, session: Session, customer_id: int) -> list[dict]:
        appointments = session.exec(
            select(Appointment)
            .where(Appointment.customer_id == customer_id)
            .order_by(Appointment.appointment_date)
        ).all()
        return [enrich_with_barber(session, a) for a in appointments]

    def list_barber_appointments(
        self,
        session: Session,
        barber_id: int,
        status: Optional[str] = None,
        day=None,
    ) -> list[dict]:
        """`status` is "active", "cancelled" or None for both."""
        stmt = select(Appointment).where(Appointment.barber_id == barber_id)
        if status == CANCELLED:
            stmt = stmt.where(Appointment.status == CANCELLED)
        elif status == "active":
            stmt = stmt.where(Appointment.status.is_(None))
        elif status is not None:
            raise ValidationError("status must be 'active' or 'cancelled'")
        if day is not None:
            day_start, day_end = day_bounds(parse_date(day), self.config.shop_tz)
            stmt = stmt.where(Appointment.appointment_date >= day_start).where(
                Appointment.appointment_date < day_end
            )

        appointments = session.exec(stmt.order_by(Appointment.appointment_date)).all()
        return [enrich_with_barber(session, a) for a in appointments]


def get_appointment_service() -> AppointmentService:
    return AppointmentService(get_booking_config())
