# barbershop/catalog.py

"""
Service catalog. Services are never physically removed: appointments keep
pointing at them, so deleting only flips the status to inactive.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlmodel import Session, select

from .config import BookingConfig, get_booking_config
from .errors import ConflictError, NotFoundError, ValidationError
from .models import Service, ServiceStatus

logger = logging.getLogger(__name__)


def find_service(session: Session, key: str) -> Optional[Service]:
    return session.exec(select(Service).where(Service.key == key)).first()


def get_service(session: Session, key: str) -> Service:
    service = find_service(session, key)
    if service is None:
        raise NotFoundError("Service not found")
    return service


def list_services(session: Session, include_inactive: bool = False) -> list[Service]:
    stmt = select(Service)
    if not include_inactive:
        stmt = stmt.where(Service.status == ServiceStatus.active.value)
    return list(session.exec(stmt.order_by(Service.name)).all())


def _check_values(price, duration, config: BookingConfig):
    if price is not None and Decimal(price) <= 0:
        raise ValidationError("Price must be greater than 0")
    if duration is not None:
        if duration <= 0:
            raise ValidationError("Duration must be greater than 0")
        if duration % config.slot_width_minutes != 0:
            raise ValidationError(
                f"Duration must be a multiple of {config.slot_width_minutes} minutes"
            )


def create_service(
    session: Session,
    key: str,
    name: str,
    price,
    duration: int,
    config: Optional[BookingConfig] = None,
) -> tuple[Service, bool]:
    """
    Create a service, or bring back an inactive one under the same key with
    the new data. Returns (service, created).
    """
    _check_values(price, duration, config or get_booking_config())

    existing = find_service(session, key)
    if existing is not None and existing.is_active:
        raise ConflictError("Service ID already exists")

    created = existing is None
    service = existing or Service(key=key)
    service.name = name.strip()
    service.price = Decimal(price)
    service.duration = duration
    service.status = ServiceStatus.active.value

    session.add(service)
    session.commit()
    session.refresh(service)
    logger.info("%s service %s", "Created" if created else "Restored", key)
    return service, created


def update_service(
    session: Session,
    key: str,
    name: Optional[str] = None,
    price=None,
    duration: Optional[int] = None,
    config: Optional[BookingConfig] = None,
) -> Service:
    service = get_service(session, key)
    _check_values(price, duration, config or get_booking_config())

    if name is not None:
        service.name = name.strip()
    if price is not None:
        service.price = Decimal(price)
    if duration is not None:
        service.duration = duration

    session.add(service)
    session.commit()
    session.refresh(service)
    return service


def deactivate_service(session: Session, key: str) -> None:
    service = get_service(session, key)
    service.status = ServiceStatus.inactive.value
    session.add(service)
    session.commit()
    logger.info("Deactivated service %s", key)


def restore_service(session: Session, key: str) -> Service:
    service = get_service(session, key)
    if service.is_active:
        raise ValidationError("Service is already active")
    service.status = ServiceStatus.active.value
    session.add(service)
    session.commit()
    session.refresh(service)
    logger.info("Restored service %s", key)
    return service
