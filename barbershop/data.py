# barbershop/data.py

import logging
from decimal import Decimal

from sqlmodel import Session, select

from .models import Service

logger = logging.getLogger(__name__)

# durations are whole 20-minute slots
DEFAULT_SERVICES = [
    {"key": "shape_up", "name": "Shape Up", "price": "15.00", "duration": 20},
    {"key": "beard_trim", "name": "Beard Trim", "price": "15.00", "duration": 20},
    {"key": "haircut", "name": "Haircut", "price": "30.00", "duration": 40},
    {"key": "fade", "name": "Fade", "price": "35.00", "duration": 40},
    {"key": "scissors_cut", "name": "Scissors Cut", "price": "35.00", "duration": 40},
    {"key": "cut_and_beard", "name": "Cut and Beard", "price": "45.00", "duration": 60},
]


def seed_default_services(session: Session) -> int:
    """Insert the default catalog into an empty service table."""
    if session.exec(select(Service)).first() is not None:
        return 0

    for entry in DEFAULT_SERVICES:
        session.add(
            Service(
                key=entry["key"],
                name=entry["name"],
                price=Decimal(entry["price"]),
                duration=entry["duration"],
            )
        )
    session.commit()
    logger.info("Seeded %d default services", len(DEFAULT_SERVICES))
    return len(DEFAULT_SERVICES)
