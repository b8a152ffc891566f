# barbershop/config.py

from dataclasses import dataclass
from functools import lru_cache
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./barber.db"

    secret_key: str = "change-me-later"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    log_level: str = "INFO"
    shop_timezone: str = "UTC"
    seed_services: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BARBERSHOP_",
        extra="ignore",
    )


settings = Settings()


@dataclass(frozen=True)
class BookingConfig:
    """
    Booking rules shared by availability and appointment creation.

    Attributes:
        slot_width_minutes: Width of one bookable slot (must divide an hour)
        same_day_notice_minutes: Minimum lead time for same-day bookings
        max_advance_months: How far ahead a customer may book
        cancellation_deadline_hours: Latest a customer may cancel, before start
        max_appointments_per_day: Per-customer cap of active appointments per day
        shop_timezone: Wall clock used for schedules and slots
        day_boundary_timezone: Zone that decides the calendar day for the daily cap
    """
    slot_width_minutes: int = 20
    same_day_notice_minutes: int = 15
    max_advance_months: int = 3
    cancellation_deadline_hours: int = 1
    max_appointments_per_day: int = 2
    shop_timezone: str = "UTC"
    day_boundary_timezone: str = "UTC"

    def __post_init__(self):
        if self.slot_width_minutes <= 0 or 60 % self.slot_width_minutes != 0:
            raise ValueError(
                f"slot_width_minutes must divide 60, got {self.slot_width_minutes}"
            )
        for name in (
            "same_day_notice_minutes",
            "max_advance_months",
            "cancellation_deadline_hours",
            "max_appointments_per_day",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")
        # fail early on unknown zone names
        ZoneInfo(self.shop_timezone)
        ZoneInfo(self.day_boundary_timezone)

    @property
    def shop_tz(self) -> ZoneInfo:
        return ZoneInfo(self.shop_timezone)

    @property
    def day_boundary_tz(self) -> ZoneInfo:
        return ZoneInfo(self.day_boundary_timezone)


@lru_cache
def get_booking_config() -> BookingConfig:
    return BookingConfig(shop_timezone=settings.shop_timezone)
