# barbershop/routers/barbers_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from barbershop import schedules
from barbershop.appointments import AppointmentService, get_appointment_service
from barbershop.availability import AvailabilityCalculator, get_availability_calculator
from barbershop.core import parse_date
from barbershop.db import get_session
from barbershop.deps import current_barber
from barbershop.models import User
from barbershop.schemas import (
    AppointmentPublic,
    AvailabilityResponse,
    BarberPublic,
    MessageResponse,
    ScheduleCreate,
    SchedulePublic,
    ScheduleResponse,
    ScheduleUpdate,
    StatusUpdate,
)

router = APIRouter(
    prefix="/barbers",
    tags=["barbers"],
)


@router.get("", response_model=List[BarberPublic])
def list_barbers(session: Session = Depends(get_session)):
    barbers = session.exec(
        select(User).where(User.role == "barber").order_by(User.name)
    ).all()
    return [{"id": b.id, "name": b.name} for b in barbers]


# -- the barber's own schedules -------------------------------------------

@router.get("/me/schedules", response_model=List[SchedulePublic])
def list_my_schedules(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_barber),
):
    return schedules.list_schedules(session, current_user["id"], start_date, end_date)


@router.post("/me/schedules", response_model=SchedulePublic, status_code=201)
def create_my_schedule(
    body: ScheduleCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_barber),
):
    return schedules.create_schedule(
        session, current_user["id"], body.date, body.start_time, body.end_time, body.is_active
    )


@router.put("/me/schedule", response_model=SchedulePublic)
def upsert_my_schedule(
    body: ScheduleCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_barber),
):
    return schedules.upsert_schedule(
        session, current_user["id"], body.date, body.start_time, body.end_time, body.is_active
    )


@router.patch("/me/schedules/{schedule_id}", response_model=SchedulePublic)
def update_my_schedule(
    schedule_id: int,
    body: ScheduleUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_barber),
):
    return schedules.update_schedule(
        session,
        schedule_id,
        current_user["id"],
        start_time=body.start_time,
        end_time=body.end_time,
        is_active=body.is_active,
    )


@router.delete("/me/schedules/{schedule_id}", response_model=MessageResponse)
def delete_my_schedule(
    schedule_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_barber),
):
    schedules.delete_schedule(session, schedule_id, current_user["id"])
    return {"message": "Schedule deleted successfully"}


# -- the barber's appointments --------------------------------------------

@router.get("/me/appointments", response_model=List[AppointmentPublic])
def list_my_appointments(
    status: Optional[str] = None,
    date: Optional[str] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_barber),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.list_barber_appointments(session, current_user["id"], status=status, day=date)


@router.patch("/me/appointments/{appointment_id}/status", response_model=AppointmentPublic)
def update_appointment_status(
    appointment_id: int,
    body: StatusUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_barber),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.set_appointment_status(session, appointment_id, current_user["id"], body.status)


# -- public views of a barber ---------------------------------------------

@router.get("/{barber_id}/schedule", response_model=ScheduleResponse)
def get_barber_schedule(
    barber_id: int,
    date: str,
    session: Session = Depends(get_session),
):
    return {"schedule": schedules.get_schedule(session, barber_id, date)}


@router.get("/{barber_id}/availability", response_model=AvailabilityResponse)
def barber_availability(
    barber_id: int,
    date: str,
    service_id: Optional[str] = None,
    session: Session = Depends(get_session),
    calculator: AvailabilityCalculator = Depends(get_availability_calculator),
):
    day = parse_date(date)
    return {
        "barber_id": barber_id,
        "date": day,
        "service_id": service_id,
        "available_starts": calculator.compute(session, day, barber_id, service_id),
    }
