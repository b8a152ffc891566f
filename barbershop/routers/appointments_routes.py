# barbershop/routers/appointments_routes.py

from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from barbershop.appointments import AppointmentService, get_appointment_service
from barbershop.db import get_session
from barbershop.deps import current_customer
from barbershop.schemas import AppointmentCreate, AppointmentPublic, MessageResponse

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
)


@router.post("", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_customer),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.create_appointment(
        session,
        customer_id=current_user["id"],
        barber_id=appt.barber_id,
        appointment_date=appt.appointment_date,
        service_key=appt.service_id,
        expected_price=appt.price,
        notes=appt.notes,
    )


@router.get("/me", response_model=List[AppointmentPublic])
def list_my_appointments(
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_customer),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.list_customer_appointments(session, current_user["id"])


@router.delete("/{appointment_id}", response_model=MessageResponse)
def cancel_appointment(
    appointment_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_customer),
    service: AppointmentService = Depends(get_appointment_service),
):
    service.cancel_appointment(session, appointment_id, current_user["id"])
    return {"message": "Appointment cancelled successfully"}
