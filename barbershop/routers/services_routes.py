# barbershop/routers/services_routes.py

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from barbershop import catalog
from barbershop.db import get_session
from barbershop.deps import current_barber
from barbershop.models import Service
from barbershop.schemas import MessageResponse, ServiceCreate, ServicePublic, ServiceUpdate

router = APIRouter(
    prefix="/services",
    tags=["services"],
)


def _public(service: Service) -> dict:
    return {
        "id": service.key,
        "name": service.name,
        "price": service.price,
        "duration": service.duration,
        "is_active": service.is_active,
    }


@router.get("", response_model=List[ServicePublic])
def list_services(session: Session = Depends(get_session)):
    return [_public(s) for s in catalog.list_services(session)]


@router.get("/all", response_model=List[ServicePublic])
def list_all_services(
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_barber),
):
    return [_public(s) for s in catalog.list_services(session, include_inactive=True)]


@router.post("", response_model=ServicePublic, status_code=201)
def create_service(
    body: ServiceCreate,
    response: Response,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_barber),
):
    service, created = catalog.create_service(
        session, body.id, body.name, body.price, body.duration
    )
    if not created:
        # an inactive service under this id came back
        response.status_code = 200
    return _public(service)


@router.patch("/{service_id}", response_model=ServicePublic)
def update_service(
    service_id: str,
    body: ServiceUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_barber),
):
    service = catalog.update_service(
        session, service_id, name=body.name, price=body.price, duration=body.duration
    )
    return _public(service)


@router.delete("/{service_id}", response_model=MessageResponse)
def delete_service(
    service_id: str,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_barber),
):
    catalog.deactivate_service(session, service_id)
    return {"message": "Service deleted successfully"}


@router.post("/{service_id}/restore", response_model=ServicePublic)
def restore_service(
    service_id: str,
    session: Session = Depends(get_session),
    current_user: dict = Depends(current_barber),
):
    return _public(catalog.restore_service(session, service_id))
