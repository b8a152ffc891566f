# barbershop/routers/users_routes.py

from fastapi import APIRouter, Depends
from sqlmodel import Session

from barbershop.auth import get_current_user, register_user, user_payload
from barbershop.db import get_session
from barbershop.schemas import UserCreate, UserPublic

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    """Sign up as a barber or a customer. Emails are unique, case-insensitively."""
    created = register_user(session, user.email, user.name, user.password, user.role.value)
    return user_payload(created)
