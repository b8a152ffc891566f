# barbershop/deps.py

from fastapi import Depends, HTTPException

from .auth import get_current_user


def require_role(user: dict, role: str):
    if user["role"] != role:
        raise HTTPException(status_code=403, detail="Forbidden")


def current_barber(current_user: dict = Depends(get_current_user)) -> dict:
    require_role(current_user, "barber")
    return current_user


def current_customer(current_user: dict = Depends(get_current_user)) -> dict:
    require_role(current_user, "customer")
    return current_user
