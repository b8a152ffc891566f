# barbershop/auth.py

import logging
from datetime import timedelta
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlmodel import Session, select

from .config import settings
from .core import utc_now
from .db import get_session
from .errors import ConflictError
from .models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    claims = dict(data, exp=utc_now() + timedelta(minutes=minutes))
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == normalize_email(email))).first()


def user_payload(user: User) -> dict:
    return {"id": user.id, "email": user.email, "name": user.name, "role": user.role}


def register_user(session: Session, email: str, name: str, password: str, role: str) -> User:
    if find_user_by_email(session, email) is not None:
        raise ConflictError("Email already registered")

    user = User(
        email=normalize_email(email),
        name=name.strip(),
        password_hash=hash_password(password),
        role=role,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("Registered %s %s", user.role, user.id)
    return user


def authenticate_user(session: Session, email: str, password: str) -> Optional[User]:
    """The user for these credentials, or None."""
    user = find_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", email)
        return None
    return user


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> dict:
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        raise _unauthorized("Invalid token")

    email = claims.get("sub")
    if email is None:
        raise _unauthorized("Invalid token")

    user = find_user_by_email(session, email)
    if user is None:
        raise _unauthorized("User not found")
    return user_payload(user)
