# app/dependencies.py
"""
FastAPI dependencies for authentication and role checks.
A bearer token is resolved to an approved, active User; the role guards sit on top.
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import Forbidden, TokenInvalid
from app.models import User
from app.models.enums import Role
from app.services import auth_service

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise TokenInvalid("No token provided", code="token_missing")
    return auth_service.current_user(db, credentials.credentials)


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != Role.ADMIN.value:
        raise Forbidden("Admin access required")
    return user


def require_sos(user: User = Depends(get_current_user)) -> User:
    if user.role != Role.SOS.value:
        raise Forbidden("SOS access required")
    return user
