# app/services/auth_service.py
"""
Accounts, login and the SOS approval workflow.

States: an account is approved or not, and (independently) active or not.
  - admin accounts are created approved and active
  - sos accounts are created unapproved and inactive; an admin approves them
    (which also activates them when settings.APPROVAL_ACTIVATES_ACCOUNT is set)
  - admins can toggle is_active afterwards
Login checks the password, then approval, then activation, and only then
issues a token, so a pending or deactivated account never gets one.
"""

from typing import Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import (
    AlreadyApproved,
    ConflictError,
    Deactivated,
    DuplicateKey,
    InvalidCredentials,
    NotEligible,
    NotFoundError,
    PendingApproval,
    TokenInvalid,
    ValidationError,
)
from app.models import User
from app.models.enums import Role
from app.services.pagination import Page, paginate
from app.utils.logger import get_logger
from app.utils.security import create_access_token, decode_token, hash_password, verify_password
from app.utils.time_utils import utcnow

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


def _ensure_unique(db: Session, email: str, cin: str):
    existing = db.query(User).filter(or_(User.email == email, User.cin == cin)).first()
    if existing:
        raise DuplicateKey("Email already registered" if existing.email == email else "CIN already registered")


def _check_password(password: str):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")


def _parse_role(value) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError("Valid role is required (admin or sos)")


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def register(db: Session, data: dict) -> User:
    """Self-registration. Admins start approved + active, SOS accounts start pending."""
    role = _parse_role(data.get("role"))
    email = data["email"].lower()
    _check_password(data["password"])
    _ensure_unique(db, email, data["cin"])

    is_admin = role == Role.ADMIN
    user = User(
        cin=data["cin"],
        first_name=data["first_name"],
        last_name=data["last_name"],
        birthdate=data.get("birthdate"),
        phone_number=data.get("phone_number"),
        email=email,
        password_hash=hash_password(data["password"]),
        role=role.value,
        is_approved=is_admin,
        is_active=is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"[Auth] Registered {role.value} account {email} (approved={user.is_approved})")
    return user


def authenticate(db: Session, email: str, password: str) -> Tuple[str, User]:
    """Return (token, user). Raises InvalidCredentials, PendingApproval or Deactivated."""
    user = db.query(User).filter(User.email == (email or "").lower()).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.info(f"[Auth] Failed login for {email}")
        raise InvalidCredentials()
    if not user.is_approved:
        raise PendingApproval()
    if not user.is_active:
        raise Deactivated()

    token = create_access_token({"sub": str(user.id), "id": user.id, "email": user.email, "role": user.role})
    logger.info(f"[Auth] Login {user.email} role={user.role}")
    return token, user


def current_user(db: Session, token: str) -> User:
    """Resolve a bearer token to an approved, active account."""
    claims = decode_token(token)
    user_id = claims.get("id") or claims.get("sub")
    if not user_id:
        raise TokenInvalid("Invalid token payload")
    user = db.get(User, int(user_id))
    if user is None:
        raise TokenInvalid()
    if not user.is_approved:
        raise PendingApproval()
    if not user.is_active:
        raise Deactivated()
    return user


def approve(db: Session, admin: User, user_id: int) -> User:
    """Approve a pending SOS account. Approving twice is rejected."""
    user = get_user(db, user_id)
    if user.role != Role.SOS.value:
        raise NotEligible()
    if user.is_approved:
        raise AlreadyApproved()

    user.is_approved = True
    user.approved_by = admin.id
    user.approved_at = utcnow()
    if settings.APPROVAL_ACTIVATES_ACCOUNT:
        user.is_active = True
    db.commit()
    db.refresh(user)
    logger.info(f"[Auth] {admin.email} approved {user.email} (active={user.is_active})")
    return user


def reject(db: Session, user_id: int) -> dict:
    """Delete an account that is still pending approval. Returns what was removed."""
    user = get_user(db, user_id)
    if user.is_approved:
        raise ConflictError("Cannot reject an approved user")
    removed = {"first_name": user.first_name, "last_name": user.last_name, "email": user.email}
    db.delete(user)
    db.commit()
    logger.info(f"[Auth] Rejected pending account {removed['email']}")
    return removed


def toggle_active(db: Session, admin: User, user_id: int) -> User:
    if admin.id == user_id:
        raise ValidationError("Cannot deactivate your own account")
    user = get_user(db, user_id)
    user.is_active = not user.is_active
    db.commit()
    db.refresh(user)
    logger.info(f"[Auth] {admin.email} {'activated' if user.is_active else 'deactivated'} {user.email}")
    return user


def create_user_by_admin(db: Session, admin: User, data: dict) -> User:
    """Accounts created by an admin are approved and active straight away."""
    role = _parse_role(data.get("role") or Role.SOS.value)
    email = data["email"].lower()
    _check_password(data["password"])
    _ensure_unique(db, email, data["cin"])

    user = User(
        cin=data["cin"],
        first_name=data["first_name"],
        last_name=data["last_name"],
        birthdate=data.get("birthdate"),
        phone_number=data.get("phone_number"),
        email=email,
        password_hash=hash_password(data["password"]),
        role=role.value,
        is_approved=True,
        is_active=True,
        approved_by=admin.id,
        approved_at=utcnow(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"[Auth] {admin.email} created {role.value} account {email}")
    return user


def change_password(db: Session, user: User, old_password: str, new_password: str):
    _check_password(new_password)
    if not verify_password(old_password, user.password_hash):
        raise ValidationError("Old password is incorrect")
    user.password_hash = hash_password(new_password)
    db.commit()


def pending_approvals(db: Session):
    return (
        db.query(User)
        .filter(User.is_approved.is_(False), User.role == Role.SOS.value)
        .order_by(User.created_at.desc())
        .all()
    )


def list_users(
    db: Session,
    role: Optional[str] = None,
    is_approved: Optional[bool] = None,
    is_active: Optional[bool] = None,
    page: int = 1,
    limit: int = None,
) -> Page:
    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    if is_approved is not None:
        q = q.filter(User.is_approved.is_(is_approved))
    if is_active is not None:
        q = q.filter(User.is_active.is_(is_active))
    return paginate(q.order_by(User.created_at.desc(), User.id.desc()), page, limit)


def user_stats(db: Session) -> dict:
    def count(*criteria):
        return db.query(func.count(User.id)).filter(*criteria).scalar()

    admins = count(User.role == Role.ADMIN.value)
    sos = count(User.role == Role.SOS.value)
    return {
        "total_admins": admins,
        "total_sos": sos,
        "pending_approvals": count(User.role == Role.SOS.value, User.is_approved.is_(False)),
        "approved_sos": count(User.role == Role.SOS.value, User.is_approved.is_(True)),
        "deactivated_users": count(User.is_active.is_(False)),
        "total_users": admins + sos,
    }
