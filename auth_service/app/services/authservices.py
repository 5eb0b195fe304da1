import logging
import secrets
from datetime import date, datetime
from fastapi import status
from sqlalchemy import func
from sqlalchemy.orm import Session

from hotel_service.app.enum.hospitality_enum import GuestType
from hotel_service.app.models.hospitality.guests import Guest
from shared.core import auth
from shared.core.config import settings
from shared.core.schemas import UserToken
from shared.helpers.audit_helper import log_change, snapshot
from shared.helpers.json_response_helper import error_response
from shared.models.roles import Roles
from shared.models.staff import Staff
from shared.models.users import Users
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import STAFF_ROLES, AuditAction, UserRole
from ..schemas import authschemas

logger = logging.getLogger(__name__)


def user_out(user: Users) -> authschemas.UserOut:
    return authschemas.UserOut(
        id=user.id,
        email=user.email,
        role=user.role_name,
        permissions=user.permissions,
        is_active=user.is_active,
        is_verified=user.is_verified,
        last_login=user.last_login,
        created_at=user.created_at,
    )


def calculate_age(born: date, today: date = None) -> int:
    today = today or date.today()
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def get_user_by_email(db: Session, email: str):
    return db.query(Users).filter(func.lower(Users.email) == email.lower()).first()


#### REGISTRATION ###

def register(db: Session, req: authschemas.RegisterRequest, request_meta: dict):
    """Create user, guest profile and audit rows in one transaction."""
    if req.date_of_birth and calculate_age(req.date_of_birth) < authschemas.MINIMUM_GUEST_AGE:
        return error_response(
            message=f"Guest must be at least {authschemas.MINIMUM_GUEST_AGE} years old",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=status.HTTP_400_BAD_REQUEST
        )

    email = req.email.lower()
    if get_user_by_email(db, email) or \
            db.query(Guest.id).filter(func.lower(Guest.email) == email).first():
        return error_response(
            message="User with this email already exists",
            status_code=AppStatusCode.USER_USERNAME_IS_UNIQUE,
            http_status=status.HTTP_409_CONFLICT
        )

    guest_role = db.query(Roles).filter(Roles.name == UserRole.GUEST.value).first()
    if not guest_role:
        logger.error("Role '%s' is missing, run the seed script", UserRole.GUEST.value)
        return error_response(
            message="Guest role is not configured",
            status_code=AppStatusCode.OPERATION_ERROR,
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    try:
        user = Users(
            email=email,
            role_id=guest_role.id,
            is_active=True,
            is_verified=False,
            verification_token=secrets.token_urlsafe(32),
        )
        user.set_password(req.password)
        db.add(user)
        db.flush()

        guest = Guest(
            user_id=user.id,
            email=email,
            guest_type=GuestType.online.value,
            **req.model_dump(exclude={"email", "password"}),
        )
        db.add(guest)
        db.flush()

        log_change(db, "users", user.id, AuditAction.INSERT, new_values=snapshot(user),
                   user_id=user.id, request_meta=request_meta)
        log_change(db, "guests", guest.id, AuditAction.INSERT, new_values=snapshot(guest),
                   user_id=user.id, request_meta=request_meta)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(user)
    logger.info("Registered guest user %s", user.id)
    return user, guest


#### USERNAME & PASSWORD AUTHENTICATION ###

def login(db: Session, req: authschemas.LoginRequest) -> authschemas.TokenResponse:
    user = get_user_by_email(db, req.email)
    if not user or not user.verify_password(req.password):
        return error_response(
            message="Invalid email or password",
            status_code=AppStatusCode.AUTHENTICATION_CREDENTIALS_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    if not user.is_active:
        return error_response(
            message="Account is deactivated",
            status_code=AppStatusCode.AUTHENTICATION_USER_INACTIVE,
            http_status=status.HTTP_403_FORBIDDEN
        )

    # staff accounts are created verified by an admin
    if user.role_name not in STAFF_ROLES and not user.is_verified:
        return error_response(
            message="Please verify your email before logging in",
            status_code=AppStatusCode.AUTHENTICATION_USER_NOT_VERIFIED,
            http_status=status.HTTP_403_FORBIDDEN
        )

    user.last_login = datetime.now()
    db.commit()
    db.refresh(user)

    token = auth.create_access_token(auth.build_token_payload(user))
    logger.info("User %s logged in", user.id)
    return authschemas.TokenResponse(
        access_token=token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        user=user_out(user),
    )


def verify_email(db: Session, token: str) -> authschemas.UserOut:
    user = db.query(Users).filter(Users.verification_token == token).first()
    if not token or not user:
        return error_response(
            message="Invalid or expired verification token",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_INVALID,
            http_status=status.HTTP_400_BAD_REQUEST
        )

    user.is_verified = True
    user.verification_token = None
    db.commit()
    db.refresh(user)
    return user_out(user)


def me(db: Session, current_user: UserToken) -> authschemas.MeResponse:
    user = db.query(Users).filter(Users.id == current_user.user_id).first()
    guest = db.query(Guest).filter(Guest.user_id == user.id).first()
    staff = db.query(Staff).filter(Staff.user_id == user.id).first()

    return authschemas.MeResponse(
        **user_out(user).model_dump(),
        guest_profile=authschemas.ProfileOut.model_validate(guest) if guest else None,
        staff_profile=authschemas.ProfileOut.model_validate(staff) if staff else None,
    )


def change_password(db: Session, current_user: UserToken,
                    req: authschemas.ChangePasswordRequest, request_meta: dict):
    user = db.query(Users).filter(Users.id == current_user.user_id).first()
    if not user.verify_password(req.current_password):
        return error_response(
            message="Current password is incorrect",
            status_code=AppStatusCode.AUTHENTICATION_CREDENTIALS_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    user.set_password(req.new_password)
    # password_hash is excluded from snapshots, record only that it changed
    log_change(db, "users", user.id, AuditAction.UPDATE,
               old_values={"password": "changed"}, new_values={"password": "changed"},
               user_id=user.id, request_meta=request_meta)
    db.commit()
    return {"user_id": user.id}
