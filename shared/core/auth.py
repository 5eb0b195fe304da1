import logging
from datetime import datetime, timedelta
from typing import Optional
from fastapi import status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from shared.models.staff import Staff
from shared.models.users import Users
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import UserRole
from shared.core.config import settings
from shared.helpers.json_response_helper import error_response
from shared.core.schemas import UserToken
from shared.core.database import get_db

logger = logging.getLogger(__name__)

# auto_error disabled so a missing header is a 401, not the default 403
security = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    payload = data.copy()
    expires = datetime.utcnow() + timedelta(
        minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)
    payload['exp'] = expires

    return jwt.encode(payload, settings.JWT_SECRET,
                      algorithm=settings.JWT_ALGORITHM)


def build_token_payload(user: Users) -> dict:
    return {
        "user_id": user.id,
        "email": user.email,
        "role": user.role_name,
        "permissions": user.permissions,
    }


def verify_token(token: str) -> UserToken:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET,
                             algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        return error_response(
            message="Token has expired",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_EXPIRED,
            http_status=status.HTTP_401_UNAUTHORIZED
        )
    except JWTError:
        return error_response(
            message="Invalid token",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    if not payload.get("user_id"):
        return error_response(
            message="Invalid token structure",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )
    return UserToken(**payload)


def validate_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> UserToken:
    if credentials is None or not credentials.credentials:
        return error_response(
            message="Access token is required",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    user_data = verify_token(credentials.credentials)

    user = db.query(Users).filter(Users.id == user_data.user_id).first()
    if not user:
        return error_response(
            message="User not found",
            status_code=AppStatusCode.AUTHENTICATION_USER_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    if not user.is_active:
        return error_response(
            message="User is not active. Access denied",
            status_code=AppStatusCode.AUTHENTICATION_USER_INACTIVE,
            http_status=status.HTTP_403_FORBIDDEN
        )

    # Role changes apply without waiting for a new token
    user_data.role = user.role_name
    user_data.permissions = user.permissions
    user_data.status = "active"
    return user_data


def _forbidden(message: str, code: str = AppStatusCode.AUTHENTICATION_UNAUTHORIZED_ACCESS):
    return error_response(
        message=message,
        status_code=code,
        http_status=status.HTTP_403_FORBIDDEN
    )


def allow_admin(current_user: UserToken = Depends(validate_current_token)):
    if current_user.role != UserRole.ADMIN.value:
        return _forbidden("Access forbidden: Admins only")
    return current_user


def allow_roles(*roles: str):
    """Dependency factory: only the listed role names pass."""
    allowed = [r.value if isinstance(r, UserRole) else r for r in roles]

    def checker(current_user: UserToken = Depends(validate_current_token)):
        if current_user.role not in allowed:
            return _forbidden(
                f"Access denied. Requires one of: {', '.join(allowed)}")
        return current_user

    return checker


def require_permission(permission: str):
    def checker(current_user: UserToken = Depends(validate_current_token)):
        if not current_user.has_permission(permission):
            return _forbidden(f"Missing permission: {permission}")
        return current_user

    return checker


def require_department(*departments: str):
    """Receptionists must work in one of the departments; admins always pass."""
    allowed = {d.lower() for d in departments}

    def checker(
        current_user: UserToken = Depends(validate_current_token),
        db: Session = Depends(get_db)
    ):
        if current_user.role == UserRole.ADMIN.value:
            return current_user

        staff = db.query(Staff).filter(Staff.user_id == current_user.user_id).first()
        if not staff or not staff.is_active or (staff.department or "").lower() not in allowed:
            return _forbidden(
                f"Access restricted to departments: {', '.join(departments)}")
        return current_user

    return checker


def current_hour() -> int:
    return datetime.now().hour


def restrict_to_hours(start_hour: Optional[int] = None, end_hour: Optional[int] = None):
    """Non-admin access only between start_hour (inclusive) and end_hour (exclusive).

    Without explicit hours the front desk window from settings applies, read per request.
    """

    def checker(current_user: UserToken = Depends(validate_current_token)):
        start = settings.CHECK_IN_START_HOUR if start_hour is None else start_hour
        end = settings.CHECK_IN_END_HOUR if end_hour is None else end_hour
        if start is None or end is None:
            return current_user
        if current_user.role == UserRole.ADMIN.value:
            return current_user

        hour = current_hour()
        if start <= end:
            inside = start <= hour < end
        else:
            # window wraps midnight, e.g. 22 -> 6
            inside = hour >= start or hour < end

        if not inside:
            return _forbidden(
                f"Access allowed only between {start:02d}:00 and {end:02d}:00",
                AppStatusCode.ACCESS_OUTSIDE_ALLOWED_HOURS)
        return current_user

    return checker


def is_staff(current_user: UserToken) -> bool:
    return current_user.role in (UserRole.ADMIN.value, UserRole.RECEPTIONIST.value)


def can_manage_resource(current_user: UserToken, owner_user_id: Optional[int]) -> bool:
    """Staff manage everything, other users only what they own."""
    if is_staff(current_user):
        return True
    return owner_user_id is not None and owner_user_id == current_user.user_id
