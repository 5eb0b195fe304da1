from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from shared.core import auth
from shared.core.database import get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.audit_helper import get_request_meta
from shared.helpers.email_helper import send_verification_email
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ..schemas import authschemas
from ..services import authservices

router = APIRouter(prefix="/api/auth", tags=["Hotel Auth"])


@router.post("/register", response_model=JsonOutResult[authschemas.RegisterResponse], status_code=201)
def register(
        req: authschemas.RegisterRequest,
        request: Request,
        background_tasks: BackgroundTasks,
        db: Session = Depends(get_db)):
    user, guest = authservices.register(db, req, get_request_meta(request))

    # mail failures are logged by the client and never fail the request
    background_tasks.add_task(
        send_verification_email, user.email, guest.first_name, user.verification_token)

    return success_response(
        data=authschemas.RegisterResponse(user=authservices.user_out(user), guest_id=guest.id),
        message="Registration successful. Please verify your email",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY
    )


@router.post("/login", response_model=authschemas.TokenResponse)
def login(
        req: authschemas.LoginRequest,
        db: Session = Depends(get_db)):
    return authservices.login(db, req)


@router.get("/verify/{token}", response_model=JsonOutResult[authschemas.UserOut])
def verify_email(token: str, db: Session = Depends(get_db)):
    result = authservices.verify_email(db, token)
    return success_response(data=result, message="Email verified successfully",
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)


@router.get("/me", response_model=authschemas.MeResponse)
def me(
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(auth.validate_current_token)):
    return authservices.me(db, current_user)


@router.post("/change-password")
def change_password(
        req: authschemas.ChangePasswordRequest,
        request: Request,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(auth.validate_current_token)):
    result = authservices.change_password(db, current_user, req, get_request_meta(request))
    return success_response(data=result, message="Password changed successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.post("/logout")
def logout(current_user: UserToken = Depends(auth.validate_current_token)):
    # tokens are stateless, the client drops its copy
    return success_response(data={"user_id": current_user.user_id},
                            message="Logged out successfully",
                            status_code=AppStatusCode.OPERATION_SUCCESSFUL)
