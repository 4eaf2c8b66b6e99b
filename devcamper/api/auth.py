import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from devcamper.core.config import Settings
from devcamper.core.deps import get_current_user, get_settings
from devcamper.core.errors import InternalFailure, NotFound, Unauthorized, ValidationFailed
from devcamper.core.security import generate_reset_token, hash_password, hash_reset_token, issue_access_token, verify_password
from devcamper.db.session import get_db
from devcamper.models.user import User
from devcamper.schemas.auth import (
    ForgotPasswordIn,
    LoginIn,
    RegisterIn,
    ResetPasswordIn,
    UpdateDetailsIn,
    UpdatePasswordIn,
)
from devcamper.services.email_service import EmailDeliveryError, send_email
from devcamper.services.serializers import user_out

router = APIRouter()
logger = logging.getLogger("devcamper.auth")


def normalize_email(value: str | None) -> str:
    return str(value or "").strip().lower()


def send_token_response(user: User, status_code: int, settings: Settings) -> JSONResponse:
    token = issue_access_token(user.id, user.role, settings.JWT_SECRET, settings.JWT_EXPIRE_DAYS)
    response = JSONResponse({"success": True, "token": token}, status_code=status_code)
    response.set_cookie(
        settings.JWT_COOKIE_NAME,
        token,
        max_age=settings.JWT_COOKIE_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return response


@router.post("/register")
def register(payload: RegisterIn, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    user = User(
        name=payload.name.strip(),
        email=normalize_email(payload.email),
        role=payload.role,
        password_hash=hash_password(payload.password),
    )
    db.add(user); db.commit(); db.refresh(user)
    return send_token_response(user, 200, settings)


@router.post("/login")
def login(payload: LoginIn, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    if not payload.email or not payload.password:
        raise ValidationFailed("Please provide an email and password")
    user = db.query(User).filter(User.email == normalize_email(payload.email)).first()
    if user is None or not verify_password(payload.password, user.password_hash):
        raise Unauthorized("Invalid credentials")
    return send_token_response(user, 200, settings)


@router.get("/logout")
def logout(settings: Settings = Depends(get_settings)):
    response = JSONResponse({"success": True, "data": {}})
    response.set_cookie(settings.JWT_COOKIE_NAME, "none", max_age=10, httponly=True)
    return response


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"success": True, "data": user_out(user)}


@router.put("/updatedetails")
def update_details(payload: UpdateDetailsIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if payload.name is not None:
        user.name = payload.name.strip()
    if payload.email is not None:
        user.email = normalize_email(payload.email)
    db.add(user); db.commit(); db.refresh(user)
    return {"success": True, "data": user_out(user)}


@router.put("/updatepassword")
def update_password(
    payload: UpdatePasswordIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not verify_password(payload.current_password, user.password_hash):
        raise Unauthorized("Password is incorrect")
    user.password_hash = hash_password(payload.new_password)
    db.add(user); db.commit(); db.refresh(user)
    return send_token_response(user, 200, settings)


@router.post("/forgotpassword")
def forgot_password(
    payload: ForgotPasswordIn,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = db.query(User).filter(User.email == normalize_email(payload.email)).first()
    if user is None:
        raise NotFound("There is no user with that email")

    token, token_hash = generate_reset_token()
    user.reset_password_token = token_hash
    user.reset_password_expire = datetime.now(timezone.utc) + timedelta(minutes=settings.RESET_TOKEN_TTL_MINUTES)
    db.add(user); db.commit()

    reset_url = f"{str(request.base_url).rstrip('/')}{settings.API_PREFIX}/auth/resetpassword/{token}"
    body = (
        "You are receiving this email because you (or someone else) has requested the reset of a password. "
        f"Please make a PUT request to: \n\n {reset_url}"
    )
    try:
        send_email(settings, email=user.email, subject="Password reset token", body=body)
    except EmailDeliveryError as exc:
        logger.error("reset email to %s failed: %s", user.email, exc)
        user.reset_password_token = None
        user.reset_password_expire = None
        db.add(user); db.commit()
        raise InternalFailure("Email could not be sent")
    return {"success": True, "data": "Email sent"}


@router.put("/resetpassword/{resettoken}")
def reset_password(
    resettoken: str,
    payload: ResetPasswordIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = (
        db.query(User)
        .filter(
            User.reset_password_token == hash_reset_token(resettoken),
            User.reset_password_expire > datetime.now(timezone.utc),
        )
        .first()
    )
    if user is None:
        raise ValidationFailed("Invalid token")
    user.password_hash = hash_password(payload.password)
    user.reset_password_token = None
    user.reset_password_expire = None
    db.add(user); db.commit(); db.refresh(user)
    return send_token_response(user, 200, settings)
