import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from pymongo.errors import DuplicateKeyError

from smarttalk.api.auth_utils import (
    get_auth_settings,
    create_access_token,
    hash_password,
    verify_password,
)
from smarttalk.common.mailer import send_verification_email
from smarttalk.common.models import AuthResponse, User, UserCreate, UserPublic, UserSignIn
from smarttalk.config.settings import EMAIL_SETTINGS
from smarttalk.db.users import UsersRepository, get_users_repo

logger = logging.getLogger("SmartTalkAI")

router = APIRouter(prefix="/api/auth")

VERIFIED_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><title>Email Verified</title></head>
<body style="font-family: Arial; text-align: center; padding: 50px;">
  <h2>Email Verified Successfully!</h2>
  <p>Your Smart Talk AI account is now active.</p>
  <p>You can close this window and return to the app.</p>
</body>
</html>"""

INVALID_TOKEN_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><title>Verification Failed</title></head>
<body style="font-family: Arial; text-align: center; padding: 50px;">
  <h2>Invalid or Expired Token</h2>
  <p>This verification link is invalid or has expired.</p>
</body>
</html>"""


def get_email_settings(request: Request) -> dict:
    config = getattr(request.app.state, "config", None)
    if config and "email_settings" in config:
        return config["email_settings"]
    return EMAIL_SETTINGS


def _public(user: User) -> UserPublic:
    return UserPublic(id=user.id, name=user.name, email=user.email, is_verified=user.is_verified)


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def signup(
    user_create: UserCreate,
    request: Request,
    users_repo: UsersRepository = Depends(get_users_repo),
):
    if await users_repo.get_user_by_email(user_create.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

    verification_token = secrets.token_hex(32)
    try:
        user = await users_repo.create_user(
            name=user_create.name,
            email=user_create.email,
            password_hash=hash_password(user_create.password),
            verification_token=verification_token,
            phone=user_create.phone,
            country=user_create.country,
        )
    except DuplicateKeyError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

    settings = get_auth_settings(request)
    verification_url = f"{settings['public_base_url']}/api/auth/verify-email/{verification_token}"
    # Delivery failures never fail the signup.
    await send_verification_email(get_email_settings(request), user.email, user.name, verification_url)

    return AuthResponse(
        token=create_access_token(user.id, settings),
        user=_public(user),
        message="Signup successful! Please verify your email address.",
    )


@router.get("/verify-email/{token}", response_class=HTMLResponse, summary="Confirm an email address")
async def verify_email(token: str, users_repo: UsersRepository = Depends(get_users_repo)):
    user = await users_repo.verify_email(token)
    if not user:
        return HTMLResponse(INVALID_TOKEN_PAGE, status_code=status.HTTP_400_BAD_REQUEST)
    logger.info(f"Email verified for user {user.id}")
    return HTMLResponse(VERIFIED_PAGE)


@router.post("/signin", response_model=AuthResponse, summary="Sign in with email and password")
async def signin(
    credentials: UserSignIn,
    request: Request,
    users_repo: UsersRepository = Depends(get_users_repo),
):
    user = await users_repo.get_user_by_email(credentials.email)
    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return AuthResponse(token=create_access_token(user.id, get_auth_settings(request)), user=_public(user))
