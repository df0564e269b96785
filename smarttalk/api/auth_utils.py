from datetime import timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.hash import bcrypt
from pymongo.errors import ServerSelectionTimeoutError, ConnectionFailure

from smarttalk.common.clock import utc_now
from smarttalk.common.models import User
from smarttalk.config.settings import AUTH_SETTINGS
from smarttalk.db.users import get_users_repo, UsersRepository

# auto_error=False so a missing header yields our own 401 instead of FastAPI's 403
security = HTTPBearer(auto_error=False)


def get_auth_settings(request: Optional[Request] = None) -> dict:
    config = getattr(request.app.state, "config", None) if request else None
    if config and "auth_settings" in config:
        return config["auth_settings"]
    return AUTH_SETTINGS


def hash_password(password: str) -> str:
    return bcrypt.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user_id: str, settings: Optional[dict] = None) -> str:
    settings = settings or AUTH_SETTINGS
    expires_at = utc_now() + timedelta(days=settings["token_expire_days"])
    payload = {"sub": user_id, "exp": expires_at}
    return jwt.encode(payload, settings["jwt_secret"], algorithm=settings["jwt_algorithm"])


def decode_access_token(token: str, settings: Optional[dict] = None) -> str:
    """Returns the user id carried by a token. Raises JWTError when invalid or expired."""
    settings = settings or AUTH_SETTINGS
    payload = jwt.decode(token, settings["jwt_secret"], algorithms=[settings["jwt_algorithm"]])
    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Token has no subject")
    return user_id


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_strict(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(security),
    users_repo: UsersRepository = Depends(get_users_repo),
) -> User:
    """
    Resolves the bearer token to a stored user. Raises 401 otherwise.
    """
    if not creds:
        raise _unauthorized("No token provided")

    try:
        user_id = decode_access_token(creds.credentials, get_auth_settings(request))
    except JWTError:
        raise _unauthorized("Authentication failed")

    try:
        user = await users_repo.get_user_by_id(user_id)
    except (ServerSelectionTimeoutError, ConnectionFailure):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable during authentication. Please ensure MongoDB is running."
        )

    if not user:
        raise _unauthorized("Invalid token")
    return user
