# utils/tokenJWT.py
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from config import Settings
from schemas.user import CallerIdentity
from utils.errors import AuthenticationRequiredError

# Authorization scheme; missing headers are reported as 401 by get_caller_identity
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# Generate a new JWT access token
def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


# Resolve the caller identity carried by the bearer token
def get_caller_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> CallerIdentity:
    if credentials is None:
        raise AuthenticationRequiredError("Authentication required.")
    try:
        payload = decode_access_token(credentials.credentials, settings)
    except JWTError:
        raise AuthenticationRequiredError("Invalid or expired token.")

    user_id = payload.get("userId")
    # Ensure the identifier is present in the token payload
    if not user_id:
        raise AuthenticationRequiredError()
    return CallerIdentity(user_id=user_id, is_admin=bool(payload.get("isAdmin", False)))
