# backend/routes/users.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.orm import Session

from config import Settings
from database import get_db
from schemas import user as schemas
from services.accounts import AccountService
from utils.errors import AuthError, NotFoundError, TooManyAttemptsError
from utils.tokenJWT import get_caller_identity, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["Users"])


def get_account_service(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)) -> AccountService:
    return AccountService(db, settings)


# Register a new user
@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=schemas.MessageResponse)
def signup(payload: schemas.UserCreate, service: AccountService = Depends(get_account_service)):
    service.register(payload)
    return {"message": "User account created successfully!"}


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.LoginResponse)
def login(payload: schemas.UserLogin, request: Request, service: AccountService = Depends(get_account_service)):
    throttle = request.app.state.login_throttle
    client_ip = request.client.host if request.client else None
    key = (payload.email.lower(), client_ip)

    wait = throttle.retry_after(key)
    if wait:
        logger.warning("Login throttled for %s from %s", payload.email, client_ip)
        raise TooManyAttemptsError(retry_after=wait)

    try:
        result = service.authenticate(payload)
    except (NotFoundError, AuthError):
        throttle.record_failure(key)
        logger.warning("Failed login for %s from %s", payload.email, client_ip)
        raise

    throttle.reset(key)
    return result


# Directory of every account, authenticated callers only
@router.get("/all", response_model=List[schemas.UserListItem])
def get_all_users(
    service: AccountService = Depends(get_account_service),
    identity: schemas.CallerIdentity = Depends(get_caller_identity),
):
    return service.list_users()


# Exact-match lookup on email, first and last name
@router.post("/find", response_model=List[schemas.UserSummary])
def find_users(
    payload: Optional[schemas.UserQuery] = Body(None),
    service: AccountService = Depends(get_account_service),
):
    return service.find_users(payload or schemas.UserQuery())


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserProfile)
def me(
    service: AccountService = Depends(get_account_service),
    identity: schemas.CallerIdentity = Depends(get_caller_identity),
):
    return service.get_self(identity)


# Update the authenticated user's own record
@router.api_route("/me", methods=["PUT", "PATCH"], response_model=schemas.MessageResponse)
def update_me(
    payload: schemas.UserUpdate,
    service: AccountService = Depends(get_account_service),
    identity: schemas.CallerIdentity = Depends(get_caller_identity),
):
    service.update_self(identity, payload)
    return {"message": "User updated successfully!"}


# Delete the authenticated user's own record
@router.delete("/me", response_model=schemas.MessageResponse)
def delete_me(
    service: AccountService = Depends(get_account_service),
    identity: schemas.CallerIdentity = Depends(get_caller_identity),
):
    service.delete_self(identity)
    return {"message": "User deleted successfully!"}
