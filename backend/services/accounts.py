"""Account operations behind the /api/user routes."""
import functools
import logging
from typing import List

from sqlalchemy.orm import Session

from config import Settings
from models.users import new_user_id
from repositories.users import UserStore
from schemas.user import (
    AccessResponse,
    AccessUpdate,
    CallerIdentity,
    LoginResponse,
    UserCreate,
    UserListItem,
    UserLogin,
    UserProfile,
    UserQuery,
    UserSummary,
    UserUpdate,
)
from utils import password_policy
from utils.errors import AccountError, AuthError, NotFoundError, UnexpectedError, WeakPasswordError
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import create_access_token

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "employee"
# Fields only an administrator may change after signup. role is a free-form
# label chosen at registration and grants nothing; is_admin is the only
# privileged flag.
ACCESS_FIELDS = ("role", "is_admin")


def operation(failure_message: str):
    """Report any fault that is not already an AccountError as an opaque UnexpectedError."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except AccountError:
                raise
            except Exception:
                logger.exception(failure_message)
                raise UnexpectedError(failure_message)

        return wrapper

    return decorator


class AccountService:
    def __init__(self, db: Session, settings: Settings):
        self.store = UserStore(db)
        self.settings = settings

    @operation("Failed to create user account.")
    def register(self, payload: UserCreate):
        if not password_policy.validate(payload.password):
            raise WeakPasswordError(password_policy.POLICY_MESSAGE)

        user = self.store.insert({
            "user_id": new_user_id(),
            "email": payload.email.lower(),
            "password_hash": get_password_hash(payload.password, rounds=self.settings.BCRYPT_ROUNDS),
            "fname": payload.fname or "",
            "lname": payload.lname or "",
            "role": payload.role or DEFAULT_ROLE,
            # Registration never grants admin rights
            "is_admin": False,
        })
        logger.info("Created user %s", user.user_id)
        return user

    @operation("Failed to log in user.")
    def authenticate(self, payload: UserLogin) -> LoginResponse:
        user = self.store.find_one({"email": payload.email.lower()})
        if user is None:
            raise NotFoundError("Email not found, please try again.", field="email", rule="exists")
        if not verify_password(payload.password, user.password_hash):
            raise AuthError("Password is incorrect, please try again.", field="password", rule="match")

        token = create_access_token({"userId": user.user_id, "isAdmin": user.is_admin}, self.settings)
        return LoginResponse(
            user_id=user.user_id,
            token=token,
            is_admin=user.is_admin,
            fname=user.fname,
            lname=user.lname,
            email=user.email,
            message=f"Welcome {user.fname or user.email}!",
        )

    @operation("Failed to retrieve users.")
    def list_users(self) -> List[UserListItem]:
        return [UserListItem.model_validate(user) for user in self.store.find()]

    @operation("Failed to find users.")
    def find_users(self, query: UserQuery) -> List[UserSummary]:
        filters = query.model_dump(exclude_none=True)
        if "email" in filters:
            filters["email"] = filters["email"].lower()

        # An empty filter matches every record
        users = self.store.find(filters)
        if not users:
            raise NotFoundError("Users not found.")
        return [UserSummary.model_validate(user) for user in users]

    @operation("Failed to retrieve user.")
    def get_self(self, identity: CallerIdentity) -> UserProfile:
        user = self.store.find_one({"user_id": identity.user_id})
        if user is None:
            raise NotFoundError()
        return UserProfile.model_validate(user)

    @operation("Failed to update user.")
    def update_self(self, identity: CallerIdentity, payload: UserUpdate):
        changes = payload.model_dump(exclude_none=True)
        if "email" in changes:
            changes["email"] = changes["email"].lower()

        if any(name in changes for name in ACCESS_FIELDS):
            caller = self.store.find_one({"user_id": identity.user_id})
            if caller is None:
                raise NotFoundError()
            if not caller.is_admin:
                logger.warning("User %s tried to change their own access", identity.user_id)
                raise AuthError("Only administrators may change role or admin status.")

        user = self.store.update_one({"user_id": identity.user_id}, changes)
        if user is None:
            raise NotFoundError()
        logger.info("Updated user %s fields %s", user.user_id, sorted(changes))
        return user

    @operation("Failed to delete user.")
    def delete_self(self, identity: CallerIdentity):
        if not self.store.delete_one({"user_id": identity.user_id}):
            raise NotFoundError()
        logger.info("Deleted user %s", identity.user_id)

    @operation("Failed to update user access.")
    def update_access(self, identity: CallerIdentity, user_id: str, payload: AccessUpdate) -> AccessResponse:
        # Admin rights come from the stored record, not the token claim
        caller = self.store.find_one({"user_id": identity.user_id})
        if caller is None or not caller.is_admin:
            raise AuthError("Admin access required.")

        changes = payload.model_dump(exclude_none=True)
        user = self.store.update_one({"user_id": user_id}, changes)
        if user is None:
            raise NotFoundError()
        logger.info("User %s changed access of %s to role=%s admin=%s", caller.user_id, user.user_id, user.role, user.is_admin)
        return AccessResponse.model_validate(user)
