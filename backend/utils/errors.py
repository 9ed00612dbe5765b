"""Error taxonomy for the account API and the handlers that render it as JSON."""
import logging
import math

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AccountError(Exception):
    """Base class for every error the API reports to clients."""

    status_code = 500
    message = "An unexpected error occurred."

    def __init__(self, message=None, *, field=None, rule=None, fields=None, headers=None):
        self.message = message or self.message
        self.fields = dict(fields or {})
        if field:
            self.fields[field] = {"message": self.message, "rule": rule or field}
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.fields:
            body["fields"] = self.fields
        return body


class ValidationError(AccountError):
    status_code = 400
    message = "Invalid input."


class WeakPasswordError(AccountError):
    status_code = 400
    message = "Password must contain 6 to 16 characters, upper and lowercase letters and digits."

    def __init__(self, message=None):
        super().__init__(message, field="password", rule="password_policy")


class AuthenticationRequiredError(AccountError):
    status_code = 401
    message = "Could not validate credentials."

    def __init__(self, message=None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class AuthError(AccountError):
    status_code = 403
    message = "Forbidden."


class NotFoundError(AccountError):
    status_code = 404
    message = "User not found."


class DuplicateEmailError(AccountError):
    status_code = 409
    message = "Email already registered."

    def __init__(self, message=None):
        super().__init__(message, field="email", rule="unique")


class TooManyAttemptsError(AccountError):
    status_code = 429
    message = "Too many failed login attempts, please try again later."

    def __init__(self, message=None, retry_after=None):
        headers = {"Retry-After": str(math.ceil(retry_after))} if retry_after else None
        super().__init__(message, headers=headers)


class UnexpectedError(AccountError):
    status_code = 500


class StoreTimeoutError(AccountError):
    status_code = 503
    message = "The user store is unavailable, please try again later."


def _account_error_handler(request: Request, exc: AccountError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


def _request_validation_handler(request: Request, exc: RequestValidationError):
    fields = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        name = loc[-1] if loc else "body"
        fields.setdefault(name, {"message": err.get("msg", "Invalid value."), "rule": err.get("type", "invalid")})
    error = ValidationError(fields=fields)
    return _account_error_handler(request, error)


def _unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _account_error_handler(request, UnexpectedError())


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(AccountError, _account_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
