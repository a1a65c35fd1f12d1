"""
Custom exceptions for Settlement Sam API.
Provides consistent error handling across the application.

Every exception carries a machine-readable ``kind`` and the HTTP status it
maps to. Services raise them; ``register_exception_handlers`` renders them
as ``{"error": kind, "message": message, ...}``.
"""
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class SettlementSamException(Exception):
    """Base exception for Settlement Sam"""
    kind: str = "error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)

    def extras(self) -> Dict[str, Any]:
        """Additional fields rendered alongside error/message."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.kind, "message": self.message}
        body.update(self.extras())
        return body


class InvalidInputError(SettlementSamException):
    """Missing or malformed field"""
    kind = "invalid_input"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Validation failed", field: str = None):
        if field:
            message = f"Validation failed for field '{field}': {message}"
        super().__init__(message)


class NotFoundError(SettlementSamException):
    """Resource not found"""
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id: str = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class AlreadyExistsError(SettlementSamException):
    """Resource already exists"""
    kind = "duplicate"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, resource: str = "Resource", field: str = None, value: str = None):
        if field and value:
            message = f"{resource} with {field} '{value}' already exists"
        else:
            message = f"{resource} already exists"
        super().__init__(message)


class UnauthorizedError(SettlementSamException):
    """Authentication failed"""
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class InvalidCredentialsError(UnauthorizedError):
    """Wrong admin username or password"""
    kind = "invalid_credentials"

    def __init__(self, message: str = "Invalid username or password."):
        super().__init__(message)


class LockedError(SettlementSamException):
    """Too many failed logins, caller must wait"""
    kind = "locked"
    status_code = status.HTTP_423_LOCKED

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        minutes = max(1, -(-retry_after // 60))
        super().__init__(
            f"Too many failed attempts. Try again in {minutes} minute{'s' if minutes != 1 else ''}."
        )

    def extras(self) -> Dict[str, Any]:
        return {"retry_after": self.retry_after}


class TooManyRequestsError(SettlementSamException):
    """Send rate limit reached"""
    kind = "too_many_requests"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, message: str = "Too many codes sent to this number. Please wait an hour before trying again."):
        super().__init__(message)


class TooManyAttemptsError(SettlementSamException):
    """Verification attempts exhausted"""
    kind = "too_many_attempts"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, message: str = "Too many wrong attempts. Request a new code."):
        super().__init__(message)


class CodeExpiredError(SettlementSamException):
    """No active code for this phone"""
    kind = "expired"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "That code has expired. Hit 'Resend' to get a fresh one."):
        super().__init__(message)


class InvalidCodeError(SettlementSamException):
    """Code did not match"""
    kind = "invalid_code"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, remaining_attempts: int):
        self.remaining_attempts = remaining_attempts
        if remaining_attempts > 0:
            message = (
                f"Hmm, that code didn't match. {remaining_attempts} "
                f"attempt{'s' if remaining_attempts != 1 else ''} left. Want Sam to resend it?"
            )
        else:
            message = "No attempts left. Request a new code."
        super().__init__(message)

    def extras(self) -> Dict[str, Any]:
        return {"remaining_attempts": self.remaining_attempts}


class SendFailedError(SettlementSamException):
    """Transport failure while sending a code"""
    kind = "send_failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "We couldn't reach that number. Double-check the phone number and carrier, then try again."):
        super().__init__(message)


class AlreadyDeliveredError(SettlementSamException):
    """Lead was already delivered"""
    kind = "already_delivered"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, lead_id: Any):
        super().__init__(f"Lead #{lead_id} was already delivered.")


class ThrottleExceededError(SettlementSamException):
    """Client's delivery target for today is reached"""
    kind = "throttle_exceeded"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, client_id: Any, target: int):
        self.target = target
        super().__init__(
            f"Client #{client_id} has reached today's delivery target ({target})."
        )

    def extras(self) -> Dict[str, Any]:
        return {"target": self.target}


class NoClientError(SettlementSamException):
    """Delivery requested without a client"""
    kind = "no_client"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "No client assigned to this lead. Set client_id or assign via lead profile."):
        super().__init__(message)


class DeliveryFailedError(SettlementSamException):
    """Every requested delivery channel failed"""
    kind = "delivery_failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors) or "Delivery failed")

    def extras(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class NotConfiguredError(SettlementSamException):
    """Required integration is not configured"""
    kind = "not_configured"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, service: str = "Service", hint: Optional[str] = None):
        message = f"{service} is not configured"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)


class InvalidSignatureError(SettlementSamException):
    """Webhook signature check failed"""
    kind = "invalid_signature"
    status_code = status.HTTP_400_BAD_REQUEST


class ExternalServiceError(SettlementSamException):
    """External service call failed"""
    kind = "external_error"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, service: str = "External service", message: str = None):
        msg = f"{service} call failed"
        if message:
            msg = f"{msg}: {message}"
        super().__init__(msg)


async def settlement_sam_exception_handler(request: Request, exc: SettlementSamException) -> JSONResponse:
    """Render a service exception as a tagged JSON error."""
    headers = None
    if isinstance(exc, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, LockedError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SettlementSamException, settlement_sam_exception_handler)
