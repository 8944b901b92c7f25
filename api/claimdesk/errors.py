"""
Exception taxonomy shared by the services and the HTTP layer.

Services raise these; ``register_error_handlers`` maps them to responses once
so every router reports the same status codes.

NotFound covers both missing records and records outside the caller's
visibility scope, so a lookup never reveals that a claim exists.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ClaimDeskError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_body(self) -> dict:
        return {"detail": self.message}


class ConfigValidationError(ClaimDeskError):
    """A form configuration is structurally malformed. Carries every violation found."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, violations, message: str = "configuration is invalid"):
        self.violations = list(violations)
        super().__init__(message)

    def to_body(self) -> dict:
        return {
            "detail": self.message,
            "violations": [{"path": v.path, "reason": v.reason} for v in self.violations],
        }


class ClaimValidationError(ClaimDeskError):
    """A claim payload does not satisfy the tenant's form configuration."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, violations, message: str = "claim data is invalid"):
        self.violations = list(violations)
        super().__init__(message)

    def to_body(self) -> dict:
        return {
            "detail": self.message,
            "violations": [{"fieldId": v.field_id, "reason": v.reason} for v in self.violations],
        }


class ForbiddenMutation(ClaimDeskError):
    status_code = status.HTTP_403_FORBIDDEN


class PermissionDenied(ClaimDeskError):
    status_code = status.HTTP_403_FORBIDDEN


class AuthenticationError(ClaimDeskError):
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFound(ClaimDeskError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id=None):
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource} not found"
        if resource_id is not None:
            msg = f"{resource} with ID {resource_id} not found"
        super().__init__(msg)


class ConflictError(ClaimDeskError):
    """Uniqueness clash: duplicate identification number, email, or external identity."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, retryable: bool = False):
        self.retryable = retryable
        super().__init__(message)

    def to_body(self) -> dict:
        return {"detail": self.message, "retryable": self.retryable}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ClaimDeskError)
    async def _claimdesk_error(request: Request, exc: ClaimDeskError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(SQLAlchemyError)
    async def _storage_error(request: Request, exc: SQLAlchemyError):
        logger.error("storage failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "internal error"},
        )
