"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class InputValidationError(AppException):
    """Raised for malformed input, before any store call is made."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION_002",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"field": field} if field else {}
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class InvalidTransitionError(AppException):
    """Raised when a trip status change is not allowed by the state machine."""

    def __init__(self, trip_id: int, current: str, requested: str):
        super().__init__(
            message=f"Trip {trip_id} cannot move from '{current}' to '{requested}'",
            error_code="ERR_TRIP_STATE_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"trip_id": trip_id, "current_status": current, "requested_status": requested}
        )


class StoreError(AppException):
    """Raised when the ledger store is unavailable, times out or rejects a write."""

    def __init__(self, step: str, reason: str):
        self.step = step
        self.reason = reason
        super().__init__(
            message=f"Ledger store failure during '{step}': {reason}",
            error_code="ERR_STORE_001",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"step": step, "reason": reason}
        )


class OperationCancelledError(AppException):
    """Raised when an operation's deadline passed or it was cancelled by the caller."""

    def __init__(self, operation: str):
        super().__init__(
            message=f"Operation '{operation}' was cancelled before completion",
            error_code="ERR_CANCELLED",
            status_code=status.HTTP_408_REQUEST_TIMEOUT,
            details={"operation": operation}
        )


class PartialWorkflowFailure(AppException):
    """
    Raised when trip completion committed its status update but one of the
    settling income/expense inserts failed.

    Carries the CompletionResult so callers can retry only the missing steps.
    """

    def __init__(self, result):
        self.result = result
        failed = [step.name for step in result.steps if step.status == "failed"]
        super().__init__(
            message=f"Trip {result.trip_id} completed but settlement steps failed: {', '.join(failed)}",
            error_code="ERR_WORKFLOW_PARTIAL",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"result": result.model_dump(mode="json")}
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.error_code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        404: "ERR_NOT_FOUND",
        409: "ERR_CONFLICT",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": exc.errors()
            }
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception: %s: %s", type(exc).__name__, exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
