"""
Error taxonomy and response rendering for the order tracking API
"""

import uuid
import traceback
import logging
from contextlib import contextmanager
from typing import Optional, Dict, Any
from datetime import datetime
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

class ErrorContext:
    """Context object for tracking error information across the request lifecycle"""

    def __init__(self, request: Request):
        self.request_id = str(uuid.uuid4())
        self.request = request
        self.endpoint = str(request.url.path)
        self.method = request.method
        self.client_ip = self._get_client_ip()
        self.user_agent = request.headers.get("user-agent")
        self.timestamp = datetime.utcnow()

    def _get_client_ip(self) -> Optional[str]:
        """Extract client IP from request headers"""
        if "x-forwarded-for" in self.request.headers:
            return self.request.headers["x-forwarded-for"].split(",")[0].strip()
        elif "x-real-ip" in self.request.headers:
            return self.request.headers["x-real-ip"]
        elif self.request.client:
            return self.request.client.host
        return None

class OrderTrackerError(Exception):
    """Base class for errors that map onto an HTTP response"""
    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

class ValidationError(OrderTrackerError):
    """Malformed input; `field` names the offending attribute"""
    status_code = 400
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message, {"field": field} if field else None)

class PermissionDeniedError(OrderTrackerError):
    status_code = 403
    error_code = "PERMISSION_DENIED"

class NotFoundError(OrderTrackerError):
    status_code = 404
    error_code = "NOT_FOUND"

class InvalidTransitionError(OrderTrackerError):
    """Raised when the state machine rejects a (current, requested) pair"""
    status_code = 409
    error_code = "INVALID_TRANSITION"

    def __init__(self, current, requested):
        self.current = getattr(current, "value", current)
        self.requested = getattr(requested, "value", requested)
        super().__init__(
            f"Cannot move order from {self.current} to {self.requested}",
            {"current": self.current, "requested": self.requested},
        )

class StatusConflictError(OrderTrackerError):
    """Another writer changed the order status between our read and our write"""
    status_code = 409
    error_code = "STATUS_CONFLICT"

class StorageError(OrderTrackerError):
    """Transaction or connection failure; nothing from the failed unit was applied"""
    status_code = 500
    error_code = "STORAGE_ERROR"

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)

class ErrorHandler:
    """Centralized error handling service"""

    @staticmethod
    def create_error_response(
        error_context: ErrorContext,
        error: Exception,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        include_details: bool = False
    ) -> JSONResponse:
        """Create a standardized error response"""

        error_data = {
            "error": {
                "code": error_code or ErrorHandler._get_error_code(error),
                "message": ErrorHandler._get_user_friendly_message(error),
                "request_id": error_context.request_id,
                "timestamp": error_context.timestamp.isoformat(),
                "endpoint": error_context.endpoint,
                "method": error_context.method
            }
        }

        if details is None and isinstance(error, OrderTrackerError):
            details = error.details
        if details:
            error_data["error"]["details"] = details

        # Include debugging information in development
        if include_details:
            error_data["error"]["debug"] = {
                "original_error": str(error),
                "error_type": type(error).__name__,
                "stack_trace": traceback.format_exc()
            }

        ErrorHandler._log_error(error_context, error, status_code)

        return JSONResponse(
            status_code=status_code,
            content=error_data
        )

    @staticmethod
    def _get_error_code(error: Exception) -> str:
        """Generate appropriate error codes based on exception type"""
        if isinstance(error, OrderTrackerError):
            return error.error_code
        elif isinstance(error, HTTPException):
            return f"HTTP_{error.status_code}"
        elif isinstance(error, ValueError):
            return "VALIDATION_ERROR"
        else:
            return "INTERNAL_ERROR"

    @staticmethod
    def _get_user_friendly_message(error: Exception) -> str:
        """Generate user-friendly error messages"""
        if isinstance(error, StorageError):
            return "A database error occurred. Please try again later."
        elif isinstance(error, OrderTrackerError):
            return error.message
        elif isinstance(error, HTTPException):
            return error.detail
        elif isinstance(error, ValueError):
            return "Invalid input provided. Please check your data and try again."
        else:
            return "An unexpected error occurred. Please try again later."

    @staticmethod
    def _log_error(error_context: ErrorContext, error: Exception, status_code: int):
        """Log error with request context; client errors are warnings"""
        log = logger.error if status_code >= 500 else logger.warning
        log(
            f"Error {error_context.request_id}: {type(error).__name__} in {error_context.method} {error_context.endpoint}",
            extra={
                "request_id": error_context.request_id,
                "endpoint": error_context.endpoint,
                "method": error_context.method,
                "status_code": status_code,
                "client_ip": error_context.client_ip,
                "user_agent": error_context.user_agent,
                "error_type": type(error).__name__,
                "error_message": str(error),
            }
        )

@contextmanager
def transaction(db: Session):
    """Run a block as one unit of work: commit on success, roll back on any error.

    SQLAlchemy failures are re-raised as StorageError so callers never see a
    driver exception for a write that did not take effect.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database transaction failed: {e}")
        raise StorageError(f"Database transaction failed: {str(e)}", e) from e
    except Exception:
        db.rollback()
        raise
