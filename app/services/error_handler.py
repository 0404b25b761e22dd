"""
Error handling service for consistent error envelopes and logging.
Every error leaves the API as {"success": false, "message": ..., "errors"?: [...]}.
"""

from typing import Dict, Any, Optional, List, Sequence
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from app.utils.exceptions import APIException, ValidationError
import logging
import uuid

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Phone number or email is already registered"
UNEXPECTED_MESSAGE = "An unexpected error occurred. Please try again later."
VALIDATION_MESSAGE = "Validation failed"


class ErrorHandlerService:
    """
    Service for turning exceptions into error envelopes.
    Used by the exception handlers registered in app.main.
    """

    @staticmethod
    def format_error_response(
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """
        Build the error envelope.

        Args:
            message: Human-readable error message
            errors: Optional field-level error details

        Returns:
            Error envelope dictionary
        """
        response: Dict[str, Any] = {
            "success": False,
            "message": message,
        }
        if errors:
            response["errors"] = errors
        return response

    @staticmethod
    def handle_api_exception(
        exception: APIException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle application exceptions, keeping their status and headers.
        """
        request_id = ErrorHandlerService._request_id(request)

        log = logger.error if exception.status_code >= 500 else logger.warning
        log(
            f"API Exception [{request_id}]: {exception.error_code} - {exception.detail}",
            extra={
                "error_code": exception.error_code,
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        errors = exception.field_errors if isinstance(exception, ValidationError) else None

        return JSONResponse(
            status_code=exception.status_code,
            content=ErrorHandlerService.format_error_response(exception.detail, errors),
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(
        errors: Sequence[Dict[str, Any]],
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle request validation errors as a 400 with field details.

        Args:
            errors: Error dictionaries as produced by pydantic's errors()
            request: Optional FastAPI request object

        Returns:
            JSON response listing every invalid field
        """
        details = ErrorHandlerService.format_validation_errors(errors)
        message = details[0]["message"] if len(details) == 1 else VALIDATION_MESSAGE
        return ErrorHandlerService.handle_api_exception(ValidationError(message, details), request)

    @staticmethod
    def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Flatten pydantic errors into {field, message, type} entries."""
        details = []
        for error in errors:
            # Drop the "body"/"query" prefix FastAPI adds to locations
            location = [str(loc) for loc in error.get("loc", ()) if loc not in ("body", "query", "path")]
            message = error.get("msg", "Invalid value")
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            details.append({
                "field": ".".join(location) or None,
                "message": message,
                "type": error.get("type", "value_error"),
            })
        return details

    @staticmethod
    def handle_database_error(
        exception: SQLAlchemyError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle database errors. Unique violations become a 400 duplicate message;
        anything else is a generic 500.
        """
        request_id = ErrorHandlerService._request_id(request)

        if isinstance(exception, IntegrityError):
            logger.warning(
                f"Integrity Error [{request_id}]: {exception.orig}",
                extra={"request_id": request_id, "path": request.url.path if request else None}
            )
            return JSONResponse(
                status_code=400,
                content=ErrorHandlerService.format_error_response(DUPLICATE_MESSAGE)
            )

        logger.error(
            f"Database Error [{request_id}]: {type(exception).__name__} - {exception}",
            extra={"request_id": request_id, "path": request.url.path if request else None},
            exc_info=True
        )
        return JSONResponse(
            status_code=500,
            content=ErrorHandlerService.format_error_response(UNEXPECTED_MESSAGE)
        )

    @staticmethod
    def handle_http_exception(
        exception: HTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle plain HTTP exceptions such as unknown routes."""
        request_id = ErrorHandlerService._request_id(request)

        logger.warning(
            f"HTTP Exception [{request_id}]: {exception.status_code} - {exception.detail}",
            extra={
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=ErrorHandlerService.format_error_response(str(exception.detail)),
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle unexpected errors without exposing internals.
        """
        request_id = ErrorHandlerService._request_id(request)

        logger.error(
            f"Unexpected Error [{request_id}]: {type(exception).__name__} - {str(exception)}",
            extra={
                "request_id": request_id,
                "path": request.url.path if request else None,
                "exception_type": type(exception).__name__,
            },
            exc_info=True
        )

        return JSONResponse(
            status_code=500,
            content=ErrorHandlerService.format_error_response(UNEXPECTED_MESSAGE)
        )

    @staticmethod
    def _request_id(request: Optional[Request] = None) -> str:
        """Request ID assigned by the logging middleware, or a fresh short one."""
        request_id = getattr(request.state, "request_id", None) if request else None
        return request_id or str(uuid.uuid4())[:8]


ERROR_RESPONSES = {
    400: {
        "description": "Validation failed or duplicate resource",
        "content": {
            "application/json": {
                "example": {
                    "success": False,
                    "message": "Validation failed",
                    "errors": [
                        {"field": "phone", "message": "Phone number must be exactly 10 digits", "type": "value_error"}
                    ]
                }
            }
        }
    },
    401: {
        "description": "Missing, invalid or expired token",
        "content": {
            "application/json": {
                "example": {"success": False, "message": "Authentication token required"}
            }
        }
    },
    403: {
        "description": "Authenticated but not allowed",
        "content": {
            "application/json": {
                "example": {"success": False, "message": "Insufficient permissions to create properties"}
            }
        }
    },
    404: {
        "description": "Not Found",
        "content": {
            "application/json": {
                "example": {"success": False, "message": "Property not found"}
            }
        }
    },
    500: {
        "description": "Internal Server Error",
        "content": {
            "application/json": {
                "example": {"success": False, "message": UNEXPECTED_MESSAGE}
            }
        }
    },
}
