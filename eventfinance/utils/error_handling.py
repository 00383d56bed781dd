"""
Error Handling Module for Event Finance Manager

This module provides centralized error handling with:
- Custom exception hierarchy
- Standardized error responses
- Error logging and tracking
- Database error mapping
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import UUID
import logging

from fastapi import FastAPI, Request, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import (
    SQLAlchemyError,
    IntegrityError,
    OperationalError,
    DataError,
)
from starlette.exceptions import HTTPException as StarletteHTTPException

# Configure logging
logger = logging.getLogger("eventfinance.errors")


def _timestamp() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


class ErrorCode(str, Enum):
    """Standardized error codes for the application"""

    # Validation Errors (422)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_CATEGORY = "INVALID_CATEGORY"

    # Authentication/Authorization Errors (401/403)
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Resource Errors (404/409)
    NOT_FOUND = "NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    BUDGET_ITEM_NOT_FOUND = "BUDGET_ITEM_NOT_FOUND"
    EXPENSE_NOT_FOUND = "EXPENSE_NOT_FOUND"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    ALREADY_PROCESSED = "ALREADY_PROCESSED"
    CONFIRMATION_REQUIRED = "CONFIRMATION_REQUIRED"

    # Business Logic Errors (422)
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    BUDGET_EXCEEDED = "BUDGET_EXCEEDED"
    CANNOT_MODIFY = "CANNOT_MODIFY"

    # Rate Limiting (429)
    RATE_LIMITED = "RATE_LIMITED"

    # External Service Errors (502/503)
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"

    # Database Errors (500)
    DATABASE_ERROR = "DATABASE_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DATA_INTEGRITY_ERROR = "DATA_INTEGRITY_ERROR"

    # Internal Errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(Exception):
    """Base exception for all application exceptions"""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        field: Optional[str] = None,
        original_error: Optional[Exception] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.field = field
        self.original_error = original_error
        self.headers = headers
        self.timestamp = _timestamp()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response"""
        result = {
            "code": self.code.value,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.field:
            result["field"] = self.field
        if self.details:
            result["details"] = self.details
        return result


# ============================================================================
# Validation Exceptions
# ============================================================================

class ValidationException(AppException):
    """
    Base validation exception.

    ``errors`` lists every offending field as ``{"field", "message"}`` so a
    form can mark all of them at once.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        errors: Optional[List[Dict[str, str]]] = None,
    ):
        _details = details or {}
        if errors:
            _details["errors"] = errors
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=_details,
            field=field,
        )

    @property
    def errors(self) -> List[Dict[str, str]]:
        return self.details.get("errors", [])

    @property
    def fields(self) -> List[str]:
        return [error["field"] for error in self.errors]


class InvalidAmountException(ValidationException):
    """Invalid monetary amount"""

    def __init__(self, amount: Any, field: str = "amount", message: Optional[str] = None):
        message = message or f"Invalid amount: {amount}. Amount must be a positive number."
        super().__init__(
            message=message,
            field=field,
            code=ErrorCode.INVALID_AMOUNT,
            details={"provided_amount": str(amount)},
            errors=[{"field": field, "message": message}],
        )


class InvalidCategoryException(ValidationException):
    """Category outside the fixed enumeration"""

    def __init__(self, category: Any, allowed: List[str], field: str = "category"):
        message = f"Invalid category: {category}. Expected one of: {', '.join(allowed)}."
        super().__init__(
            message=message,
            field=field,
            code=ErrorCode.INVALID_CATEGORY,
            details={"provided_category": str(category), "allowed": allowed},
            errors=[{"field": field, "message": message}],
        )


# ============================================================================
# Authentication/Authorization Exceptions
# ============================================================================

class AuthenticationException(AppException):
    """Base authentication exception"""

    def __init__(
        self,
        message: str = "Authentication required",
        code: ErrorCode = ErrorCode.UNAUTHORIZED,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationException(AppException):
    """Authorization denied exception"""

    def __init__(
        self,
        message: str = "Permission denied",
        required_permission: Optional[str] = None,
        code: ErrorCode = ErrorCode.FORBIDDEN,
        details: Optional[Dict[str, Any]] = None,
    ):
        _details = details or {}
        if required_permission:
            _details["required_permission"] = required_permission
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=_details,
        )


class InsufficientPermissionsException(AuthorizationException):
    """Insufficient permissions"""

    def __init__(self, required_permission: str, user_role: Optional[str] = None):
        details = {}
        if user_role:
            details["current_role"] = user_role
        super().__init__(
            message=f"Insufficient permissions. Required: {required_permission}",
            required_permission=required_permission,
            code=ErrorCode.INSUFFICIENT_PERMISSIONS,
            details=details,
        )


# ============================================================================
# Resource Exceptions
# ============================================================================

class NotFoundException(AppException):
    """Resource not found exception"""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[Union[str, UUID]] = None,
        message: Optional[str] = None,
        code: ErrorCode = ErrorCode.NOT_FOUND,
    ):
        if message is None:
            if resource_id:
                message = f"{resource_type} with ID '{resource_id}' not found"
            else:
                message = f"{resource_type} not found"
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": str(resource_id) if resource_id else None},
        )


class EventNotFoundException(NotFoundException):
    """Event not found (or belongs to another organization)"""

    def __init__(self, event_id: Union[str, UUID]):
        super().__init__(
            resource_type="Event",
            resource_id=event_id,
            code=ErrorCode.EVENT_NOT_FOUND,
        )


class BudgetItemNotFoundException(NotFoundException):
    """Budget line item not found"""

    def __init__(self, item_id: Union[str, UUID]):
        super().__init__(
            resource_type="BudgetLineItem",
            resource_id=item_id,
            code=ErrorCode.BUDGET_ITEM_NOT_FOUND,
        )


class ExpenseNotFoundException(NotFoundException):
    """Expense not found"""

    def __init__(self, expense_id: Union[str, UUID]):
        super().__init__(
            resource_type="Expense",
            resource_id=expense_id,
            code=ErrorCode.EXPENSE_NOT_FOUND,
        )


class ConflictException(AppException):
    """Resource conflict exception"""

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        code: ErrorCode = ErrorCode.RESOURCE_CONFLICT,
        details: Optional[Dict[str, Any]] = None,
    ):
        _details = details or {}
        if resource_type:
            _details["resource_type"] = resource_type
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details=_details,
        )


class ExpenseAlreadyDecidedException(ConflictException):
    """Approve/reject attempted on an expense that is no longer pending"""

    def __init__(self, expense_id: Union[str, UUID], current_status: str, attempted_action: str):
        super().__init__(
            message=f"Expense '{expense_id}' is already {current_status}; it cannot be {attempted_action}",
            resource_type="Expense",
            code=ErrorCode.ALREADY_PROCESSED,
            details={
                "expense_id": str(expense_id),
                "current_status": current_status,
                "attempted_action": attempted_action,
            },
        )


class ConfirmationRequiredException(ConflictException):
    """First phase of a delete: nothing was removed, caller must confirm"""

    def __init__(self, resource_type: str, resource_id: Union[str, UUID], summary: Dict[str, Any]):
        super().__init__(
            message=f"Deleting this {resource_type} cannot be undone. Repeat the request with confirm=true.",
            resource_type=resource_type,
            code=ErrorCode.CONFIRMATION_REQUIRED,
            details={"resource_id": str(resource_id), "summary": summary},
        )


# ============================================================================
# Business Logic Exceptions
# ============================================================================

class BusinessRuleException(AppException):
    """Business rule violation exception"""

    def __init__(
        self,
        message: str,
        rule: Optional[str] = None,
        code: ErrorCode = ErrorCode.BUSINESS_RULE_VIOLATION,
        details: Optional[Dict[str, Any]] = None,
    ):
        _details = details or {}
        if rule:
            _details["violated_rule"] = rule
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=_details,
        )


class BudgetExceededException(BusinessRuleException):
    """Budget exceeded exception"""

    def __init__(self, budget_name: str, budget_amount: Decimal, requested_amount: Decimal):
        super().__init__(
            message=(
                f"Budget '{budget_name}' would be exceeded. "
                f"Budget: {budget_amount:,.2f}, Requested total: {requested_amount:,.2f}"
            ),
            rule="BUDGET_LIMIT",
            code=ErrorCode.BUDGET_EXCEEDED,
            details={
                "budget_name": budget_name,
                "budget_amount": str(budget_amount),
                "requested_amount": str(requested_amount),
                "overage": str(requested_amount - budget_amount),
            },
        )


class CannotModifyException(BusinessRuleException):
    """Record is in a state that no longer allows edits"""

    def __init__(self, resource_type: str, current_status: str, operation: str = "modified"):
        super().__init__(
            message=f"{resource_type} in status {current_status} cannot be {operation}",
            rule="PENDING_ONLY",
            code=ErrorCode.CANNOT_MODIFY,
            details={"resource_type": resource_type, "current_status": current_status},
        )


# ============================================================================
# Exception Handlers
# ============================================================================

def create_error_response(
    code: ErrorCode,
    message: str,
    status_code: int,
    details: Optional[Dict[str, Any]] = None,
    field: Optional[str] = None,
) -> JSONResponse:
    """Create a standardized error response"""
    content = {
        "detail": {
            "code": code.value,
            "message": message,
            "timestamp": _timestamp(),
        }
    }
    if field:
        content["detail"]["field"] = field
    if details:
        content["detail"]["details"] = details

    return JSONResponse(status_code=status_code, content=content)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle AppException"""
    logger.error(
        f"AppException: {exc.code.value} - {exc.message}",
        extra={
            "code": exc.code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
        },
        exc_info=exc.original_error,
    )

    response = create_error_response(
        code=exc.code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        field=exc.field,
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTPException"""
    code_map = {
        400: ErrorCode.INVALID_INPUT,
        401: ErrorCode.UNAUTHORIZED,
        403: ErrorCode.FORBIDDEN,
        404: ErrorCode.NOT_FOUND,
        409: ErrorCode.RESOURCE_CONFLICT,
        422: ErrorCode.VALIDATION_ERROR,
        429: ErrorCode.RATE_LIMITED,
        500: ErrorCode.INTERNAL_ERROR,
        502: ErrorCode.EXTERNAL_SERVICE_ERROR,
        503: ErrorCode.EXTERNAL_SERVICE_ERROR,
    }

    error_code = code_map.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    logger.warning(
        f"HTTPException: {exc.status_code} - {message}",
        extra={"path": request.url.path, "method": request.method},
    )

    response = create_error_response(
        code=error_code,
        message=message,
        status_code=exc.status_code,
    )
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors"""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })

    logger.warning(
        f"ValidationError: {len(errors)} validation errors",
        extra={"path": request.url.path, "method": request.method, "errors": errors},
    )

    return create_error_response(
        code=ErrorCode.VALIDATION_ERROR,
        message="Request validation failed",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        details={"errors": errors},
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle SQLAlchemy errors"""
    error_message = "A database error occurred"
    error_code = ErrorCode.DATABASE_ERROR
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if isinstance(exc, IntegrityError):
        error_message = "Data integrity constraint violated"
        error_code = ErrorCode.DATA_INTEGRITY_ERROR
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
        error_str = str(exc.orig).lower() if exc.orig else ""
        if "unique" in error_str or "duplicate" in error_str:
            error_message = "A record with this value already exists"
            error_code = ErrorCode.DUPLICATE_ENTRY
            status_code = status.HTTP_409_CONFLICT
        elif "foreign key" in error_str:
            error_message = "Referenced record does not exist"
    elif isinstance(exc, OperationalError):
        error_message = "Database operation failed"
        error_code = ErrorCode.CONNECTION_ERROR
    elif isinstance(exc, DataError):
        error_message = "Invalid data format for database"
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    logger.error(
        f"SQLAlchemyError: {type(exc).__name__} - {str(exc)}",
        extra={"path": request.url.path, "method": request.method},
        exc_info=True,
    )

    return create_error_response(
        code=error_code,
        message=error_message,
        status_code=status_code,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions"""
    logger.critical(
        f"UnhandledException: {type(exc).__name__} - {str(exc)}",
        extra={"path": request.url.path, "method": request.method},
        exc_info=True,
    )

    # Never expose internal error details
    return create_error_response(
        code=ErrorCode.INTERNAL_ERROR,
        message="An unexpected error occurred. Please try again later.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application"""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


# ============================================================================
# Error Tracking Middleware
# ============================================================================

class ErrorTrackingMiddleware:
    """Middleware for tracking and logging all errors"""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            logger.error(
                f"Request failed: {scope.get('path', 'unknown')}",
                extra={
                    "path": scope.get("path"),
                    "method": scope.get("method"),
                    "exception_type": type(exc).__name__,
                },
                exc_info=True,
            )
            raise


__all__ = [
    # Base
    "AppException",
    "ErrorCode",

    # Validation
    "ValidationException",
    "InvalidAmountException",
    "InvalidCategoryException",

    # Auth
    "AuthenticationException",
    "AuthorizationException",
    "InsufficientPermissionsException",

    # Resource
    "NotFoundException",
    "EventNotFoundException",
    "BudgetItemNotFoundException",
    "ExpenseNotFoundException",
    "ConflictException",
    "ExpenseAlreadyDecidedException",
    "ConfirmationRequiredException",

    # Business Logic
    "BusinessRuleException",
    "BudgetExceededException",
    "CannotModifyException",

    # Handlers
    "setup_exception_handlers",
    "create_error_response",
    "ErrorTrackingMiddleware",
]
