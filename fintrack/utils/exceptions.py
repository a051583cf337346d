"""
Custom exceptions for the application.
All business logic and technical exceptions are defined here.
"""

from typing import Dict, List, Optional, Union

Details = Union[List[str], Dict[str, str]]


class AppException(Exception):
    """Base exception for all application exceptions."""
    
    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status_code: int = 500,
        details: Optional[Details] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or []
        super().__init__(self.message)


class ValidationError(AppException):
    """Raised when input validation fails.

    ``details`` maps each offending field to what is wrong with it.
    """
    
    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[Details] = None,
        code: str = "VALIDATION_ERROR"
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            details=details
        )


class AuthenticationError(AppException):
    """Raised when no valid session backs the request."""
    
    def __init__(
        self,
        message: str = "Unauthorized",
        details: Optional[Details] = None,
        code: str = "AUTHENTICATION_ERROR"
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=401,
            details=details
        )


class AuthorizationError(AppException):
    """Raised when authorization fails."""
    
    def __init__(
        self,
        message: str = "Insufficient permissions",
        details: Optional[Details] = None,
        code: str = "AUTHORIZATION_ERROR"
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=403,
            details=details
        )


class NotFoundError(AppException):
    """Raised when a resource is not found."""
    
    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: str = "resource",
        resource_id: Optional[str] = None
    ):
        if resource_id:
            message = f"{resource_type.title()} with ID '{resource_id}' not found"
        
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            details=[f"Resource type: {resource_type}"]
        )


class DatabaseError(AppException):
    """Raised when database operations fail."""
    
    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Details] = None,
        code: str = "DATABASE_ERROR"
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=500,
            details=details
        )


class StorageDegradedError(DatabaseError):
    """Raised when the backing store is unreachable or a call timed out.

    Data operations surface it as a 500. Session checks catch it and
    answer "unauthenticated" so infrastructure state never reaches
    anonymous callers.
    """
    
    def __init__(
        self,
        message: str = "Storage unavailable",
        operation: str = "unknown",
        details: Optional[Details] = None
    ):
        self.operation = operation
        super().__init__(
            message=message,
            details=details or [f"Operation: {operation}"],
            code="STORAGE_DEGRADED"
        )


class ExternalServiceError(AppException):
    """Raised when external service calls fail."""
    
    def __init__(
        self,
        message: str = "External service error",
        service_name: str = "unknown",
        details: Optional[Details] = None
    ):
        super().__init__(
            message=message,
            code="EXTERNAL_SERVICE_ERROR",
            status_code=502,
            details=details or [f"Service: {service_name}"]
        )
