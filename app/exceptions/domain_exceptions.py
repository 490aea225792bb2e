# app/exceptions/domain_exceptions.py

from typing import Any, Dict, List, Optional


class DomainException(Exception):
    """Base class for all domain exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Exception raised when a resource is not found"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=404,
            details=details
        )


class ConflictException(DomainException):
    """Exception raised when a uniqueness rule would be violated"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=409,
            details=details
        )


class UnauthorizedException(DomainException):
    """Exception raised when credentials do not match"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=401,
            details=details
        )


class ValidationException(DomainException):
    """
    Exception raised for validation errors

    Every failed rule is listed under details["errors"].
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None, details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        details["errors"] = list(errors or [])
        super().__init__(
            message=message,
            status_code=422,
            details=details
        )

    @property
    def errors(self) -> List[str]:
        return self.details["errors"]


class InternalServerException(DomainException):
    """Exception raised for internal server errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=500,
            details=details
        )


class HashingException(InternalServerException):
    """Exception raised when the password hashing primitive rejects its input"""
    pass


class PersistenceException(InternalServerException):
    """Exception raised for storage failures other than not-found and conflicts"""
    pass
