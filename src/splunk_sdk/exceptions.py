"""Structured exception classes for the Splunk SDK."""

import json
from typing import Any, Dict, Optional


class SplunkSDKError(Exception):
    """Base exception for all Splunk SDK errors.

    This exception serves as the parent class for all SDK specific
    exceptions, providing a consistent interface for error handling
    across the package.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class RequestError(SplunkSDKError):
    """Raised when a request to the server does not succeed.

    Carries the HTTP status code and reason phrase of the failed
    response. The response body, when there is one, is kept in
    ``details["body"]``.

    :param status_code: HTTP status code of the response
    :param reason: HTTP reason phrase of the response
    :param details: Optional response body or other structured detail
    """

    def __init__(
        self,
        status_code: int,
        reason: str,
        details: Optional[Any] = None,
    ):
        """Initialize request error with status, reason and optional details."""
        payload: Dict[str, Any] = {"status_code": status_code, "reason": reason}
        if details:
            payload["body"] = details
        super().__init__(
            message=f"{status_code} {reason}",
            code="REQUEST_ERROR",
            details=payload,
        )
        self.status_code = status_code
        self.reason = reason
        self.body = details


class InvalidOperationError(SplunkSDKError):
    """Raised when an operation needs state that is not there.

    For example, reading a typed field from an entity whose record has
    never been fetched.

    :param message: Description of the missing state
    """

    def __init__(self, message: str):
        """Initialize invalid operation error with message."""
        super().__init__(message=message, code="INVALID_OPERATION")


class ArgumentError(SplunkSDKError, ValueError):
    """Raised when a required argument is missing or empty.

    :param message: Description of the argument failure
    :param argument: Optional name of the offending argument
    """

    def __init__(self, message: str, argument: Optional[str] = None):
        """Initialize argument error with message and optional argument name."""
        details = {}
        if argument:
            details["argument"] = argument
        super().__init__(message=message, code="ARGUMENT_ERROR", details=details)
        self.argument = argument


class UnimplementedError(SplunkSDKError, NotImplementedError):
    """Raised by operations that are declared but not provided yet.

    :param operation: Name of the unimplemented operation
    """

    def __init__(self, operation: str):
        """Initialize unimplemented error with the operation name."""
        super().__init__(
            message=f"{operation} is not implemented",
            code="UNIMPLEMENTED",
            details={"operation": operation},
        )
        self.operation = operation


class ConversionError(SplunkSDKError, ValueError):
    """Raised when a record value cannot be converted to its target type.

    :param value: The raw value that failed conversion
    :param target_type: Name of the type conversion was attempted to
    :param reason: Optional underlying reason
    """

    def __init__(self, value: Any, target_type: str, reason: str = ""):
        """Initialize conversion error with value, target type and reason."""
        message = f"Cannot convert {value!r} to {target_type}"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message,
            code="CONVERSION_ERROR",
            details={"value": str(value), "target_type": target_type},
        )
        self.value = value
        self.target_type = target_type
