# src/log_shipper/exceptions.py

"""
Shared custom exceptions for the CloudConnexa log shipper.

Centralizing exception definitions in a separate module prevents circular
import errors between other modules that need to raise or catch them.

Exception Hierarchy:
- LogShipperError (base)
  - RetryableError (the platform may retry the invocation)
    - S3ThrottlingError
    - S3TimeoutError
    - ObjectReadError
    - SecretFetchError
    - SubmissionError
  - NonRetryableError (retrying will not help)
    - ValidationError
      - InvalidS3EventError
      - UnsupportedObjectKeyError
    - S3AccessDeniedError
    - S3ObjectNotFoundError
    - DecompressError
    - ConfigurationError
"""

from typing import Any, Dict, Optional

MAX_ERROR_BODY_CHARS = 2048


class LogShipperError(Exception):
    """Base exception for all log shipper errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = dict(context) if context else {}
        self.correlation_id = correlation_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "correlation_id": self.correlation_id,
            "retryable": isinstance(self, RetryableError),
        }


class RetryableError(LogShipperError):
    """Base class for errors that can be retried."""

    pass


class NonRetryableError(LogShipperError):
    """Base class for errors that should not be retried."""

    pass


# === S3-Related Errors ===


class S3Error(LogShipperError):
    """Base class for S3-related errors."""

    pass


class S3ObjectNotFoundError(S3Error, NonRetryableError):
    """Raised when a requested S3 object does not exist."""

    def __init__(self, bucket: str, key: str, **kwargs):
        message = f"S3 object not found: s3://{bucket}/{key}"
        context = {"bucket": bucket, "key": key}
        context.update(kwargs.pop("context", {}))
        kwargs.setdefault("error_code", "S3_OBJECT_NOT_FOUND")
        super().__init__(message, context=context, **kwargs)


class S3AccessDeniedError(S3Error, NonRetryableError):
    """Raised when access is denied to an S3 object."""

    def __init__(self, bucket: str, key: str, **kwargs):
        message = f"Access denied to S3 object: s3://{bucket}/{key}"
        context = {"bucket": bucket, "key": key}
        context.update(kwargs.pop("context", {}))
        kwargs.setdefault("error_code", "S3_ACCESS_DENIED")
        super().__init__(message, context=context, **kwargs)


class S3ThrottlingError(S3Error, RetryableError):
    """Raised when S3 operations are being throttled."""

    def __init__(self, operation: str, **kwargs):
        message = f"S3 operation throttled: {operation}"
        context = {"operation": operation}
        context.update(kwargs.pop("context", {}))
        kwargs.setdefault("error_code", "S3_THROTTLING")
        super().__init__(message, context=context, **kwargs)


class S3TimeoutError(S3Error, RetryableError):
    """Raised when S3 operations timeout."""

    def __init__(self, operation: str, **kwargs):
        message = f"S3 operation timed out: {operation}"
        context = {"operation": operation}
        context.update(kwargs.pop("context", {}))
        kwargs.setdefault("error_code", "S3_TIMEOUT")
        super().__init__(message, context=context, **kwargs)


class ObjectReadError(S3Error, RetryableError):
    """Raised when an object cannot be opened or its stream breaks mid-read."""

    def __init__(self, bucket: str, key: str, reason: str, **kwargs):
        message = f"Failed to read s3://{bucket}/{key}: {reason}"
        context = {"bucket": bucket, "key": key, "reason": reason}
        context.update(kwargs.pop("context", {}))
        kwargs.setdefault("error_code", "OBJECT_READ_FAILED")
        super().__init__(message, context=context, **kwargs)


# === Validation Errors ===


class ValidationError(NonRetryableError):
    """Base class for validation errors."""

    pass


class InvalidS3EventError(ValidationError):
    """Raised when S3 event structure is invalid."""

    def __init__(self, message: str, **kwargs):
        if "error_code" not in kwargs:
            kwargs["error_code"] = "INVALID_S3_EVENT"
        super().__init__(message, **kwargs)


class UnsupportedObjectKeyError(ValidationError):
    """
    Raised when an object key fails the prefix filter or type inference.

    This is a skip signal rather than a failure: the handler catches it,
    logs it at INFO and ends the invocation with an empty result.
    """

    def __init__(self, key: str, reason: str, **kwargs):
        message = f"{reason} for key {key}"
        context = {"key": key, "reason": reason}
        kwargs.setdefault("error_code", "UNSUPPORTED_OBJECT_KEY")
        super().__init__(message, context=context, **kwargs)


# === Processing Errors ===


class ProcessingError(LogShipperError):
    """Base class for processing errors."""

    pass


class DecompressError(ProcessingError, NonRetryableError):
    """Raised when an object is not a readable gzip stream."""

    def __init__(self, bucket: str, key: str, reason: str, **kwargs):
        message = f"Failed to decompress s3://{bucket}/{key}: {reason}"
        context = {"bucket": bucket, "key": key, "reason": reason}
        kwargs.setdefault("error_code", "DECOMPRESS_FAILED")
        super().__init__(message, context=context, **kwargs)


# === Secret Manager Errors ===


class SecretFetchError(RetryableError):
    """Raised when the auth token cannot be resolved from Secrets Manager."""

    def __init__(self, secret_id: str, reason: str, **kwargs):
        message = f"Failed to retrieve secret: {reason}"
        context = {"secret_id": secret_id, "reason": reason}
        context.update(kwargs.pop("context", {}))
        kwargs.setdefault("error_code", "SECRET_FETCH_FAILED")
        super().__init__(message, context=context, **kwargs)


# === Submission Errors ===


class SubmissionError(RetryableError):
    """Raised when a bundle could not be delivered to the Graylog endpoint."""

    def __init__(
        self,
        reason: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **kwargs,
    ):
        message = f"Failed to send logs to Graylog: {reason}"
        if response_body is not None and len(response_body) > MAX_ERROR_BODY_CHARS:
            response_body = response_body[:MAX_ERROR_BODY_CHARS] + "...[truncated]"
        self.status_code = status_code
        self.response_body = response_body
        context = {"reason": reason, "status_code": status_code}
        context.update(kwargs.pop("context", {}))
        kwargs.setdefault("error_code", "SUBMISSION_FAILED")
        super().__init__(message, context=context, **kwargs)


# === Configuration Errors ===


class ConfigurationError(NonRetryableError):
    """Raised when there's an error in the application configuration."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="CONFIGURATION_ERROR", **kwargs)


# === Utility Functions ===


def is_retryable_error(error: Exception) -> bool:
    """Check if an error is retryable."""
    return isinstance(error, RetryableError)


def get_error_context(error: Exception) -> Dict[str, Any]:
    """Extract error context for logging."""
    if isinstance(error, LogShipperError):
        return error.to_dict()
    else:
        return {
            "error_type": error.__class__.__name__,
            "message": str(error),
            "retryable": False,  # Unknown errors default to non-retryable
        }
