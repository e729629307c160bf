"""
Error Handling for the Adaptive Complexity Engine

This module provides the error framework used across the package:
1. Error codes and severities
2. An exception hierarchy rooted at AdaptiveComplexityError
3. Structured error information for callers that persist or forward errors
4. A retry decorator for optimistic profile updates
"""

import time
import random
import logging
import traceback
import functools
import json
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar, Union, cast
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Type variables
T = TypeVar('T')
F = TypeVar('F', bound=Callable)

# Configure logging
logger = logging.getLogger(__name__)

class ErrorSeverity(Enum):
    """Severity levels for errors"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

class ErrorCode(Enum):
    """Standard error codes for the engine"""
    # General errors
    UNKNOWN_ERROR = "unknown_error"
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND_ERROR = "not_found_error"
    CONFIGURATION_ERROR = "configuration_error"

    # Profile errors
    PROFILE_NOT_FOUND = "profile_not_found"
    CONCURRENT_MODIFICATION = "concurrent_modification"

    # Data errors
    DATA_VALIDATION_ERROR = "data_validation_error"

class ErrorInfo(BaseModel):
    """Structured information about an error"""
    model_config = ConfigDict(use_enum_values=True)

    code: ErrorCode
    message: str
    timestamp: datetime = Field(default_factory=datetime.now)
    severity: ErrorSeverity = ErrorSeverity.ERROR
    details: Optional[Dict[str, Any]] = None
    exception_type: Optional[str] = None
    exception_message: Optional[str] = None
    stack_trace: Optional[List[str]] = None
    context: Optional[Dict[str, Any]] = None

    @field_validator('stack_trace', mode='before')
    @classmethod
    def validate_stack_trace(cls, v):
        """Split a string stack trace into lines"""
        if isinstance(v, str):
            return v.splitlines()
        return v

class AdaptiveComplexityError(Exception):
    """Base exception class for all engine errors"""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.severity = severity
        self.details = details or {}
        self.cause = cause
        self.context = context or {}
        self.timestamp = datetime.now()

    def to_error_info(self, include_stack_trace: bool = False) -> ErrorInfo:
        """Convert the exception to an ErrorInfo object"""
        stack_trace = None
        if include_stack_trace:
            stack_trace = traceback.format_exc().splitlines()

        details = dict(self.details)
        if self.cause is not None:
            details["cause"] = {
                "type": type(self.cause).__name__,
                "message": str(self.cause)
            }

        return ErrorInfo(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            severity=self.severity,
            details=details,
            exception_type=type(self).__name__,
            exception_message=str(self),
            stack_trace=stack_trace,
            context=self.context
        )

    def to_dict(self, include_stack_trace: bool = False) -> Dict[str, Any]:
        """Convert the exception to a dictionary"""
        return self.to_error_info(include_stack_trace).model_dump(mode="json")

    def to_json(self, include_stack_trace: bool = False) -> str:
        """Convert the exception to a JSON string"""
        return json.dumps(self.to_dict(include_stack_trace))

    def __str__(self) -> str:
        base_str = f"{self.code.value}: {self.message}"
        if self.details:
            base_str += f" (details: {self.details})"
        if self.cause:
            base_str += f" caused by {type(self.cause).__name__}: {str(self.cause)}"
        return base_str

# Specific exception classes

class ValidationError(AdaptiveComplexityError):
    """Error raised when input validation fails"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            severity=ErrorSeverity.WARNING,
            details=details,
            cause=cause,
            context=context
        )

class ObservationValidationError(ValidationError):
    """Error raised when a performance observation is rejected at the boundary"""

    def __init__(
        self,
        validation_errors: List[Dict[str, Any]],
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message="Performance observation rejected",
            details={"validation_errors": validation_errors},
            cause=cause,
            context=context
        )
        self.code = ErrorCode.DATA_VALIDATION_ERROR
        self.validation_errors = validation_errors

    @property
    def fields(self) -> List[str]:
        """Names of the fields that failed validation"""
        return [str(error.get("field")) for error in self.validation_errors]

class ConfigurationError(AdaptiveComplexityError):
    """Error raised when engine configuration is invalid"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.CONFIGURATION_ERROR,
            severity=ErrorSeverity.CRITICAL,
            details=details,
            cause=cause
        )

class NotFoundError(AdaptiveComplexityError):
    """Error raised when a requested resource is not found"""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.NOT_FOUND_ERROR,
        details: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=code,
            severity=ErrorSeverity.WARNING,
            details=details,
            context=context
        )

class ProfileNotFoundError(NotFoundError):
    """Error raised when no learning profile exists for a user"""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"No learning profile for user {user_id}",
            code=ErrorCode.PROFILE_NOT_FOUND,
            details={"user_id": user_id}
        )
        self.user_id = user_id

class ConcurrentModificationError(AdaptiveComplexityError):
    """Error raised when a profile save is based on a stale version"""

    def __init__(self, user_id: str, expected_version: int, actual_version: int):
        super().__init__(
            message=(
                f"Profile for user {user_id} changed concurrently "
                f"(expected version {expected_version}, found {actual_version})"
            ),
            code=ErrorCode.CONCURRENT_MODIFICATION,
            severity=ErrorSeverity.WARNING,
            details={
                "user_id": user_id,
                "expected_version": expected_version,
                "actual_version": actual_version
            }
        )
        self.user_id = user_id
        self.expected_version = expected_version
        self.actual_version = actual_version

def convert_exception(
    exception: Exception,
    default_message: str = "An unexpected error occurred",
    default_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
    context: Optional[Dict[str, Any]] = None
) -> AdaptiveComplexityError:
    """
    Convert a standard exception to an AdaptiveComplexityError.

    Args:
        exception: The exception to convert
        default_message: Default message if the exception has no message
        default_code: Default error code
        context: Optional additional context

    Returns:
        Converted error
    """
    if isinstance(exception, AdaptiveComplexityError):
        if context:
            exception.context.update(context)
        return exception

    return AdaptiveComplexityError(
        message=str(exception) or default_message,
        code=default_code,
        cause=exception,
        context=context
    )

def retry(
    max_retries: int = 3,
    retry_delay: float = 0.05,
    backoff_factor: float = 2.0,
    jitter: float = 0.1,
    retry_exceptions: Tuple[Type[Exception], ...] = (Exception,),
    ignore_exceptions: Tuple[Type[Exception], ...] = (),
    on_retry: Optional[Callable[[int, Exception, float], None]] = None
):
    """
    Decorator for retrying functions when exceptions occur.

    Args:
        max_retries: Maximum number of retries
        retry_delay: Initial delay between retries in seconds
        backoff_factor: Factor to increase delay with each retry
        jitter: Random jitter factor to add to delay
        retry_exceptions: Tuple of exception types to retry on
        ignore_exceptions: Tuple of exception types to not retry on
        on_retry: Optional callback called before each retry

    Returns:
        Decorated function
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            retries = 0
            delay = retry_delay

            while True:
                try:
                    return func(*args, **kwargs)
                except ignore_exceptions:
                    raise
                except retry_exceptions as e:
                    retries += 1
                    if retries > max_retries:
                        raise

                    actual_delay = delay * (1 + random.uniform(-jitter, jitter))

                    if on_retry:
                        on_retry(retries, e, actual_delay)

                    logger.warning(
                        f"Retry {retries}/{max_retries} for {func.__name__} "
                        f"after {actual_delay:.2f}s due to {type(e).__name__}: {e}"
                    )
                    time.sleep(actual_delay)
                    delay *= backoff_factor

        return cast(F, wrapper)

    return decorator

def log_error(
    error: Union[AdaptiveComplexityError, Exception],
    level: int = logging.ERROR,
    include_stack_trace: bool = False,
    context: Optional[Dict[str, Any]] = None,
    target: Optional[logging.Logger] = None
) -> None:
    """
    Log an error with standardized format.

    Args:
        error: The error to log
        level: Logging level
        include_stack_trace: Whether to include stack trace
        context: Additional context to include
        target: Logger to write to (defaults to this module's logger)
    """
    if not isinstance(error, AdaptiveComplexityError):
        error = convert_exception(error, context=context)
    elif context:
        error.context.update(context)

    message = f"ERROR [{error.code.value}]: {error.message}"

    if error.context:
        context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())
        message += f" (context: {context_str})"

    if error.details:
        message += f" (details: {error.details})"

    if include_stack_trace:
        message += f"\n{traceback.format_exc()}"

    (target or logger).log(level, message)
