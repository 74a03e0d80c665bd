"""
Error taxonomy for standardized error handling across fido.

Every failure the aggregation engine can produce is raised as a typed
``FidoError`` subclass so callers can tell hydrate-time structural errors,
fetch-time lookup errors, map materialization errors, coercion errors,
provider faults and cancellation apart.

Key features:
- Error code enums (avoid typos)
- Severity levels (fatal, transient, user_error)
- Pydantic models for structured error details
- Boundary translation function for provider faults
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# Error Codes and Severity
# ============================================================================


class ErrorCode(str, Enum):
    """Enumeration of all error codes in the system."""

    # Destination (hydrate) errors
    DESTINATION_INVALID = "DESTINATION_INVALID"
    DESTINATION_NIL = "DESTINATION_NIL"
    DESTINATION_NOT_INSTANCE = "DESTINATION_NOT_INSTANCE"
    STRUCT_TAG_NOT_FOUND = "STRUCT_TAG_NOT_FOUND"

    # Lookup errors
    FIELD_NOT_FOUND = "FIELD_NOT_FOUND"
    INVALID_PATH = "INVALID_PATH"

    # Map materialization errors
    EXPECTED_MAP = "EXPECTED_MAP"
    INVALID_MAP_KEY_TYPE = "INVALID_MAP_KEY_TYPE"
    NOT_ADDRESSABLE = "NOT_ADDRESSABLE"

    # Coercion errors
    NOT_SETABLE = "NOT_SETABLE"
    INVALID_TYPE = "INVALID_TYPE"
    INVALID_VALUE = "INVALID_VALUE"
    OVERFLOW = "OVERFLOW"

    # Execution errors
    CANCELLED = "CANCELLED"
    PROVIDER_PANIC = "PROVIDER_PANIC"
    NON_ERROR_FAULT = "NON_ERROR_FAULT"
    PROVIDER_ERROR = "PROVIDER_ERROR"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorSeverity(str, Enum):
    """Error severity for automatic retry and alerting."""

    FATAL = "fatal"  # Unrecoverable, requires intervention
    TRANSIENT = "transient"  # Temporary, retryable
    USER_ERROR = "user_error"  # Caller mistake, not retryable


# ============================================================================
# Pydantic Error Models
# ============================================================================


class ErrorDetails(BaseModel):
    """Structured error details for serialization."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: ErrorCode = Field(..., description="Error code enum")
    message: str = Field(..., description="Human-readable error message")
    context: dict[str, Any] = Field(default_factory=dict, description="Additional context")
    severity: ErrorSeverity = Field(default=ErrorSeverity.FATAL, description="Error severity")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return self.model_dump()


# ============================================================================
# Base Exception Class
# ============================================================================


class FidoError(Exception):
    """Base class for all fido errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        details: dict[str, Any] | None = None,
        severity: ErrorSeverity = ErrorSeverity.FATAL,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.severity = severity

    def to_details(self) -> ErrorDetails:
        """Convert to structured ErrorDetails."""
        return ErrorDetails(
            code=self.code, message=self.message, context=self.details, severity=self.severity
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "error": self.code.value,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
        }


# ============================================================================
# Destination Errors
# ============================================================================


class DestinationError(FidoError):
    """The destination record cannot be hydrated."""

    def __init__(self, message: str, code: ErrorCode, received: Any | None = None) -> None:
        details = {}
        if received is not None:
            details["received"] = type(received).__name__
        super().__init__(message, code, details, severity=ErrorSeverity.USER_ERROR)


class DestinationInvalidError(DestinationError):
    """Destination is not a dataclass instance."""

    def __init__(self, received: Any | None = None) -> None:
        super().__init__(
            f"invalid destination type: {type(received).__name__}",
            ErrorCode.DESTINATION_INVALID,
            received,
        )


class DestinationNilError(DestinationError):
    """Destination is None."""

    def __init__(self) -> None:
        super().__init__("destination is nil", ErrorCode.DESTINATION_NIL)


class DestinationNotInstanceError(DestinationError):
    """Destination is a class rather than an instance of one."""

    def __init__(self, received: Any) -> None:
        super().__init__(
            f"destination is not an instance: {getattr(received, '__name__', received)}",
            ErrorCode.DESTINATION_NOT_INSTANCE,
        )


class StructTagNotFoundError(FidoError):
    """A destination field carries no path tag."""

    def __init__(self, tag: str, field_name: str) -> None:
        super().__init__(
            f"struct tag not found on field: {tag} missing on {field_name}",
            ErrorCode.STRUCT_TAG_NOT_FOUND,
            {"tag": tag, "field": field_name},
            severity=ErrorSeverity.USER_ERROR,
        )


# ============================================================================
# Lookup Errors
# ============================================================================


class FieldNotFoundError(FidoError):
    """No registered field matches a provided path."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"field not found: {path}",
            ErrorCode.FIELD_NOT_FOUND,
            {"path": path},
            severity=ErrorSeverity.USER_ERROR,
        )


class InvalidPathError(FidoError):
    """A path is too short for the destination it addresses."""

    def __init__(self, message: str, path: str | None = None) -> None:
        details = {"path": path} if path is not None else {}
        super().__init__(
            f"invalid path: {message}",
            ErrorCode.INVALID_PATH,
            details,
            severity=ErrorSeverity.USER_ERROR,
        )


# ============================================================================
# Map Materialization Errors
# ============================================================================


class ExpectedMapError(FidoError):
    """Materialization was attempted on a slot that is not map-typed."""

    def __init__(self, path: str, received: str) -> None:
        super().__init__(
            f"expected map for {path} got {received}",
            ErrorCode.EXPECTED_MAP,
            {"path": path, "received": received},
        )


class InvalidMapKeyTypeError(FidoError):
    """Map-typed destination is not keyed by text."""

    def __init__(self, path: str, key_type: str) -> None:
        super().__init__(
            f"invalid map key type for {path} got {key_type}",
            ErrorCode.INVALID_MAP_KEY_TYPE,
            {"path": path, "key_type": key_type},
            severity=ErrorSeverity.USER_ERROR,
        )


class NotAddressableError(FidoError):
    """An unset map lives in a slot that cannot be written."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"cannot initialise map at {path}: value is not addressable",
            ErrorCode.NOT_ADDRESSABLE,
            {"path": path},
        )


# ============================================================================
# Coercion Errors
# ============================================================================


class CoercionError(FidoError):
    """A value could not be assigned into a destination slot."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        expected: str | None = None,
        received: Any | None = None,
    ) -> None:
        details = {}
        if expected:
            details["expected"] = expected
        if received is not None:
            details["received"] = type(received).__name__
        super().__init__(message, code, details, severity=ErrorSeverity.USER_ERROR)


class NotSetableError(CoercionError):
    """Destination slot cannot be set."""

    def __init__(self, target: str) -> None:
        super().__init__(f"value cannot be set: {target}", ErrorCode.NOT_SETABLE)


class InvalidTypeError(CoercionError):
    """Input type cannot be converted to the destination type."""

    def __init__(self, expected: str, received: Any) -> None:
        super().__init__(
            f"cannot set {type(received).__name__} to {expected}",
            ErrorCode.INVALID_TYPE,
            expected=expected,
            received=received,
        )


class InvalidValueError(CoercionError):
    """Input text does not parse as the destination type."""

    def __init__(self, expected: str, received: Any) -> None:
        super().__init__(
            f"could not convert {received!r} to {expected}",
            ErrorCode.INVALID_VALUE,
            expected=expected,
            received=received,
        )


class SetOverflowError(CoercionError):
    """Numeric input does not fit the destination width."""

    def __init__(self, expected: str, received: Any) -> None:
        super().__init__(
            f"set overflow: {received!r} to {expected}",
            ErrorCode.OVERFLOW,
            expected=expected,
            received=received,
        )


# ============================================================================
# Execution Errors
# ============================================================================


class CancelledError(FidoError):
    """The shared cancellation signal fired."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message, ErrorCode.CANCELLED, severity=ErrorSeverity.TRANSIENT)


class ProviderPanicError(FidoError):
    """Provider code raised an unexpected exception."""

    def __init__(self, provider: str, cause: BaseException) -> None:
        super().__init__(
            f"{cause}: recovered from provider {provider} fault",
            ErrorCode.PROVIDER_PANIC,
            {"provider": provider, "cause": str(cause), "cause_type": type(cause).__name__},
        )
        self.cause = cause


class NonErrorFault(FidoError):
    """Provider code aborted with something that is not an ``Exception``."""

    def __init__(self, provider: str, value: Any) -> None:
        super().__init__(
            f"non error fault {value!r}: recovered from provider {provider} fault",
            ErrorCode.NON_ERROR_FAULT,
            {"provider": provider, "value_type": type(value).__name__},
        )
        self.value = value


class ProviderError(FidoError):
    """Provider lifecycle operation (notify/close) failed."""

    def __init__(self, message: str, provider: str, cause: Exception | None = None) -> None:
        details = {"provider": provider}
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__
        super().__init__(
            message,
            ErrorCode.PROVIDER_ERROR,
            details,
            severity=ErrorSeverity.TRANSIENT,  # Provider may recover
        )


class InternalError(FidoError):
    """Internal error (unexpected condition)."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        details = {}
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__
        super().__init__(message, ErrorCode.INTERNAL_ERROR, details, severity=ErrorSeverity.FATAL)


# ============================================================================
# Boundary Translation Functions
# ============================================================================

# A user interrupt is never converted.
_PASSTHROUGH = (KeyboardInterrupt,)


def to_fido_error(exc: BaseException, provider: str) -> FidoError:
    """
    Translate anything raised by provider code into a FidoError at the fetch boundary.

    Args:
        exc: Whatever the provider raised
        provider: Name of the provider, used in the message

    Returns:
        The exception itself when it is already a FidoError, a ProviderPanicError
        for any other Exception, or a NonErrorFault for a BaseException that is
        not an Exception.

    Raises:
        KeyboardInterrupt: re-raised untouched
    """
    if isinstance(exc, FidoError):
        return exc

    if isinstance(exc, _PASSTHROUGH):
        raise exc

    if isinstance(exc, Exception):
        err: FidoError = ProviderPanicError(provider, exc)
    else:
        err = NonErrorFault(provider, exc)

    err.__cause__ = exc
    return err


__all__ = [
    "CancelledError",
    "CoercionError",
    "DestinationError",
    "DestinationInvalidError",
    "DestinationNilError",
    "DestinationNotInstanceError",
    "ErrorCode",
    "ErrorDetails",
    "ErrorSeverity",
    "ExpectedMapError",
    "FidoError",
    "FieldNotFoundError",
    "InternalError",
    "InvalidMapKeyTypeError",
    "InvalidPathError",
    "InvalidTypeError",
    "InvalidValueError",
    "NonErrorFault",
    "NotAddressableError",
    "NotSetableError",
    "ProviderError",
    "ProviderPanicError",
    "SetOverflowError",
    "StructTagNotFoundError",
    "to_fido_error",
]
