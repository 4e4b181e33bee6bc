"""
Error normalization for the GraphQL layer.

Maps bridge errors onto one structure carrying a client-safe message,
a machine-readable code and GraphQL error extensions, so every resolver
failure reaches clients the same way.

Example:
    try:
        return await resolver(None, args)
    except BridgeError as e:
        normalized = normalize_error(e, request_id=request_id)
        raise GraphQLError(
            normalized.user_message,
            extensions=normalized.to_graphql_extensions(),
        ) from e
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from holorea_graphql.errors import (
    BridgeError,
    ConfigurationError,
    MalformedIdentifier,
    NotFound,
    RemoteError,
    SerializationError,
    TransportError,
    UnknownCapability,
)


class ErrorCategory(Enum):
    """High-level error categories.

    - CONFIGURATION: bridge misconfigured, fix and restart
    - VALIDATION: caller sent a bad identifier or argument
    - NOT_FOUND: a referenced record did not resolve
    - TRANSPORT: conductor unreachable or slow, retry with backoff
    - REMOTE: the zome function reported a failure
    - CONTRACT: zome payload shape mismatch, a defect
    - INTERNAL: anything else
    """

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    REMOTE = "remote"
    CONTRACT = "contract"
    INTERNAL = "internal"


class ErrorSeverity(Enum):
    """Error severity for logging.

    - INFO: expected errors (bad ids, not found, remote domain failures)
    - WARNING: recoverable errors (transport trouble)
    - ERROR: defects that need attention
    - CRITICAL: the bridge cannot serve at all
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class NormalizedError:
    """Normalized error structure for the GraphQL layer.

    Attributes:
        code: Machine-readable error code (e.g., "MALFORMED_IDENTIFIER")
        category: High-level error category
        severity: Error severity for logging
        user_message: Safe message to show to clients
        developer_message: Detailed message for debugging
        retryable: Whether repeating the request may succeed
        module: Serialized module address, when known
        target: `capability/function` of the failed call, when known
        details: Structured error details
        timestamp: When the error occurred
        request_id: Request ID for tracing
        retry_after: Seconds until retry is advised
    """

    code: str
    category: ErrorCategory
    severity: ErrorSeverity
    user_message: str
    developer_message: str
    retryable: bool = False
    module: str | None = None
    target: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    request_id: str | None = None
    retry_after: float | None = None

    def to_graphql_extensions(self) -> dict[str, Any]:
        """Convert to GraphQL error extensions."""
        extensions: dict[str, Any] = {
            "code": self.code,
            "category": self.category.value,
            "retryable": self.retryable,
        }

        if self.target:
            extensions["target"] = self.target

        if self.module:
            extensions["module"] = self.module

        if self.retry_after:
            extensions["retryAfter"] = self.retry_after

        if self.request_id:
            extensions["requestId"] = self.request_id

        return extensions

    def to_log_dict(self) -> dict[str, Any]:
        """Convert to dict for structured logging."""
        return {
            "error_code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
            "user_message": self.user_message,
            "developer_message": self.developer_message,
            "retryable": self.retryable,
            "module": self.module,
            "target": self.target,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "request_id": self.request_id,
            "retry_after": self.retry_after,
        }


def normalize_error(error: Exception, *, request_id: str | None = None) -> NormalizedError:
    """Normalize any exception to a NormalizedError.

    Args:
        error: The exception to normalize
        request_id: Request ID for tracing

    Returns:
        NormalizedError with consistent structure
    """
    if not isinstance(error, BridgeError):
        return NormalizedError(
            code="INTERNAL_ERROR",
            category=ErrorCategory.INTERNAL,
            severity=ErrorSeverity.ERROR,
            user_message="An unexpected error occurred. Please try again.",
            developer_message=f"{type(error).__name__}: {error}",
            details={"exception_type": type(error).__name__},
            request_id=request_id,
        )

    common: dict[str, Any] = {
        "developer_message": str(error),
        "module": error.module,
        "target": error.target,
        "details": error.details,
        "request_id": request_id,
    }

    if isinstance(error, MalformedIdentifier):
        return NormalizedError(
            code="MALFORMED_IDENTIFIER",
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.INFO,
            user_message=f"Invalid identifier: {error.args[0]}",
            **common,
        )
    if isinstance(error, NotFound):
        return NormalizedError(
            code="NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.INFO,
            user_message="The requested record was not found.",
            **common,
        )
    if isinstance(error, RemoteError):
        # Remote domain failures are surfaced verbatim
        return NormalizedError(
            code=f"REMOTE_{error.remote_type.upper()}" if error.remote_type else "REMOTE_ERROR",
            category=ErrorCategory.REMOTE,
            severity=ErrorSeverity.INFO,
            user_message=error.args[0],
            **common,
        )
    if isinstance(error, TransportError):
        return NormalizedError(
            code="TRANSPORT_ERROR",
            category=ErrorCategory.TRANSPORT,
            severity=ErrorSeverity.WARNING,
            user_message="The conductor is unavailable. Please try again later.",
            retryable=True,
            retry_after=error.retry_after,
            **common,
        )
    if isinstance(error, SerializationError):
        return NormalizedError(
            code="SERIALIZATION_ERROR",
            category=ErrorCategory.CONTRACT,
            severity=ErrorSeverity.ERROR,
            user_message="The conductor returned data in an unexpected shape.",
            **common,
        )
    if isinstance(error, UnknownCapability):
        return NormalizedError(
            code="UNKNOWN_CAPABILITY",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.ERROR,
            user_message="This field is not available on this server.",
            **common,
        )
    if isinstance(error, ConfigurationError):
        return NormalizedError(
            code="CONFIGURATION_ERROR",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.CRITICAL,
            user_message="The server is misconfigured.",
            **common,
        )
    return NormalizedError(
        code="BRIDGE_ERROR",
        category=ErrorCategory.INTERNAL,
        severity=ErrorSeverity.ERROR,
        user_message="An unexpected error occurred. Please try again.",
        **common,
    )


__all__ = [
    "ErrorCategory",
    "ErrorSeverity",
    "NormalizedError",
    "normalize_error",
]
