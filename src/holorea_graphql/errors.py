"""
Error taxonomy for the GraphQL bridge.

Every failure raised by this package derives from BridgeError so the
GraphQL layer can normalize errors uniformly:

- ConfigurationError: startup-fatal, the resolver set cannot be built
- UnknownCapability: a resolver references a capability never configured
- MalformedIdentifier: caller supplied an identifier the codec never produced
- TransportError: connection or timeout trouble, the caller may retry
- RemoteError: the zome function itself reported a failure
- NotFound: a referenced record could not be resolved
- SerializationError: params or result did not match the expected shape
"""

from __future__ import annotations

from typing import Any


class BridgeError(Exception):
    """Base exception for bridge errors.

    Carries the RPC coordinates the failure relates to, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        module: str | None = None,
        capability: str | None = None,
        function: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.module = module
        self.capability = capability
        self.function = function
        self.details = details or {}

    @property
    def target(self) -> str | None:
        """`capability/function` of the call this error came from."""
        if self.capability and self.function:
            return f"{self.capability}/{self.function}"
        return self.capability or self.function

    def __str__(self) -> str:
        parts = [self.args[0]]
        if self.target:
            parts.append(f"[{self.target}]")
        return " ".join(parts)


class ConfigurationError(BridgeError):
    """Configuration is missing or invalid."""

    pass


class UnknownCapability(BridgeError):
    """A capability name was looked up that is not in the registry."""

    def __init__(self, capability: str) -> None:
        super().__init__(f"No module configured for capability '{capability}'")
        self.capability = capability


class MalformedIdentifier(BridgeError):
    """An identifier could not be decoded."""

    def __init__(self, message: str, *, identifier: str | None = None) -> None:
        super().__init__(message, details={"identifier": identifier})
        self.identifier = identifier


class TransportError(BridgeError):
    """The call could not be delivered or timed out.

    `retry_after` is set when the conductor announced when to try again.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retry_after: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.retry_after = retry_after


class RemoteError(BridgeError):
    """The zome function reported a failure."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        remote_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.remote_type = remote_type


class NotFound(RemoteError):
    """A referenced record does not exist or a link did not resolve."""

    pass


class SerializationError(BridgeError):
    """Params or result did not match the expected shape."""

    pass


__all__ = [
    "BridgeError",
    "ConfigurationError",
    "MalformedIdentifier",
    "NotFound",
    "RemoteError",
    "SerializationError",
    "TransportError",
    "UnknownCapability",
]
