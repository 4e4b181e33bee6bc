"""
Conductor connection layer.

Binds zome functions into typed calls and carries them to a conductor.
"""

from holorea_graphql.connection.dispatcher import RpcCall, ZomeDispatcher, map_zome_fn
from holorea_graphql.connection.errors import (
    ErrorCategory,
    ErrorSeverity,
    NormalizedError,
    normalize_error,
)
from holorea_graphql.connection.transport import ConductorTransport, HttpConductorTransport

__all__ = [
    "ConductorTransport",
    "ErrorCategory",
    "ErrorSeverity",
    "HttpConductorTransport",
    "NormalizedError",
    "RpcCall",
    "ZomeDispatcher",
    "map_zome_fn",
    "normalize_error",
]
