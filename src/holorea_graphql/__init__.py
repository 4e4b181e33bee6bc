"""
holorea-graphql: GraphQL bridge onto Holochain zome functions.

Translates GraphQL field requests into typed zome calls against the
configured modules and maps module-local addresses to global IDs.

Example:
    from holorea_graphql import load_config, create_graphql_app

    app = create_graphql_app(load_config("holorea.toml"))
"""

from holorea_graphql._version import get_version
from holorea_graphql.config import BridgeConfig, load_config
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
from holorea_graphql.identifiers import ModuleAddress, decode_global_id, encode_global_id
from holorea_graphql.integration import create_app, create_graphql_app, mount_graphql
from holorea_graphql.registry import ModuleRegistry
from holorea_graphql.resolvers import ResolverGenerator
from holorea_graphql.schema import create_schema
from holorea_graphql.types import inject_typename

__version__ = get_version()

__all__ = [
    "BridgeConfig",
    "BridgeError",
    "ConfigurationError",
    "MalformedIdentifier",
    "ModuleAddress",
    "ModuleRegistry",
    "NotFound",
    "RemoteError",
    "ResolverGenerator",
    "SerializationError",
    "TransportError",
    "UnknownCapability",
    "create_app",
    "create_graphql_app",
    "create_schema",
    "decode_global_id",
    "encode_global_id",
    "inject_typename",
    "load_config",
    "mount_graphql",
]
