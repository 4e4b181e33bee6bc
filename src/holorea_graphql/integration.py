"""
FastAPI/Strawberry integration for the bridge.

Provides utilities for mounting the agent schema on an existing FastAPI app
or creating a standalone application from configuration.
"""

from __future__ import annotations

import uuid
from typing import Any

import strawberry
from fastapi import FastAPI, Request
from strawberry.fastapi import GraphQLRouter

from holorea_graphql._version import get_version
from holorea_graphql.config import BridgeConfig, load_config
from holorea_graphql.connection.transport import ConductorTransport, HttpConductorTransport
from holorea_graphql.logging import get_logger, setup_logging
from holorea_graphql.resolvers import ResolverGenerator
from holorea_graphql.schema import create_schema

REQUEST_ID_HEADER = "X-Request-ID"

logger = get_logger("Server")


def create_graphql_app(
    config: BridgeConfig,
    transport: ConductorTransport | None = None,
) -> FastAPI:
    """
    Create a standalone FastAPI application serving the bridge.

    Args:
        config: Bridge configuration
        transport: Conductor transport (default: HTTP transport using
            config.timeout)

    Returns:
        FastAPI application with the GraphQL endpoint and /health

    Raises:
        ConfigurationError: If the registry or endpoint is invalid

    Example:
        config = load_config("holorea.toml")
        app = create_graphql_app(config)
        # Run with: uvicorn mymodule:app
    """
    setup_logging(level=config.log_level, log_dir=config.log_dir)

    transport = transport or HttpConductorTransport(timeout=config.timeout)
    generator = ResolverGenerator.from_config(config, transport)
    query_resolvers, mutation_resolvers = generator.generate_resolvers()
    schema = create_schema(query_resolvers, mutation_resolvers)

    app = FastAPI(
        title="Holo-REA GraphQL API",
        description="GraphQL bridge onto Holo-REA agent modules",
        version=get_version(),
    )
    mount_graphql(app, schema, path=config.graphql_path, enable_graphiql=config.enable_graphiql)

    capabilities = list(generator.registry.capabilities)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "healthy",
            "version": get_version(),
            "conductor": generator.conductor_uri,
            "capabilities": capabilities,
        }

    logger.info(
        f"GraphQL bridge ready at {config.graphql_path} "
        f"(conductor {generator.conductor_uri}, {len(capabilities)} capabilities)"
    )
    return app


def mount_graphql(
    app: FastAPI,
    schema: strawberry.Schema,
    path: str = "/graphql",
    enable_graphiql: bool = True,
) -> None:
    """
    Mount a GraphQL endpoint on an existing FastAPI application.

    Each request's context carries `request_id`, taken from the
    X-Request-ID header or generated.

    Example:
        app = FastAPI()
        # ... your existing routes ...

        mount_graphql(app, schema)
        # GraphQL available at /graphql
    """

    async def get_context(request: Request) -> dict[str, Any]:
        return {"request_id": request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())}

    graphql_router = GraphQLRouter(
        schema,
        graphql_ide="graphiql" if enable_graphiql else None,
        context_getter=get_context,
    )
    app.include_router(graphql_router, prefix=path)


def create_app() -> FastAPI:
    """Application factory reading configuration from the environment.

    Run with: uvicorn holorea_graphql.integration:create_app --factory
    """
    return create_graphql_app(load_config())


__all__ = ["create_app", "create_graphql_app", "mount_graphql"]
