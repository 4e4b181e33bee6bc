"""
Resolver Generator - assemble the bridge's GraphQL resolvers.

Binds every zome call once against the configured modules and returns the
field-name -> resolver maps the GraphQL engine dispatches into. Resolvers
follow the `(root, args) -> awaitable` convention and do not depend on any
particular GraphQL server.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from holorea_graphql.connection.dispatcher import ZomeDispatcher
from holorea_graphql.mutations.agent import build_agent_mutations
from holorea_graphql.queries.agent import build_agent_queries
from holorea_graphql.registry import ModuleRegistry

if TYPE_CHECKING:
    from holorea_graphql.config import BridgeConfig
    from holorea_graphql.connection.transport import ConductorTransport
    from holorea_graphql.types import Resolver


class ResolverGenerator:
    """
    Generate GraphQL resolvers for the configured modules.

    Resolvers are generated for:
    - Query: myAgent, agent, agents
    - Mutation: create/update/delete for Person and Organization

    Construction fails early (ConfigurationError / UnknownCapability) when a
    module the resolvers need is not configured or the endpoint is malformed,
    so a misconfigured bridge never starts serving.
    """

    def __init__(
        self,
        registry: ModuleRegistry,
        conductor_uri: str,
        dispatcher: ZomeDispatcher,
    ) -> None:
        """
        Initialize the resolver generator.

        Args:
            registry: Capability -> module address mapping
            conductor_uri: Conductor endpoint all modules are hosted on
            dispatcher: Dispatcher producing bound zome calls
        """
        self.registry = registry
        self.conductor_uri = dispatcher.validate_endpoint(conductor_uri)
        self.dispatcher = dispatcher

    @classmethod
    def from_config(cls, config: BridgeConfig, transport: ConductorTransport) -> ResolverGenerator:
        """Build registry and dispatcher from configuration."""
        return cls(
            ModuleRegistry.from_config(config),
            config.conductor_uri,
            ZomeDispatcher(transport),
        )

    def generate_resolvers(self) -> tuple[dict[str, Resolver], dict[str, Resolver]]:
        """
        Generate all resolvers.

        Returns:
            Tuple of (query_resolvers, mutation_resolvers)
        """
        query_resolvers: dict[str, Resolver] = {}
        mutation_resolvers: dict[str, Resolver] = {}

        query_resolvers.update(
            build_agent_queries(self.dispatcher, self.registry, self.conductor_uri)
        )
        mutation_resolvers.update(
            build_agent_mutations(self.dispatcher, self.registry, self.conductor_uri)
        )

        return query_resolvers, mutation_resolvers


__all__ = ["ResolverGenerator"]
