"""Query resolvers, one module per zome."""

from holorea_graphql.queries.agent import build_agent_queries

__all__ = ["build_agent_queries"]
