"""Mutation resolvers, one module per zome."""

from holorea_graphql.mutations.agent import build_agent_mutations

__all__ = ["build_agent_mutations"]
