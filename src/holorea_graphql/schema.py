"""
Strawberry schema for the bridge.

Declares the Agent interface with its Person and Organization
implementations and builds Query/Mutation roots that delegate to the
framework-agnostic resolvers produced by ResolverGenerator. Resolver values
are plain dicts; the `__typename` discriminant picks the concrete type.
"""

import dataclasses
import logging
from collections.abc import Callable
from typing import Any

import strawberry
from graphql import GraphQLError

from holorea_graphql.connection.errors import ErrorSeverity, normalize_error
from holorea_graphql.errors import BridgeError, NotFound, SerializationError
from holorea_graphql.logging import get_logger, log_with_context
from holorea_graphql.types import TYPENAME_KEY, Resolver

logger = get_logger("GraphQL")

# myAgent carries no discriminant; the caller is assumed to act as a person
DEFAULT_AGENT_TYPE = "Person"

_SEVERITY_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


# =============================================================================
# Types
# =============================================================================


@strawberry.interface(description="A person or group that can take part in economic activity")
class Agent:
    id: strawberry.ID
    name: str
    image: str | None = None
    classified_as: list[str] | None = None
    note: str | None = None
    revision_id: str | None = None


@strawberry.type(description="A natural person")
class Person(Agent):
    pass


@strawberry.type(description="An organization or group of agents")
class Organization(Agent):
    pass


AGENT_TYPES: dict[str, type[Agent]] = {"Person": Person, "Organization": Organization}


@strawberry.type
class PageInfo:
    has_next_page: bool = False
    has_previous_page: bool = False
    start_cursor: str | None = None
    end_cursor: str | None = None


@strawberry.type
class AgentEdge:
    cursor: str
    node: Agent


@strawberry.type
class AgentConnection:
    edges: list[AgentEdge]
    page_info: PageInfo


@strawberry.input
class AgentCreateParams:
    name: str
    image: str | None = None
    classified_as: list[str] | None = None
    note: str | None = None


@strawberry.input
class AgentUpdateParams:
    revision_id: strawberry.ID
    name: str | None = None
    image: str | None = None
    classified_as: list[str] | None = None
    note: str | None = None


# =============================================================================
# Conversion helpers
# =============================================================================


def to_agent(data: dict[str, Any]) -> Agent:
    """Build the concrete Agent type named by the value's discriminant."""
    type_name = data.get(TYPENAME_KEY, DEFAULT_AGENT_TYPE)
    agent_cls = AGENT_TYPES.get(type_name)
    if agent_cls is None:
        raise SerializationError(f"Unknown agent type '{type_name}'")
    try:
        return agent_cls(
            id=strawberry.ID(data["id"]),
            name=data["name"],
            image=data.get("image"),
            classified_as=data.get("classified_as"),
            note=data.get("note"),
            revision_id=data.get("revision_id"),
        )
    except KeyError as e:
        raise SerializationError(f"Agent value is missing '{e.args[0]}'") from e


def to_connection(data: dict[str, Any]) -> AgentConnection:
    return AgentConnection(
        edges=[
            AgentEdge(cursor=edge["cursor"], node=to_agent(edge["node"])) for edge in data["edges"]
        ],
        page_info=PageInfo(**data.get("page_info", {})),
    )


def _input_to_dict(input_obj: Any, exclude_none: bool = False) -> dict[str, Any]:
    """Convert a Strawberry input object to a dictionary."""
    data = dataclasses.asdict(input_obj)
    if exclude_none:
        data = {k: v for k, v in data.items() if v is not None}
    return data


def _request_id(info: strawberry.Info) -> str | None:
    context = info.context
    if isinstance(context, dict):
        return context.get("request_id")
    return getattr(context, "request_id", None)


def to_graphql_error(error: BridgeError, info: strawberry.Info) -> GraphQLError:
    """Normalize a bridge error into a GraphQL error with extensions."""
    normalized = normalize_error(error, request_id=_request_id(info))
    log_with_context(
        logger,
        _SEVERITY_LEVELS[normalized.severity],
        f"{info.field_name} failed: {normalized.developer_message}",
        normalized.to_log_dict(),
    )
    return GraphQLError(
        normalized.user_message,
        extensions=normalized.to_graphql_extensions(),
        original_error=error,
    )


async def _run(
    resolver: Resolver,
    info: strawberry.Info,
    args: dict[str, Any],
    convert: Callable[[Any], Any] = to_agent,
) -> Any:
    try:
        return convert(await resolver(None, args))
    except BridgeError as e:
        raise to_graphql_error(e, info) from e


# =============================================================================
# Roots
# =============================================================================


def _create_query_type(query_resolvers: dict[str, Resolver]) -> type:
    """Create the Query type over the agent query resolvers."""
    resolve_my_agent = query_resolvers["myAgent"]
    resolve_agent = query_resolvers["agent"]
    resolve_agents = query_resolvers["agents"]

    @strawberry.type
    class Query:
        @strawberry.field(description="The agent the current caller acts as")
        async def my_agent(self, info: strawberry.Info) -> Agent:
            return await _run(resolve_my_agent, info, {})

        @strawberry.field(description="Get an agent by ID; null when it does not resolve")
        async def agent(self, info: strawberry.Info, id: strawberry.ID) -> Agent | None:
            try:
                return to_agent(await resolve_agent(None, {"id": id}))
            except NotFound:
                return None
            except BridgeError as e:
                raise to_graphql_error(e, info) from e

        @strawberry.field(description="List known agents")
        async def agents(
            self,
            info: strawberry.Info,
            first: int | None = None,
            after: str | None = None,
        ) -> AgentConnection:
            args = {"first": first, "after": after}
            return await _run(resolve_agents, info, args, convert=to_connection)

    return Query


def _create_mutation_type(mutation_resolvers: dict[str, Resolver]) -> type:
    """Create the Mutation type over the agent mutation resolvers."""
    resolvers = mutation_resolvers

    @strawberry.type
    class Mutation:
        @strawberry.mutation(description="Register a person")
        async def create_person(self, info: strawberry.Info, person: AgentCreateParams) -> Agent:
            args = {"person": _input_to_dict(person, exclude_none=True)}
            return await _run(resolvers["createPerson"], info, args)

        @strawberry.mutation(description="Register an organization")
        async def create_organization(
            self, info: strawberry.Info, organization: AgentCreateParams
        ) -> Agent:
            args = {"organization": _input_to_dict(organization, exclude_none=True)}
            return await _run(resolvers["createOrganization"], info, args)

        @strawberry.mutation(description="Update a person")
        async def update_person(self, info: strawberry.Info, person: AgentUpdateParams) -> Agent:
            args = {"person": _input_to_dict(person, exclude_none=True)}
            return await _run(resolvers["updatePerson"], info, args)

        @strawberry.mutation(description="Update an organization")
        async def update_organization(
            self, info: strawberry.Info, organization: AgentUpdateParams
        ) -> Agent:
            args = {"organization": _input_to_dict(organization, exclude_none=True)}
            return await _run(resolvers["updateOrganization"], info, args)

        @strawberry.mutation(description="Delete a person by revision")
        async def delete_person(self, info: strawberry.Info, revision_id: strawberry.ID) -> bool:
            args = {"revisionId": revision_id}
            return await _run(resolvers["deletePerson"], info, args, convert=bool)

        @strawberry.mutation(description="Delete an organization by revision")
        async def delete_organization(
            self, info: strawberry.Info, revision_id: strawberry.ID
        ) -> bool:
            args = {"revisionId": revision_id}
            return await _run(resolvers["deleteOrganization"], info, args, convert=bool)

    return Mutation


def create_schema(
    query_resolvers: dict[str, Resolver],
    mutation_resolvers: dict[str, Resolver],
) -> strawberry.Schema:
    """
    Create the Strawberry schema over a set of resolvers.

    Args:
        query_resolvers: Field name -> query resolver
        mutation_resolvers: Field name -> mutation resolver

    Returns:
        Strawberry Schema object
    """
    return strawberry.Schema(
        query=_create_query_type(query_resolvers),
        mutation=_create_mutation_type(mutation_resolvers),
        types=[Person, Organization],
    )


__all__ = [
    "Agent",
    "AgentConnection",
    "AgentCreateParams",
    "AgentEdge",
    "AgentUpdateParams",
    "Organization",
    "PageInfo",
    "Person",
    "create_schema",
    "to_agent",
    "to_graphql_error",
]
