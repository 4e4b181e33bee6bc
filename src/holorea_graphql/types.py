"""
Shared record types and the type-discriminant injector.

Record models mirror the payloads the agent zome exchanges. Unknown fields
returned by a zome are kept so resolvers never drop data they do not know
about.
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

TYPENAME_KEY = "__typename"

Resolver = Callable[[Any, dict[str, Any]], Awaitable[Any]]


# =============================================================================
# Zome payloads
# =============================================================================


class ReadParams(BaseModel):
    """Params for reading one record by its module-local address."""

    address: str


class DeleteParams(BaseModel):
    """Params for deleting a record by revision."""

    revision_id: str


class AgentRecord(BaseModel):
    """An agent as the agent zome returns it."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    agent_type: str | None = None
    image: str | None = None
    classified_as: list[str] | None = None
    note: str | None = None
    revision_id: str | None = None


class AgentResponse(BaseModel):
    """Envelope returned by get_agent / create_agent / update_agent.

    `agent` is null when the link from the requested address does not resolve.
    """

    agent: AgentRecord | None = None


class AgentCreateRequest(BaseModel):
    """Fields accepted when creating an agent (snake_case or camelCase)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    agent_type: str
    image: str | None = None
    classified_as: list[str] | None = None
    note: str | None = None


class AgentUpdateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    revision_id: str
    name: str | None = None
    image: str | None = None
    classified_as: list[str] | None = None
    note: str | None = None


class CreateParams(BaseModel):
    agent: AgentCreateRequest


class UpdateParams(BaseModel):
    agent: AgentUpdateRequest


class PageParams(BaseModel):
    """Relay-style forward pagination params."""

    first: int | None = None
    after: str | None = None


class PageInfo(BaseModel):
    has_next_page: bool = False
    has_previous_page: bool = False
    start_cursor: str | None = None
    end_cursor: str | None = None


class AgentEdge(BaseModel):
    cursor: str
    node: AgentRecord


class AgentConnectionResponse(BaseModel):
    edges: list[AgentEdge] = []
    page_info: PageInfo = PageInfo()


# =============================================================================
# Type-discriminant injection
# =============================================================================


def with_typename(type_name: str, value: Any) -> dict[str, Any]:
    """Merge a concrete-type discriminant into a resolver value.

    Pydantic models are dumped (unset fields omitted); mappings are copied.
    Existing fields are kept.
    """
    if isinstance(value, BaseModel):
        data = value.model_dump(exclude_unset=True)
    elif isinstance(value, Mapping):
        data = dict(value)
    else:
        raise TypeError(f"Cannot attach a discriminant to {type(value).__name__}")
    data[TYPENAME_KEY] = type_name
    return data


def inject_typename(type_name: str, resolver: Resolver) -> Resolver:
    """
    Wrap a resolver so its result is tagged with a concrete GraphQL type.

    Used where a zome returns one concrete shape but the schema declares an
    interface. Errors raised by the resolver propagate unchanged and nothing
    is attached.

    Example:
        agent = inject_typename("Person", read_agent_resolver)
    """

    @functools.wraps(resolver)
    async def resolve(root: Any, args: dict[str, Any]) -> dict[str, Any]:
        return with_typename(type_name, await resolver(root, args))

    return resolve


__all__ = [
    "AgentConnectionResponse",
    "AgentCreateRequest",
    "AgentEdge",
    "AgentRecord",
    "AgentResponse",
    "AgentUpdateRequest",
    "CreateParams",
    "DeleteParams",
    "PageInfo",
    "PageParams",
    "ReadParams",
    "Resolver",
    "TYPENAME_KEY",
    "UpdateParams",
    "inject_typename",
    "with_typename",
]
