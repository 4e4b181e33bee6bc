"""
Agent queries.

Resolvers for `myAgent`, `agent` and `agents`. Each closes over RPC calls
bound once at construction; GlobalIds are minted from the address of the
agent module a record was read from, so ids stay unique across modules.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from holorea_graphql.connection.dispatcher import map_zome_fn
from holorea_graphql.errors import MalformedIdentifier, NotFound
from holorea_graphql.identifiers import decode_global_id, encode_global_id
from holorea_graphql.types import (
    AgentConnectionResponse,
    AgentRecord,
    AgentResponse,
    PageParams,
    ReadParams,
    Resolver,
    inject_typename,
    with_typename,
)

if TYPE_CHECKING:
    from holorea_graphql.connection.dispatcher import ZomeDispatcher
    from holorea_graphql.identifiers import ModuleAddress
    from holorea_graphql.registry import ModuleRegistry

AGENT_MODULE = "agent"
AGENT_ZOME = "agent"


def build_agent_queries(
    dispatcher: ZomeDispatcher,
    registry: ModuleRegistry,
    conductor_uri: str,
) -> dict[str, Resolver]:
    """Bind agent zome calls and return the agent query resolvers."""
    read_my_agent = map_zome_fn(
        dispatcher,
        registry,
        conductor_uri,
        AGENT_MODULE,
        AGENT_ZOME,
        "get_my_agent",
        result_type=AgentRecord,
    )
    query_agents = map_zome_fn(
        dispatcher,
        registry,
        conductor_uri,
        AGENT_MODULE,
        AGENT_ZOME,
        "query_agents",
        params_type=PageParams,
        result_type=AgentConnectionResponse,
    )
    # One read call per agent module instance, so an id is always read back
    # from the module that minted it
    read_agent = {
        address: dispatcher.bind(
            conductor_uri,
            address,
            AGENT_ZOME,
            "get_agent",
            params_type=ReadParams,
            result_type=AgentResponse,
        )
        for address in registry.addresses(AGENT_MODULE)
    }

    primary_module = registry.primary_address(AGENT_MODULE)

    def to_global(record: AgentRecord, module_address: ModuleAddress) -> dict[str, Any]:
        data = record.model_dump(exclude_unset=True)
        data["id"] = encode_global_id(module_address, record.id)
        return data

    # Assumes the caller's pubkey always links to an agent record; when it
    # does not, the zome reports the failure and it surfaces as RemoteError.
    async def my_agent(root: Any, args: dict[str, Any]) -> dict[str, Any]:
        record: AgentRecord = await read_my_agent(None)
        return record.model_dump(exclude_unset=True)

    async def agent(root: Any, args: dict[str, Any]) -> dict[str, Any]:
        global_id = args.get("id")
        module_address, local_address = decode_global_id(global_id)  # type: ignore[arg-type]
        if not registry.owns(AGENT_MODULE, module_address):
            raise MalformedIdentifier(
                f"Identifier does not belong to a configured {AGENT_MODULE} module",
                identifier=global_id,
            )

        read = read_agent[module_address]
        response: AgentResponse = await read(ReadParams(address=local_address))
        if response.agent is None:
            raise NotFound(
                f"No agent at {global_id}",
                capability=AGENT_ZOME,
                function="get_agent",
                details={"id": global_id},
            )
        return to_global(response.agent, module_address)

    async def agents(root: Any, args: dict[str, Any]) -> dict[str, Any]:
        params = PageParams(first=args.get("first"), after=args.get("after"))
        response: AgentConnectionResponse = await query_agents(params)
        return {
            "edges": [
                {
                    "cursor": edge.cursor,
                    "node": with_typename("Person", to_global(edge.node, primary_module)),
                }
                for edge in response.edges
            ],
            "page_info": response.page_info.model_dump(),
        }

    return {
        "myAgent": my_agent,
        # Always tagged Person until the zome exposes the agent's concrete type
        "agent": inject_typename("Person", agent),
        "agents": agents,
    }


__all__ = ["build_agent_queries"]
