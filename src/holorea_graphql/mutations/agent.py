"""
Agent mutations.

The agent zome stores people and organizations as one record type
distinguished by `agent_type`; these resolvers pin that field and tag the
result with the matching concrete GraphQL type.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from holorea_graphql.connection.dispatcher import map_zome_fn
from holorea_graphql.errors import NotFound, SerializationError
from holorea_graphql.identifiers import encode_global_id
from holorea_graphql.types import (
    AgentCreateRequest,
    AgentResponse,
    AgentUpdateRequest,
    CreateParams,
    DeleteParams,
    Resolver,
    UpdateParams,
    inject_typename,
)

if TYPE_CHECKING:
    from holorea_graphql.connection.dispatcher import ZomeDispatcher
    from holorea_graphql.registry import ModuleRegistry

AGENT_MODULE = "agent"
AGENT_ZOME = "agent"

AGENT_TYPES = {"person": "Person", "organization": "Organization"}


def build_agent_mutations(
    dispatcher: ZomeDispatcher,
    registry: ModuleRegistry,
    conductor_uri: str,
) -> dict[str, Resolver]:
    """Bind agent zome write calls and return the agent mutation resolvers."""
    run_create = map_zome_fn(
        dispatcher,
        registry,
        conductor_uri,
        AGENT_MODULE,
        AGENT_ZOME,
        "create_agent",
        params_type=CreateParams,
        result_type=AgentResponse,
    )
    run_update = map_zome_fn(
        dispatcher,
        registry,
        conductor_uri,
        AGENT_MODULE,
        AGENT_ZOME,
        "update_agent",
        params_type=UpdateParams,
        result_type=AgentResponse,
    )
    run_delete = map_zome_fn(
        dispatcher,
        registry,
        conductor_uri,
        AGENT_MODULE,
        AGENT_ZOME,
        "delete_agent",
        params_type=DeleteParams,
        result_type=bool,
    )

    agent_module = registry.primary_address(AGENT_MODULE)

    def unwrap(response: AgentResponse, function: str) -> dict[str, Any]:
        if response.agent is None:
            raise NotFound(
                "Zome returned no agent record", capability=AGENT_ZOME, function=function
            )
        data = response.agent.model_dump(exclude_unset=True)
        data["id"] = encode_global_id(agent_module, response.agent.id)
        return data

    def build_request(model: type[BaseModel], fields: Any, function: str) -> Any:
        try:
            return model.model_validate(fields)
        except ValidationError as e:
            raise SerializationError(
                f"Arguments for {AGENT_ZOME}/{function} do not match the expected shape",
                module=str(agent_module),
                capability=AGENT_ZOME,
                function=function,
                details={"errors": e.errors(include_url=False)},
            ) from e

    resolvers: dict[str, Resolver] = {}

    for arg_name, type_name in AGENT_TYPES.items():

        def make_create(arg_name: str = arg_name) -> Resolver:
            async def create(root: Any, args: dict[str, Any]) -> dict[str, Any]:
                fields = args.get(arg_name)
                if isinstance(fields, Mapping):
                    fields = {**fields, "agent_type": arg_name}
                request = build_request(AgentCreateRequest, fields, "create_agent")
                return unwrap(await run_create(CreateParams(agent=request)), "create_agent")

            return create

        def make_update(arg_name: str = arg_name) -> Resolver:
            async def update(root: Any, args: dict[str, Any]) -> dict[str, Any]:
                request = build_request(AgentUpdateRequest, args.get(arg_name), "update_agent")
                return unwrap(await run_update(UpdateParams(agent=request)), "update_agent")

            return update

        async def delete(root: Any, args: dict[str, Any]) -> bool:
            revision_id = args.get("revisionId") or args.get("revision_id")
            params = build_request(DeleteParams, {"revision_id": revision_id}, "delete_agent")
            return await run_delete(params)

        resolvers[f"create{type_name}"] = inject_typename(type_name, make_create())
        resolvers[f"update{type_name}"] = inject_typename(type_name, make_update())
        resolvers[f"delete{type_name}"] = delete

    return resolvers


__all__ = ["AGENT_TYPES", "build_agent_mutations"]
