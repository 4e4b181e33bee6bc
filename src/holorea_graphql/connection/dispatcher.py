"""
RPC dispatcher.

Binds (endpoint, module, capability, function) once at startup and hands
out typed callables that resolvers invoke per request:

    dispatcher = ZomeDispatcher(HttpConductorTransport())
    read_agent = map_zome_fn(
        dispatcher, registry, "http://127.0.0.1:4000",
        "agent", "agent", "get_agent",
        params_type=ReadParams, result_type=AgentResponse,
    )
    response = await read_agent(ReadParams(address=local_address))

Binding performs no I/O. Bound calls carry no mutable state, so the same
RpcCall can be awaited from any number of concurrent resolvers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from holorea_graphql.errors import (
    ConfigurationError,
    RemoteError,
    SerializationError,
    TransportError,
)
from holorea_graphql.logging import get_logger, log_with_context

if TYPE_CHECKING:
    from holorea_graphql.connection.transport import ConductorTransport
    from holorea_graphql.identifiers import ModuleAddress
    from holorea_graphql.registry import ModuleRegistry

logger = get_logger("RPC")

P = TypeVar("P")
R = TypeVar("R")


@dataclass(frozen=True)
class RpcCall(Generic[P, R]):
    """A zome function bound to one module at one conductor.

    Attributes:
        endpoint: Conductor endpoint
        module_address: Module instance the function lives in
        capability: Zome name
        function_name: Zome function name
        transport: Transport delivering the call
        params_adapter: Validates and serializes call params
        result_adapter: Validates and deserializes the result
    """

    endpoint: str
    module_address: ModuleAddress
    capability: str
    function_name: str
    transport: ConductorTransport = field(repr=False, compare=False)
    params_adapter: TypeAdapter[Any] = field(repr=False, compare=False)
    result_adapter: TypeAdapter[Any] = field(repr=False, compare=False)

    @property
    def target(self) -> str:
        return f"{self.capability}/{self.function_name}"

    def _coordinates(self) -> dict[str, Any]:
        return {
            "module": str(self.module_address),
            "capability": self.capability,
            "function": self.function_name,
        }

    async def invoke(self, params: P) -> R:
        """
        Serialize params (nulls omitted), call the zome function and parse its result.

        Raises:
            TransportError: connection trouble or timeout; safe to retry
            RemoteError: the zome function reported a failure
            SerializationError: params or result did not fit their types
        """
        try:
            payload = self.params_adapter.dump_json(
                self.params_adapter.validate_python(params), exclude_none=True
            )
        except ValidationError as e:
            self._log_defect("params", e)
            raise SerializationError(
                f"Params for {self.target} do not match the expected shape",
                details={"errors": e.errors(include_url=False)},
                **self._coordinates(),
            ) from e

        log_with_context(logger, logging.DEBUG, f"-> {self.target}", endpoint=self.endpoint)

        try:
            raw = await self.transport.call(
                self.endpoint,
                self.module_address,
                self.capability,
                self.function_name,
                payload,
            )
        except TransportError as e:
            log_with_context(
                logger,
                logging.WARNING,
                f"{self.target} transport failure: {e.args[0]}",
                endpoint=self.endpoint,
                status_code=e.status_code,
            )
            raise
        except RemoteError as e:
            log_with_context(
                logger,
                logging.INFO,
                f"{self.target} remote failure: {e.args[0]}",
                endpoint=self.endpoint,
                remote_type=e.remote_type,
            )
            raise

        try:
            result: R = self.result_adapter.validate_json(raw)
        except ValidationError as e:
            self._log_defect("result", e)
            raise SerializationError(
                f"Result of {self.target} does not match the expected shape",
                details={"errors": e.errors(include_url=False)},
                **self._coordinates(),
            ) from e

        return result

    async def __call__(self, params: P) -> R:
        return await self.invoke(params)

    def _log_defect(self, part: str, error: ValidationError) -> None:
        log_with_context(
            logger,
            logging.ERROR,
            f"{self.target} {part} contract mismatch",
            endpoint=self.endpoint,
            module=str(self.module_address),
            errors=error.errors(include_url=False, include_input=False),
        )


class ZomeDispatcher:
    """
    Produces bound RpcCalls over one transport.

    The dispatcher itself is stateless beyond the transport reference.
    """

    def __init__(self, transport: ConductorTransport) -> None:
        self.transport = transport

    def validate_endpoint(self, endpoint: str) -> str:
        """Check an endpoint is a URL this dispatcher's transport can reach.

        Raises:
            ConfigurationError: malformed or unsupported endpoint
        """
        try:
            url = httpx.URL(endpoint)
        except (httpx.InvalidURL, TypeError) as e:
            raise ConfigurationError(f"Malformed conductor endpoint '{endpoint}': {e}") from e

        if url.scheme not in self.transport.schemes:
            supported = ", ".join(sorted(self.transport.schemes))
            raise ConfigurationError(
                f"Unsupported conductor endpoint scheme '{url.scheme}' (supported: {supported})",
                details={"endpoint": endpoint},
            )
        if not url.host:
            raise ConfigurationError(
                f"Conductor endpoint '{endpoint}' has no host", details={"endpoint": endpoint}
            )
        return endpoint

    def bind(
        self,
        endpoint: str,
        module_address: ModuleAddress,
        capability: str,
        function_name: str,
        *,
        params_type: Any = type(None),
        result_type: Any = Any,
    ) -> RpcCall[Any, Any]:
        """
        Bind a zome function.

        Args:
            endpoint: Conductor endpoint URL
            module_address: Module instance to call into
            capability: Zome name
            function_name: Zome function name
            params_type: Type the call params are validated against
            result_type: Type the result is validated against

        Returns:
            Reusable RpcCall

        Raises:
            ConfigurationError: malformed endpoint
        """
        self.validate_endpoint(endpoint)
        return RpcCall(
            endpoint=endpoint,
            module_address=module_address,
            capability=capability,
            function_name=function_name,
            transport=self.transport,
            params_adapter=TypeAdapter(params_type),
            result_adapter=TypeAdapter(result_type),
        )


def map_zome_fn(
    dispatcher: ZomeDispatcher,
    registry: ModuleRegistry,
    endpoint: str,
    module_name: str,
    capability: str,
    function_name: str,
    *,
    params_type: Any = type(None),
    result_type: Any = Any,
) -> RpcCall[Any, Any]:
    """
    Bind a zome function on the primary module configured for module_name.

    Raises:
        UnknownCapability: module_name is not in the registry
        ConfigurationError: malformed endpoint
    """
    return dispatcher.bind(
        endpoint,
        registry.primary_address(module_name),
        capability,
        function_name,
        params_type=params_type,
        result_type=result_type,
    )


__all__ = ["RpcCall", "ZomeDispatcher", "map_zome_fn"]
