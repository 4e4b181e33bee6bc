"""Tests for the RPC dispatcher."""

from __future__ import annotations

import logging
from dataclasses import FrozenInstanceError
from typing import Any

import pytest

from holorea_graphql.connection.dispatcher import RpcCall, ZomeDispatcher, map_zome_fn
from holorea_graphql.errors import (
    ConfigurationError,
    RemoteError,
    SerializationError,
    TransportError,
    UnknownCapability,
)
from holorea_graphql.identifiers import ModuleAddress
from holorea_graphql.registry import ModuleRegistry
from holorea_graphql.types import AgentRecord, AgentResponse, ReadParams

CONDUCTOR_URI = "http://127.0.0.1:4000"

# =============================================================================
# Binding
# =============================================================================


class TestBind:
    """Tests for binding zome functions."""

    def test_bind_is_pure(
        self, dispatcher: ZomeDispatcher, transport: Any, agent_module: ModuleAddress
    ) -> None:
        """Test binding performs no transport call."""
        call = dispatcher.bind(CONDUCTOR_URI, agent_module, "agent", "get_agent")
        assert isinstance(call, RpcCall)
        assert call.target == "agent/get_agent"
        assert transport.calls == []

    @pytest.mark.parametrize(
        "endpoint",
        [
            "not a url",
            "ws://127.0.0.1:4000",
            "ftp://conductor",
            "http://",
            "127.0.0.1:4000",
        ],
    )
    def test_bind_rejects_bad_endpoint(
        self, dispatcher: ZomeDispatcher, agent_module: ModuleAddress, endpoint: str
    ) -> None:
        """Test malformed or unsupported endpoints fail configuration."""
        with pytest.raises(ConfigurationError):
            dispatcher.bind(endpoint, agent_module, "agent", "get_agent")

    def test_bound_call_is_frozen(
        self, dispatcher: ZomeDispatcher, agent_module: ModuleAddress
    ) -> None:
        """Test a bound call cannot be rebound."""
        call = dispatcher.bind(CONDUCTOR_URI, agent_module, "agent", "get_agent")
        with pytest.raises(FrozenInstanceError):
            call.function_name = "delete_agent"  # type: ignore[misc]

    def test_map_zome_fn_uses_primary(
        self,
        dispatcher: ZomeDispatcher,
        agent_module: ModuleAddress,
        other_module: ModuleAddress,
    ) -> None:
        """Test map_zome_fn binds against the primary module."""
        registry = ModuleRegistry.from_mapping({"agent": [agent_module, other_module]})
        call = map_zome_fn(dispatcher, registry, CONDUCTOR_URI, "agent", "agent", "get_my_agent")
        assert call.module_address == agent_module

    def test_map_zome_fn_unknown_capability(
        self, dispatcher: ZomeDispatcher, registry: ModuleRegistry
    ) -> None:
        """Test binding an unconfigured module fails with UnknownCapability."""
        with pytest.raises(UnknownCapability):
            map_zome_fn(dispatcher, registry, CONDUCTOR_URI, "planning", "commitment", "get")


# =============================================================================
# Invocation
# =============================================================================


class TestInvoke:
    """Tests for invoking bound calls."""

    async def test_serializes_params_and_parses_result(
        self, dispatcher: ZomeDispatcher, transport: Any, agent_module: ModuleAddress
    ) -> None:
        """Test params go out as JSON and the result is validated."""
        transport.handlers["get_agent"] = lambda params, module: {
            "agent": {"id": params["address"], "name": "Bob"}
        }
        call = dispatcher.bind(
            CONDUCTOR_URI,
            agent_module,
            "agent",
            "get_agent",
            params_type=ReadParams,
            result_type=AgentResponse,
        )

        response = await call(ReadParams(address="localB"))

        assert isinstance(response, AgentResponse)
        assert response.agent == AgentRecord(id="localB", name="Bob")
        assert transport.calls == [
            {
                "endpoint": CONDUCTOR_URI,
                "module_address": agent_module,
                "capability": "agent",
                "function": "get_agent",
                "params": {"address": "localB"},
            }
        ]

    async def test_no_params_sends_null(
        self, dispatcher: ZomeDispatcher, transport: Any, agent_module: ModuleAddress
    ) -> None:
        """Test zero-argument calls send JSON null."""
        transport.handlers["get_my_agent"] = lambda params, module: {"id": "a", "name": "Alice"}
        call = dispatcher.bind(
            CONDUCTOR_URI, agent_module, "agent", "get_my_agent", result_type=AgentRecord
        )

        await call.invoke(None)

        assert transport.calls[0]["params"] is None

    async def test_params_mismatch(
        self, dispatcher: ZomeDispatcher, transport: Any, agent_module: ModuleAddress
    ) -> None:
        """Test params that do not fit fail before any transport call."""
        call = dispatcher.bind(
            CONDUCTOR_URI, agent_module, "agent", "get_agent", params_type=ReadParams
        )

        with pytest.raises(SerializationError) as exc_info:
            await call({"wrong": 1})

        assert exc_info.value.target == "agent/get_agent"
        assert transport.calls == []

    async def test_result_mismatch_logged_as_defect(
        self,
        dispatcher: ZomeDispatcher,
        transport: Any,
        agent_module: ModuleAddress,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test a result of the wrong shape is a logged SerializationError."""
        transport.handlers["get_agent"] = lambda params, module: {"agent": {"nickname": "Bob"}}
        call = dispatcher.bind(
            CONDUCTOR_URI,
            agent_module,
            "agent",
            "get_agent",
            params_type=ReadParams,
            result_type=AgentResponse,
        )

        with caplog.at_level(logging.ERROR, logger="holorea"):
            with pytest.raises(SerializationError) as exc_info:
                await call(ReadParams(address="localB"))

        assert exc_info.value.module == str(agent_module)
        assert "errors" in exc_info.value.details
        assert any("contract mismatch" in r.getMessage() for r in caplog.records)

    async def test_transport_error_propagates(
        self, dispatcher: ZomeDispatcher, transport: Any, agent_module: ModuleAddress
    ) -> None:
        """Test transport failures propagate unchanged and are not retried."""
        error = TransportError("Call timed out after 30.0s")

        def fail(params: Any, module: ModuleAddress) -> Any:
            raise error

        transport.handlers["get_my_agent"] = fail
        call = dispatcher.bind(CONDUCTOR_URI, agent_module, "agent", "get_my_agent")

        with pytest.raises(TransportError) as exc_info:
            await call(None)

        assert exc_info.value is error
        assert len(transport.calls) == 1

    async def test_remote_error_propagates(
        self, dispatcher: ZomeDispatcher, transport: Any, agent_module: ModuleAddress
    ) -> None:
        """Test remote failures surface verbatim."""

        def fail(params: Any, module: ModuleAddress) -> Any:
            raise RemoteError("Agent name is required", remote_type="validation")

        transport.handlers["create_agent"] = fail
        call = dispatcher.bind(CONDUCTOR_URI, agent_module, "agent", "create_agent")

        with pytest.raises(RemoteError, match="Agent name is required"):
            await call(None)
