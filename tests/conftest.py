"""Shared pytest fixtures for holorea-graphql tests."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import pytest

from holorea_graphql.connection.dispatcher import ZomeDispatcher
from holorea_graphql.identifiers import MODULE_ADDRESS_LENGTH, ModuleAddress
from holorea_graphql.registry import ModuleRegistry

CONDUCTOR_URI = "http://127.0.0.1:4000"

# Conductor DNA hash type prefix
DNA_PREFIX = bytes([0x84, 0x2D, 0x24])

Handler = Callable[[Any, ModuleAddress], Any]


def make_module_address(seed: int) -> ModuleAddress:
    """Deterministic module address distinct per seed."""
    body = bytes((seed + i) % 256 for i in range(MODULE_ADDRESS_LENGTH - len(DNA_PREFIX)))
    return ModuleAddress(DNA_PREFIX + body)


class StubTransport:
    """
    In-memory conductor.

    Answers calls from a handler table keyed by function name. A handler
    receives the decoded params and the module address and returns the
    JSON-serializable result, or raises a bridge error.
    """

    schemes = frozenset({"http", "https"})

    def __init__(
        self,
        handlers: dict[str, Handler] | None = None,
        latency: Callable[[], float] | None = None,
    ) -> None:
        self.handlers = handlers or {}
        self.latency = latency
        self.calls: list[dict[str, Any]] = []

    async def call(
        self,
        endpoint: str,
        module_address: ModuleAddress,
        capability: str,
        function_name: str,
        payload: bytes,
    ) -> bytes:
        params = json.loads(payload)
        self.calls.append(
            {
                "endpoint": endpoint,
                "module_address": module_address,
                "capability": capability,
                "function": function_name,
                "params": params,
            }
        )
        if self.latency is not None:
            await asyncio.sleep(self.latency())
        result = self.handlers[function_name](params, module_address)
        return json.dumps(result).encode()


@pytest.fixture
def agent_module() -> ModuleAddress:
    """Primary agent module (M1)."""
    return make_module_address(1)


@pytest.fixture
def other_module() -> ModuleAddress:
    """A second, distinct module address."""
    return make_module_address(2)


@pytest.fixture
def registry(agent_module: ModuleAddress) -> ModuleRegistry:
    """Registry with one agent module."""
    return ModuleRegistry.from_mapping({"agent": [agent_module]}, required=["agent"])


@pytest.fixture
def transport() -> StubTransport:
    """Stub transport with no handlers registered."""
    return StubTransport()


@pytest.fixture
def dispatcher(transport: StubTransport) -> ZomeDispatcher:
    return ZomeDispatcher(transport)


@pytest.fixture
def make_module() -> Callable[[int], ModuleAddress]:
    """Factory for distinct module addresses."""
    return make_module_address
