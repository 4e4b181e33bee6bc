"""Tests for the module registry."""

from __future__ import annotations

import pytest

from holorea_graphql.config import BridgeConfig
from holorea_graphql.errors import ConfigurationError, UnknownCapability
from holorea_graphql.identifiers import ModuleAddress
from holorea_graphql.registry import ModuleRegistry


class TestFromMapping:
    """Tests for building a registry from configuration data."""

    def test_parses_serialized_addresses(
        self, agent_module: ModuleAddress, other_module: ModuleAddress
    ) -> None:
        """Test serialized addresses are parsed, order preserved."""
        registry = ModuleRegistry.from_mapping({"agent": [str(agent_module), str(other_module)]})
        assert registry.addresses("agent") == (agent_module, other_module)

    def test_accepts_parsed_addresses(self, agent_module: ModuleAddress) -> None:
        """Test ModuleAddress values are used as-is."""
        registry = ModuleRegistry.from_mapping({"agent": [agent_module]})
        assert registry.primary_address("agent") is agent_module

    def test_invalid_address(self) -> None:
        """Test an unparsable address fails configuration."""
        with pytest.raises(ConfigurationError) as exc_info:
            ModuleRegistry.from_mapping({"agent": ["not-an-address"]})
        assert exc_info.value.capability == "agent"
        assert exc_info.value.details == {"address": "not-an-address"}

    def test_required_missing(self, agent_module: ModuleAddress) -> None:
        """Test a required capability that is absent fails configuration."""
        with pytest.raises(ConfigurationError) as exc_info:
            ModuleRegistry.from_mapping({"agent": [agent_module]}, required=["agent", "planning"])
        assert exc_info.value.details == {"missing": ["planning"]}

    def test_required_empty(self) -> None:
        """Test a required capability with no addresses fails configuration."""
        with pytest.raises(ConfigurationError, match="agent"):
            ModuleRegistry.from_mapping({"agent": []}, required=["agent"])

    def test_from_config(self, agent_module: ModuleAddress) -> None:
        """Test building from BridgeConfig honours required_modules."""
        config = BridgeConfig(
            conductor_uri="http://127.0.0.1:4000",
            modules={"agent": [str(agent_module)]},
        )
        registry = ModuleRegistry.from_config(config)
        assert registry.primary_address("agent") == agent_module

        with pytest.raises(ConfigurationError):
            ModuleRegistry.from_config(BridgeConfig(conductor_uri="http://127.0.0.1:4000"))


class TestLookup:
    """Tests for registry lookups."""

    def test_primary_is_first(
        self, agent_module: ModuleAddress, other_module: ModuleAddress
    ) -> None:
        """Test the first configured address is primary."""
        registry = ModuleRegistry.from_mapping({"agent": [other_module, agent_module]})
        assert registry.primary_address("agent") == other_module

    def test_unregistered_capability(self, registry: ModuleRegistry) -> None:
        """Test unknown capabilities fail with UnknownCapability."""
        with pytest.raises(UnknownCapability) as exc_info:
            registry.primary_address("unregistered-capability")
        assert exc_info.value.capability == "unregistered-capability"

        with pytest.raises(UnknownCapability):
            registry.addresses("unregistered-capability")

    def test_empty_capability_has_no_primary(self) -> None:
        """Test a capability configured with no addresses has no primary."""
        registry = ModuleRegistry.from_mapping({"observation": []})
        assert registry.addresses("observation") == ()
        with pytest.raises(UnknownCapability):
            registry.primary_address("observation")

    def test_owns(
        self, registry: ModuleRegistry, agent_module: ModuleAddress, other_module: ModuleAddress
    ) -> None:
        """Test owns checks membership per capability."""
        assert registry.owns("agent", agent_module)
        assert not registry.owns("agent", other_module)
        assert not registry.owns("planning", agent_module)

    def test_container_protocol(self, registry: ModuleRegistry) -> None:
        """Test membership, iteration and length."""
        assert "agent" in registry
        assert "planning" not in registry
        assert 42 not in registry
        assert list(registry) == ["agent"]
        assert len(registry) == 1
        assert registry.capabilities == ("agent",)

    def test_read_only(self, registry: ModuleRegistry) -> None:
        """Test the registry cannot be mutated after construction."""
        with pytest.raises(AttributeError):
            registry.extra = {}  # type: ignore[attr-defined]
        with pytest.raises(TypeError):
            registry._modules["planning"] = ()  # type: ignore[index]
