"""
Module registry.

Maps capability names (e.g. "agent") to the module addresses deployed for
them at one conductor. Built once at startup and read-only afterwards, so
it can be shared by any number of concurrent resolver invocations.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from holorea_graphql.errors import ConfigurationError, MalformedIdentifier, UnknownCapability
from holorea_graphql.identifiers import ModuleAddress

if TYPE_CHECKING:
    from holorea_graphql.config import BridgeConfig


class ModuleRegistry:
    """
    Capability name -> ordered module addresses.

    The first address configured for a capability is its primary instance,
    used when minting GlobalIds for records that capability returns.

    Example:
        registry = ModuleRegistry.from_mapping({"agent": ["uhC0k..."]})
        registry.primary_address("agent")
    """

    __slots__ = ("_modules",)

    def __init__(self, modules: Mapping[str, Iterable[ModuleAddress]]) -> None:
        self._modules: Mapping[str, tuple[ModuleAddress, ...]] = MappingProxyType(
            {name: tuple(addresses) for name, addresses in modules.items()}
        )

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, Iterable[str | ModuleAddress]],
        required: Iterable[str] = (),
    ) -> ModuleRegistry:
        """
        Build a registry from static configuration.

        Args:
            mapping: Capability name -> module addresses (serialized or parsed)
            required: Capabilities that must have at least one address

        Raises:
            ConfigurationError: an address is invalid or a required capability
                has nothing configured
        """
        modules: dict[str, tuple[ModuleAddress, ...]] = {}
        for name, addresses in mapping.items():
            parsed: list[ModuleAddress] = []
            for address in addresses:
                if isinstance(address, ModuleAddress):
                    parsed.append(address)
                    continue
                try:
                    parsed.append(ModuleAddress.parse(address))
                except MalformedIdentifier as e:
                    raise ConfigurationError(
                        f"Invalid module address for '{name}': {e.args[0]}",
                        capability=name,
                        details={"address": address},
                    ) from e
            modules[name] = tuple(parsed)

        missing = [name for name in required if not modules.get(name)]
        if missing:
            raise ConfigurationError(
                f"No module address configured for: {', '.join(sorted(missing))}",
                details={"missing": missing},
            )

        return cls(modules)

    @classmethod
    def from_config(cls, config: BridgeConfig) -> ModuleRegistry:
        """Build a registry from the [bridge.modules] table."""
        return cls.from_mapping(config.modules, required=config.required_modules)

    @property
    def capabilities(self) -> tuple[str, ...]:
        """Configured capability names (including ones with no address)."""
        return tuple(self._modules)

    def addresses(self, capability: str) -> tuple[ModuleAddress, ...]:
        """All addresses for a capability, primary first."""
        try:
            return self._modules[capability]
        except KeyError:
            raise UnknownCapability(capability) from None

    def primary_address(self, capability: str) -> ModuleAddress:
        """The primary module address for a capability.

        Raises:
            UnknownCapability: capability absent or has no address
        """
        addresses = self._modules.get(capability)
        if not addresses:
            raise UnknownCapability(capability)
        return addresses[0]

    def owns(self, capability: str, module_address: ModuleAddress) -> bool:
        """Whether module_address is one of the capability's instances."""
        return module_address in self._modules.get(capability, ())

    def __contains__(self, capability: object) -> bool:
        return isinstance(capability, str) and bool(self._modules.get(capability))

    def __iter__(self) -> Iterator[str]:
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)

    def __repr__(self) -> str:
        summary = ", ".join(f"{name}={len(addrs)}" for name, addrs in self._modules.items())
        return f"ModuleRegistry({summary})"


__all__ = ["ModuleRegistry"]
