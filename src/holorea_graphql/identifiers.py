"""
Identifier codec.

Converts between module-scoped addresses and the globally unique string
identifiers exposed through the GraphQL API.

A GlobalId has the shape::

    <local-address>:<module-address>

where the module address is serialized as multibase base64url (`u` prefix,
no padding). The serialized module address never contains `:`, so the
last separator splits a GlobalId unambiguously and any non-empty local
address round-trips unchanged.

Pure functions only; no I/O and no registry lookups. Whether a decoded
module address is one the caller actually serves is the caller's check.
"""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass

from holorea_graphql.errors import MalformedIdentifier

MODULE_ADDRESS_LENGTH = 39
MULTIBASE_PREFIX = "u"
ID_SEPARATOR = ":"

_BASE64URL = re.compile(r"^[A-Za-z0-9_-]+$")


def serialize_hash(raw: bytes) -> str:
    """Serialize binary hash data as multibase base64url."""
    return MULTIBASE_PREFIX + base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def deserialize_hash(value: str) -> bytes:
    """Parse a multibase base64url string back into bytes.

    Raises:
        MalformedIdentifier: prefix, alphabet or padding is wrong
    """
    if not value.startswith(MULTIBASE_PREFIX):
        raise MalformedIdentifier(
            f"Expected '{MULTIBASE_PREFIX}' multibase prefix", identifier=value
        )
    body = value[len(MULTIBASE_PREFIX) :]
    if not _BASE64URL.match(body) or len(body) % 4 == 1:
        raise MalformedIdentifier("Invalid base64url encoding", identifier=value)

    raw = base64.urlsafe_b64decode(body + "=" * (-len(body) % 4))
    # Reject non-canonical spellings so decoding stays injective
    if serialize_hash(raw) != value:
        raise MalformedIdentifier("Non-canonical base64url encoding", identifier=value)
    return raw


@dataclass(frozen=True, order=True)
class ModuleAddress:
    """Address of one deployed module instance (a DNA hash).

    Attributes:
        raw: Fixed-length binary address
    """

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, bytes):
            raise TypeError("ModuleAddress requires bytes")
        if len(self.raw) != MODULE_ADDRESS_LENGTH:
            raise ValueError(
                f"ModuleAddress must be {MODULE_ADDRESS_LENGTH} bytes, got {len(self.raw)}"
            )

    @classmethod
    def parse(cls, value: str) -> ModuleAddress:
        """Parse a serialized module address.

        Raises:
            MalformedIdentifier: not a serialized module address
        """
        raw = deserialize_hash(value)
        if len(raw) != MODULE_ADDRESS_LENGTH:
            raise MalformedIdentifier(
                f"Module address must decode to {MODULE_ADDRESS_LENGTH} bytes",
                identifier=value,
            )
        return cls(raw)

    def __str__(self) -> str:
        return serialize_hash(self.raw)

    def __repr__(self) -> str:
        return f"ModuleAddress({self})"


def encode_global_id(module_address: ModuleAddress, local_address: str) -> str:
    """Build the GlobalId for a module-local address."""
    if not local_address:
        raise ValueError("local_address must not be empty")
    return f"{local_address}{ID_SEPARATOR}{module_address}"


def decode_global_id(global_id: str) -> tuple[ModuleAddress, str]:
    """Split a GlobalId into its module address and local address.

    Raises:
        MalformedIdentifier: the value was not produced by encode_global_id
    """
    if not isinstance(global_id, str):
        raise MalformedIdentifier("Identifier must be a string")

    local_address, sep, module_part = global_id.rpartition(ID_SEPARATOR)
    if not sep:
        raise MalformedIdentifier("Identifier has no module component", identifier=global_id)
    if not local_address:
        raise MalformedIdentifier("Identifier has an empty local address", identifier=global_id)

    try:
        module_address = ModuleAddress.parse(module_part)
    except MalformedIdentifier as e:
        raise MalformedIdentifier(
            f"Identifier has an invalid module component: {e.args[0]}",
            identifier=global_id,
        ) from e
    return module_address, local_address


__all__ = [
    "ID_SEPARATOR",
    "MODULE_ADDRESS_LENGTH",
    "ModuleAddress",
    "decode_global_id",
    "deserialize_hash",
    "encode_global_id",
    "serialize_hash",
]
