"""Tests for the identifier codec."""

from __future__ import annotations

import random
from collections.abc import Callable

import pytest

from holorea_graphql.errors import MalformedIdentifier
from holorea_graphql.identifiers import (
    MODULE_ADDRESS_LENGTH,
    ModuleAddress,
    decode_global_id,
    deserialize_hash,
    encode_global_id,
    serialize_hash,
)

# =============================================================================
# Hash serialization
# =============================================================================


class TestSerializeHash:
    """Tests for multibase base64url serialization."""

    def test_prefix_and_no_padding(self) -> None:
        """Test serialized hashes carry the u prefix and no padding."""
        value = serialize_hash(b"\x00\x01")
        assert value.startswith("u")
        assert "=" not in value

    def test_round_trip(self) -> None:
        """Test deserialize inverts serialize."""
        raw = bytes(range(40))
        assert deserialize_hash(serialize_hash(raw)) == raw

    def test_url_safe_alphabet(self) -> None:
        """Test bytes that need + and / in standard base64 use - and _."""
        value = serialize_hash(b"\xfb\xff")
        assert "-" in value or "_" in value
        assert "+" not in value and "/" not in value

    @pytest.mark.parametrize(
        "value",
        [
            "zAAAA",  # wrong multibase prefix
            "AAAA",  # no prefix
            "uAA+A",  # standard alphabet
            "uAA/A",
            "uAA=",  # padding
            "u",  # empty body
            "uAAAAA",  # length % 4 == 1
        ],
    )
    def test_rejects_malformed(self, value: str) -> None:
        """Test malformed multibase strings are rejected."""
        with pytest.raises(MalformedIdentifier):
            deserialize_hash(value)

    def test_rejects_non_canonical(self) -> None:
        """Test non-zero trailing bits are rejected, not silently dropped."""
        assert serialize_hash(b"\x00") == "uAA"
        with pytest.raises(MalformedIdentifier, match="Non-canonical"):
            deserialize_hash("uAB")


# =============================================================================
# ModuleAddress
# =============================================================================


class TestModuleAddress:
    """Tests for ModuleAddress."""

    def test_requires_fixed_length(self) -> None:
        """Test addresses of the wrong length are refused."""
        with pytest.raises(ValueError, match=str(MODULE_ADDRESS_LENGTH)):
            ModuleAddress(b"\x00" * 10)

    def test_requires_bytes(self) -> None:
        """Test non-bytes values are refused."""
        with pytest.raises(TypeError):
            ModuleAddress("not bytes")  # type: ignore[arg-type]

    def test_parse_round_trip(self, agent_module: ModuleAddress) -> None:
        """Test str() and parse() are inverse."""
        assert ModuleAddress.parse(str(agent_module)) == agent_module

    def test_parse_wrong_decoded_length(self) -> None:
        """Test a valid multibase string of the wrong length is refused."""
        with pytest.raises(MalformedIdentifier, match="39 bytes"):
            ModuleAddress.parse(serialize_hash(b"abc"))

    def test_hashable_and_comparable(
        self, agent_module: ModuleAddress, other_module: ModuleAddress
    ) -> None:
        """Test addresses work as dict keys and compare by value."""
        same = ModuleAddress(agent_module.raw)
        assert {agent_module: 1}[same] == 1
        assert agent_module != other_module

    def test_repr_shows_serialized_form(self, agent_module: ModuleAddress) -> None:
        """Test repr uses the serialized form."""
        assert repr(agent_module) == f"ModuleAddress({agent_module})"


# =============================================================================
# GlobalId
# =============================================================================


class TestGlobalId:
    """Tests for GlobalId encode/decode."""

    def test_shape(self, agent_module: ModuleAddress) -> None:
        """Test a GlobalId is local address, separator, module address."""
        assert encode_global_id(agent_module, "localB") == f"localB:{agent_module}"

    def test_round_trip(self, agent_module: ModuleAddress) -> None:
        """Test decode inverts encode."""
        global_id = encode_global_id(agent_module, "localB")
        assert decode_global_id(global_id) == (agent_module, "localB")

    def test_local_address_with_separator(self, agent_module: ModuleAddress) -> None:
        """Test local addresses containing ':' round-trip unchanged."""
        local = "uhCkk:entry:7"
        assert decode_global_id(encode_global_id(agent_module, local)) == (agent_module, local)

    def test_encode_rejects_empty_local(self, agent_module: ModuleAddress) -> None:
        """Test empty local addresses cannot be encoded."""
        with pytest.raises(ValueError):
            encode_global_id(agent_module, "")

    @pytest.mark.parametrize(
        "value",
        [
            "not-a-real-id",
            "",
            ":",
            "abc:",
            "abc:zAAAA",
            "abc:u!!!!",
            "abc:uAAAA",
        ],
    )
    def test_decode_rejects_malformed(self, value: str) -> None:
        """Test strings encode never produces are rejected."""
        with pytest.raises(MalformedIdentifier):
            decode_global_id(value)

    def test_decode_rejects_empty_local(self, agent_module: ModuleAddress) -> None:
        """Test an empty local part is rejected."""
        with pytest.raises(MalformedIdentifier, match="empty local"):
            decode_global_id(f":{agent_module}")

    def test_decode_rejects_non_string(self) -> None:
        """Test non-string input is rejected."""
        with pytest.raises(MalformedIdentifier):
            decode_global_id(42)  # type: ignore[arg-type]

    def test_error_carries_identifier(self) -> None:
        """Test the offending identifier is reported."""
        with pytest.raises(MalformedIdentifier) as exc_info:
            decode_global_id("not-a-real-id")
        assert exc_info.value.identifier == "not-a-real-id"

    def test_injective_over_random_pairs(
        self, make_module: Callable[[int], ModuleAddress]
    ) -> None:
        """Test distinct (module, local) pairs never share a GlobalId."""
        rng = random.Random(20240611)
        modules = [make_module(1), make_module(2)]
        alphabet = "abcXYZ019:-_"

        pairs = {
            (rng.choice(modules), "".join(rng.choice(alphabet) for _ in range(rng.randint(1, 8))))
            for _ in range(2000)
        }
        encoded = {encode_global_id(module, local): (module, local) for module, local in pairs}

        assert len(encoded) == len(pairs)
        for global_id, pair in encoded.items():
            assert decode_global_id(global_id) == pair
