"""Stake credentials: a key hash or a script hash, with their CBOR form."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from cardanokit.crypto import blake224_hash
from cardanokit.encoding import cbor_decode, cbor_encode, get_type_from_cbor_array

_HASH_SIZE = 28
_MAX_UINT64 = (1 << 64) - 1


class StakeCredentialType(IntEnum):
    """The kind of hash a credential carries."""

    KEY = 0
    SCRIPT = 1


def _array_type(value: Any) -> int:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"cbor: cannot unmarshal {type(value).__name__} into array")
    if not value:
        raise ValueError("empty CBOR array")
    first = value[0]
    if isinstance(first, bool) or not isinstance(first, int) or not 0 <= first <= _MAX_UINT64:
        raise ValueError("invalid Type")
    return first


@dataclass(frozen=True, eq=False)
class StakeCredential:
    """A Cardano credential identified by a key hash or a script hash."""

    type: StakeCredentialType = StakeCredentialType.KEY
    key_hash: bytes = b""
    script_hash: bytes = b""

    def hash(self) -> bytes:
        """Return the hash that identifies this credential."""
        if self.type == StakeCredentialType.KEY:
            return self.key_hash
        return self.script_hash

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StakeCredential):
            return NotImplemented
        if self.type != other.type:
            return False
        return bytes(self.hash()) == bytes(other.hash())

    def __hash__(self) -> int:
        return hash((int(self.type), bytes(self.hash())))

    def to_cbor_value(self) -> list:
        """Return the credential as the CBOR array [type, hash]."""
        return [int(self.type), bytes(self.hash())]

    @classmethod
    def from_cbor_value(cls, value: Any) -> "StakeCredential":
        """Build a credential from a decoded CBOR array."""
        try:
            cred_type = _array_type(value)
        except ValueError as exc:
            raise ValueError(
                f"cbor: cannot unmarshal CBOR array into StakeCredential ({exc})"
            ) from None
        if cred_type not in (StakeCredentialType.KEY, StakeCredentialType.SCRIPT):
            return cls()
        if len(value) != 2:
            raise ValueError(
                f"cbor: cannot unmarshal CBOR array of length {len(value)} into StakeCredential"
            )
        digest = value[1]
        if not isinstance(digest, (bytes, bytearray)):
            raise ValueError(
                f"cbor: cannot unmarshal {type(digest).__name__} into credential hash"
            )
        if cred_type == StakeCredentialType.KEY:
            return cls(type=StakeCredentialType.KEY, key_hash=bytes(digest))
        return cls(type=StakeCredentialType.SCRIPT, script_hash=bytes(digest))

    def to_cbor(self) -> bytes:
        """Return the canonical CBOR encoding of the credential."""
        return cbor_encode(self.to_cbor_value())

    @classmethod
    def from_cbor(cls, data: bytes) -> "StakeCredential":
        """Decode a credential from CBOR bytes."""
        try:
            get_type_from_cbor_array(data)
        except ValueError as exc:
            raise ValueError(
                f"cbor: cannot unmarshal CBOR array into StakeCredential ({exc})"
            ) from None
        return cls.from_cbor_value(cbor_decode(data))


def new_key_credential(public_key: bytes) -> StakeCredential:
    """Create a key credential from a public key."""
    return StakeCredential(type=StakeCredentialType.KEY, key_hash=blake224_hash(public_key))


def new_key_credential_from_hash(key_hash: bytes) -> StakeCredential:
    """Create a key credential from a key hash of at least 28 bytes."""
    if len(key_hash) < _HASH_SIZE:
        raise ValueError("Wrong argument: expected 28 bytes key hash")
    return StakeCredential(type=StakeCredentialType.KEY, key_hash=bytes(key_hash[:_HASH_SIZE]))


def new_script_credential(script: bytes) -> StakeCredential:
    """Create a script credential from a serialized script."""
    return StakeCredential(type=StakeCredentialType.SCRIPT, script_hash=blake224_hash(script))