"""Canonical CBOR helpers shared by the ledger types."""

from __future__ import annotations

from typing import Any

import cbor2

_MAX_UINT64 = (1 << 64) - 1


def cbor_encode(value: Any) -> bytes:
    """Encode value as canonical CBOR."""
    return cbor2.dumps(value, canonical=True)


def cbor_decode(data: bytes) -> Any:
    """Decode CBOR data."""
    return cbor2.loads(bytes(data))


def get_type_from_cbor_array(data: bytes) -> int:
    """Return the unsigned integer that opens a CBOR array."""
    raw = cbor_decode(data)
    if not isinstance(raw, (list, tuple)):
        raise ValueError(f"cbor: cannot unmarshal {type(raw).__name__} into array")
    if not raw:
        raise ValueError("empty CBOR array")
    first = raw[0]
    if isinstance(first, bool) or not isinstance(first, int) or not 0 <= first <= _MAX_UINT64:
        raise ValueError("invalid Type")
    return first


def get_bytes_from_cbor_hex(cbor_hex: str) -> bytes:
    """Decode a hex string holding a CBOR byte string."""
    value = cbor_decode(bytes.fromhex(cbor_hex))
    if value is None:
        return b""
    if not isinstance(value, bytes):
        raise ValueError(f"cbor: cannot unmarshal {type(value).__name__} into bytes")
    return value


def get_cbor_hex_from_bytes(data: bytes) -> str:
    """Encode bytes as a CBOR byte string and return it as hex."""
    return cbor_encode(bytes(data)).hex()