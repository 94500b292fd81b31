"""Bech32 helpers that take either a prefix and bytes or an object that knows both."""

from __future__ import annotations

from typing import Protocol, Tuple, runtime_checkable

from cardanokit import bech32 as _bech32


@runtime_checkable
class Bech32Encoder(Protocol):
    """An object that can be written as bech32: a prefix and a byte payload."""

    def prefix(self) -> str:
        """Return the human-readable part."""

    def to_bytes(self) -> bytes:
        """Return the payload."""


@runtime_checkable
class Bech32Codec(Bech32Encoder, Protocol):
    """A bech32 encoder that can also be filled from decoded bytes."""

    def set_bytes(self, data: bytes) -> None:
        """Replace the payload."""

    def __len__(self) -> int:
        """Return the expected payload length."""


_BYTES_LIKE = (bytes, bytearray, memoryview)


def _resolve(args: tuple) -> Tuple[str, bytes]:
    if len(args) == 1:
        (encoder,) = args
        if not isinstance(encoder, Bech32Encoder):
            raise TypeError(f"Wrong parameter: {type(encoder).__name__} is not a Bech32Encoder")
        return encoder.prefix(), bytes(encoder.to_bytes())
    if len(args) == 2:
        first, second = args
        if isinstance(first, str):
            hrp = first
        elif isinstance(first, Bech32Encoder):
            hrp = first.prefix()
        else:
            raise TypeError(f"Wrong 1st parameter: {type(first).__name__} is not a string or Bech32Codec")
        if not isinstance(second, _BYTES_LIKE):
            raise TypeError(f"Wrong 2nd parameter: {type(second).__name__} is not bytes")
        return hrp, bytes(second)
    raise TypeError(f"expected 1 or 2 arguments, got {len(args)}")


def encode(*args) -> str:
    """Encode 5-bit data: encode(encoder) or encode(prefix_or_encoder, data)."""
    hrp, data = _resolve(args)
    return _bech32.encode(hrp, data)


def encode_from_base256(*args) -> str:
    """Encode ordinary bytes: encode_from_base256(encoder) or (prefix_or_encoder, data)."""
    hrp, data = _resolve(args)
    return _bech32.encode(hrp, _bech32.convert_bits(data, 8, 5, True))


def decode_into(be32: str, codec: Bech32Codec) -> None:
    """Decode a bech32 string into codec, checking its prefix and length."""
    expected_len = len(codec)
    expected_prefix = codec.prefix()
    hrp, data = _bech32.decode_to_base256(be32)
    if hrp != expected_prefix:
        raise ValueError(f"Wrong prefix: want {expected_prefix} got {hrp}")
    codec.set_bytes(data)
    stored = bytes(codec.to_bytes())
    if len(stored) != expected_len or stored != data:
        raise ValueError("Set bytes failed")