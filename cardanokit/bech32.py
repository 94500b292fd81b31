"""Bech32 encoding and decoding as specified by BIP-173."""

from __future__ import annotations

from itertools import chain
from typing import Iterable, Optional, Union

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"

_GEN = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_CHARSET_INDEX = {code: index for index, code in enumerate(CHARSET.encode("ascii"))}
_MAX_LENGTH = 90
_MIN_LENGTH = 8
_CHECKSUM_LENGTH = 6

BechInput = Union[str, bytes, bytearray]


class Bech32Error(ValueError):
    """Base class of all bech32 errors; equal when of the same kind and values."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bech32Error):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class MixedCaseError(Bech32Error):
    """The string mixes lower and upper case characters."""

    def __str__(self) -> str:
        return "string not all lowercase or all uppercase"


class InvalidBitGroupsError(Bech32Error):
    """A bit conversion was asked for with an unsupported group size."""

    def __str__(self) -> str:
        return "only bit groups between 1 and 8 allowed"


class InvalidIncompleteGroupError(Bech32Error):
    """The input of a bit conversion leaves an invalid trailing group."""

    def __str__(self) -> str:
        return "invalid incomplete group"


class InvalidLengthError(Bech32Error):
    """The bech32 string is too short or too long."""

    def __init__(self, length: int) -> None:
        super().__init__(length)
        self.length = length

    def __str__(self) -> str:
        return f"invalid bech32 string length {self.length}"


class InvalidCharacterError(Bech32Error):
    """The string holds a character outside the printable ASCII range."""

    def __init__(self, char: int) -> None:
        super().__init__(char)
        self.char = char

    def __str__(self) -> str:
        return f"invalid character in string: '{chr(self.char)}'"


class InvalidSeparatorIndexError(Bech32Error):
    """The separator '1' is missing or in an invalid position."""

    def __init__(self, index: int) -> None:
        super().__init__(index)
        self.index = index

    def __str__(self) -> str:
        return f"invalid separator index {self.index}"


class NonCharsetCharError(Bech32Error):
    """The data part holds a character that is not in the bech32 charset."""

    def __init__(self, char: int) -> None:
        super().__init__(char)
        self.char = char

    def __str__(self) -> str:
        return f"invalid character not part of charset: {self.char}"


class InvalidChecksumError(Bech32Error):
    """The checksum at the end of the string does not match its content."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(expected, actual)
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        return f"invalid checksum (expected {self.expected} got {self.actual})"


class InvalidDataByteError(Bech32Error):
    """A value to encode does not fit in five bits."""

    def __init__(self, value: int) -> None:
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return f"invalid data byte: {self.value}"


def _as_bytes(bech: BechInput) -> bytes:
    if isinstance(bech, str):
        return bech.encode("utf-8")
    return bytes(bech)


def _polymod(hrp: bytes, values: Iterable[int], checksum: Optional[Iterable[int]] = None) -> int:
    tail = checksum if checksum is not None else (0,) * _CHECKSUM_LENGTH
    chk = 1
    for value in chain((c >> 5 for c in hrp), (0,), (c & 31 for c in hrp), values, tail):
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ value
        for i, generator in enumerate(_GEN):
            if (top >> i) & 1:
                chk ^= generator
    return chk


def _checksum(hrp: bytes, data: Iterable[int]) -> str:
    polymod = _polymod(hrp, data) ^ 1
    return "".join(CHARSET[(polymod >> (5 * (5 - i))) & 31] for i in range(_CHECKSUM_LENGTH))


def _verify_checksum(hrp: bytes, data: bytes) -> bool:
    return _polymod(hrp, data[:-_CHECKSUM_LENGTH], data[-_CHECKSUM_LENGTH:]) == 1


def _to_values(chars: bytes) -> bytes:
    try:
        return bytes(_CHARSET_INDEX[c] for c in chars)
    except KeyError as exc:
        raise NonCharsetCharError(exc.args[0]) from None


def decode_no_limit(bech: BechInput) -> tuple[str, bytes]:
    """Decode a bech32 string of any length into its lowercase HRP and 5-bit data."""
    raw = _as_bytes(bech)
    if len(raw) < _MIN_LENGTH:
        raise InvalidLengthError(len(raw))

    has_lower = has_upper = False
    for c in raw:
        if c < 33 or c > 126:
            raise InvalidCharacterError(c)
        has_lower = has_lower or 97 <= c <= 122
        has_upper = has_upper or 65 <= c <= 90
        if has_lower and has_upper:
            raise MixedCaseError()

    if has_upper:
        raw = raw.lower()

    one = raw.rfind(b"1")
    if one < 1 or one + 7 > len(raw):
        raise InvalidSeparatorIndexError(one)

    hrp = raw[:one]
    decoded = _to_values(raw[one + 1:])

    if not _verify_checksum(hrp, decoded):
        expected = _checksum(hrp, decoded[:-_CHECKSUM_LENGTH])
        actual = raw[-_CHECKSUM_LENGTH:].decode("ascii")
        raise InvalidChecksumError(expected, actual)

    return hrp.decode("ascii"), decoded[:-_CHECKSUM_LENGTH]


def decode(bech: BechInput) -> tuple[str, bytes]:
    """Decode a bech32 string of at most 90 characters into its HRP and 5-bit data."""
    raw = _as_bytes(bech)
    if len(raw) > _MAX_LENGTH:
        raise InvalidLengthError(len(raw))
    return decode_no_limit(raw)


def encode(hrp: str, data: Iterable[int]) -> str:
    """Encode 5-bit values under the given HRP, which is lowered first."""
    hrp = hrp.lower()
    values = list(data)
    for value in values:
        if value >= len(CHARSET):
            raise InvalidDataByteError(value)
    body = "".join(CHARSET[value] for value in values)
    return f"{hrp}1{body}{_checksum(hrp.encode('utf-8'), values)}"


def convert_bits(data: Iterable[int], from_bits: int, to_bits: int, pad: bool) -> bytes:
    """Regroup values of from_bits bits each into values of to_bits bits each."""
    if not (1 <= from_bits <= 8 and 1 <= to_bits <= 8):
        raise InvalidBitGroupsError()

    regrouped = bytearray()
    next_byte = 0
    filled_bits = 0

    for value in data:
        value = (value << (8 - from_bits)) & 0xFF
        remaining = from_bits
        while remaining > 0:
            to_extract = min(remaining, to_bits - filled_bits)
            next_byte = ((next_byte << to_extract) | (value >> (8 - to_extract))) & 0xFF
            value = (value << to_extract) & 0xFF
            remaining -= to_extract
            filled_bits += to_extract
            if filled_bits == to_bits:
                regrouped.append(next_byte)
                filled_bits = 0
                next_byte = 0

    if pad and filled_bits > 0:
        regrouped.append((next_byte << (to_bits - filled_bits)) & 0xFF)
        filled_bits = 0
        next_byte = 0

    if filled_bits > 0 and (filled_bits > 4 or next_byte != 0):
        raise InvalidIncompleteGroupError()

    return bytes(regrouped)


def encode_from_base256(hrp: str, data: Iterable[int]) -> str:
    """Encode ordinary bytes as a bech32 string under the given HRP."""
    return encode(hrp, convert_bits(data, 8, 5, True))


def decode_to_base256(bech: BechInput) -> tuple[str, bytes]:
    """Decode a bech32 string of any length into its HRP and ordinary bytes."""
    hrp, data = decode_no_limit(bech)
    return hrp, convert_bits(data, 5, 8, False)