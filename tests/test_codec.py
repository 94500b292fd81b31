import pytest

from cardanokit import bech32
from cardanokit.codec import (
    Bech32Codec,
    Bech32Encoder,
    decode_into,
    encode,
    encode_from_base256,
)


class _KeyCodec:
    def __init__(self, prefix="addr_vk", size=32, data=b""):
        self._prefix = prefix
        self._size = size
        self._data = bytes(data)

    def prefix(self):
        return self._prefix

    def to_bytes(self):
        return self._data

    def set_bytes(self, data):
        self._data = bytes(data)[: self._size]

    def __len__(self):
        return self._size


PAYLOAD = bytes(range(32))


def test_codec_satisfies_protocols():
    codec = _KeyCodec(data=PAYLOAD)
    assert isinstance(codec, Bech32Encoder)
    assert isinstance(codec, Bech32Codec)
    assert not isinstance("addr_vk", Bech32Encoder)
    assert encode_from_base256(codec) == encode_from_base256("addr_vk", PAYLOAD)


def test_encode_from_base256_with_prefix_matches_known_vector():
    data = bytes.fromhex("00443214c74254b635cf84653a56d7c675be77df")
    assert encode_from_base256("abcdef", data) == "abcdef1qpzry9x8gf2tvdw0s3jn54khce6mua7lmqqqxw"


def test_encode_with_prefix_and_five_bit_data():
    five_bit = bech32.convert_bits(PAYLOAD, 8, 5, True)
    assert encode("addr_vk", five_bit) == bech32.encode("addr_vk", five_bit)


def test_encode_with_encoder_object():
    five_bit = bech32.convert_bits(PAYLOAD, 8, 5, True)
    codec = _KeyCodec(data=five_bit)
    assert encode(codec) == bech32.encode("addr_vk", five_bit)


def test_encode_with_encoder_and_separate_data():
    codec = _KeyCodec(prefix="stake_vk")
    five_bit = bech32.convert_bits(PAYLOAD, 8, 5, True)
    assert encode(codec, five_bit) == bech32.encode("stake_vk", five_bit)


def test_encode_from_base256_with_encoder_round_trips():
    codec = _KeyCodec(data=PAYLOAD)
    encoded = encode_from_base256(codec)
    assert encoded.startswith("addr_vk1")
    assert bech32.decode_to_base256(encoded) == ("addr_vk", PAYLOAD)


def test_decode_into_round_trip():
    encoded = encode_from_base256("addr_vk", PAYLOAD)
    codec = _KeyCodec()
    decode_into(encoded, codec)
    assert codec.to_bytes() == PAYLOAD


def test_decode_into_wrong_prefix():
    encoded = encode_from_base256("stake_vk", PAYLOAD)
    with pytest.raises(ValueError, match="Wrong prefix: want addr_vk got stake_vk"):
        decode_into(encoded, _KeyCodec())


def test_decode_into_too_long_payload():
    encoded = encode_from_base256("addr_vk", PAYLOAD + b"\x01")
    with pytest.raises(ValueError, match="Set bytes failed"):
        decode_into(encoded, _KeyCodec())


def test_decode_into_too_short_payload():
    encoded = encode_from_base256("addr_vk", PAYLOAD[:16])
    with pytest.raises(ValueError, match="Set bytes failed"):
        decode_into(encoded, _KeyCodec())


def test_decode_into_propagates_bech32_errors():
    with pytest.raises(bech32.MixedCaseError):
        decode_into("aBcdef1qpzry9x8gf2tvdw0s3jn54khce6mua7lmqqqxw", _KeyCodec(prefix="abcdef"))


def test_encode_rejects_non_encoder():
    with pytest.raises(TypeError, match="not a Bech32Encoder"):
        encode(42)


def test_encode_rejects_bad_first_parameter():
    with pytest.raises(TypeError, match="Wrong 1st parameter"):
        encode_from_base256(42, PAYLOAD)


def test_encode_rejects_bad_second_parameter():
    with pytest.raises(TypeError, match="Wrong 2nd parameter"):
        encode("addr_vk", "not bytes")


def test_encode_rejects_wrong_argument_count():
    with pytest.raises(TypeError):
        encode_from_base256("addr_vk", PAYLOAD, PAYLOAD)