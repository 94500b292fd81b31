"""Cardano Shelley addresses: parsing, building and encoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Tuple, Union

from cardanokit import bech32 as _bech32
from cardanokit.credential import StakeCredential, StakeCredentialType
from cardanokit.encoding import cbor_decode, cbor_encode

_MAX_UINT64 = (1 << 64) - 1


class Network(IntEnum):
    """A Cardano network."""

    TESTNET = 0
    MAINNET = 1
    PREPROD = 2


class AddressType(IntEnum):
    """The address header type (upper four bits of the first byte)."""

    BASE = 0x00
    BASE_SCRIPT_KEY = 0x01
    BASE_KEY_SCRIPT = 0x02
    BASE_SCRIPT_SCRIPT = 0x03
    PTR = 0x04
    PTR_SCRIPT = 0x05
    ENTERPRISE = 0x06
    ENTERPRISE_SCRIPT = 0x07
    STAKE = 0x0E
    STAKE_SCRIPT = 0x0F


_BASE_TYPES = {
    AddressType.BASE,
    AddressType.BASE_SCRIPT_KEY,
    AddressType.BASE_KEY_SCRIPT,
    AddressType.BASE_SCRIPT_SCRIPT,
}
_PTR_TYPES = {AddressType.PTR, AddressType.PTR_SCRIPT}
_ENTERPRISE_TYPES = {AddressType.ENTERPRISE, AddressType.ENTERPRISE_SCRIPT}
_STAKE_TYPES = {AddressType.STAKE, AddressType.STAKE_SCRIPT}


@dataclass(frozen=True)
class Pointer:
    """The location of a stake registration certificate in the chain."""

    slot: int = 0
    tx_index: int = 0
    cert_index: int = 0


def _credential(is_script: bool, digest: bytes) -> StakeCredential:
    if is_script:
        return StakeCredential(type=StakeCredentialType.SCRIPT, script_hash=bytes(digest))
    return StakeCredential(type=StakeCredentialType.KEY, key_hash=bytes(digest))


def _address_type(value: int) -> Union[AddressType, int]:
    try:
        return AddressType(value)
    except ValueError:
        return value


def get_hrp(network: Network, address_type: Optional[Union[AddressType, int]] = None) -> str:
    """Return the bech32 prefix for a network and address type."""
    suffix = "_test" if network in (Network.TESTNET, Network.PREPROD) else ""
    prefix = "stake" if address_type == AddressType.STAKE else "addr"
    return prefix + suffix


def encode_to_nat(value: int) -> bytes:
    """Encode an unsigned integer as big-endian base-128 with continuation bits."""
    out = [value & 0x7F]
    value >>= 7
    while value:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(out))


def decode_from_nat(data: bytes) -> Tuple[int, int]:
    """Decode a base-128 integer; return the value and the number of bytes read."""
    value = 0
    for count, byte in enumerate(data, start=1):
        value = (value << 7) | (byte & 0x7F)
        if value > _MAX_UINT64:
            raise ValueError("too big to decode (> math.MaxUint64)")
        if not byte & 0x80:
            return value, count
    raise ValueError("bad nat encoding")


@dataclass
class Address:
    """A Cardano address."""

    network: Network
    type: Union[AddressType, int]
    pointer: Pointer = field(default_factory=Pointer)
    payment: StakeCredential = field(default_factory=StakeCredential)
    stake: StakeCredential = field(default_factory=StakeCredential)

    def to_bytes(self) -> bytes:
        """Return the raw address bytes."""
        network_byte = 1 if self.network == Network.MAINNET else 0
        out = bytearray([((int(self.type) << 4) | network_byte) & 0xFF])
        if self.type in _BASE_TYPES:
            out += self.payment.hash()
            out += self.stake.hash()
        elif self.type in _ENTERPRISE_TYPES:
            out += self.payment.hash()
        elif self.type in _STAKE_TYPES:
            out += self.stake.hash()
        elif self.type in _PTR_TYPES:
            out += self.payment.hash()
            out += encode_to_nat(self.pointer.slot)
            out += encode_to_nat(self.pointer.tx_index)
            out += encode_to_nat(self.pointer.cert_index)
        return bytes(out)

    def bech32(self) -> str:
        """Return the address encoded as bech32."""
        return _bech32.encode_from_base256(get_hrp(self.network, self.type), self.to_bytes())

    def to_cbor(self) -> bytes:
        """Return the address bytes encoded as a CBOR byte string."""
        return cbor_encode(self.to_bytes())

    @classmethod
    def from_cbor(cls, data: bytes) -> "Address":
        """Decode an address from a CBOR byte string."""
        value = cbor_decode(data)
        if not isinstance(value, (bytes, bytearray)):
            raise ValueError(f"cbor: cannot unmarshal {type(value).__name__} into address bytes")
        return new_address_from_bytes(value)

    def __str__(self) -> str:
        return self.bech32()


def new_address_from_bytes(data: bytes) -> Address:
    """Parse an address from its raw bytes."""
    raw = bytes(data)
    if not raw:
        raise ValueError("empty address")
    addr_type = _address_type(raw[0] >> 4)
    network = Network(raw[0] & 0x01)
    payment = StakeCredential()
    stake = StakeCredential()
    pointer = Pointer()

    if addr_type in _BASE_TYPES:
        if len(raw) != 57:
            raise ValueError("base address length should be 57")
        payment = _credential(
            addr_type in (AddressType.BASE_SCRIPT_KEY, AddressType.BASE_SCRIPT_SCRIPT), raw[1:29]
        )
        stake = _credential(
            addr_type in (AddressType.BASE_KEY_SCRIPT, AddressType.BASE_SCRIPT_SCRIPT), raw[29:57]
        )
    elif addr_type in _PTR_TYPES:
        if len(raw) <= 29:
            raise ValueError("pointer address length should be greater than 29")
        slot, read = decode_from_nat(raw[29:])
        index = 29 + read
        tx_index, read = decode_from_nat(raw[index:])
        index += read
        cert_index, _ = decode_from_nat(raw[index:])
        payment = _credential(addr_type == AddressType.PTR_SCRIPT, raw[1:29])
        pointer = Pointer(slot=slot, tx_index=tx_index, cert_index=cert_index)
    elif addr_type in _ENTERPRISE_TYPES:
        if len(raw) != 29:
            raise ValueError("enterprise address length should be 29")
        payment = _credential(addr_type == AddressType.ENTERPRISE_SCRIPT, raw[1:29])
    elif addr_type in _STAKE_TYPES:
        if len(raw) != 29:
            raise ValueError("stake address length should be 29")
        stake = _credential(addr_type == AddressType.STAKE_SCRIPT, raw[1:29])

    return Address(network=network, type=addr_type, pointer=pointer, payment=payment, stake=stake)


def new_address(bech: str) -> Address:
    """Parse an address from its bech32 encoding."""
    _, data = _bech32.decode_to_base256(bech)
    return new_address_from_bytes(data)


def new_base_address(network: Network, payment: StakeCredential, stake: StakeCredential) -> Address:
    """Build a base address from a payment and a stake credential."""
    script_payment = payment.type == StakeCredentialType.SCRIPT
    script_stake = stake.type == StakeCredentialType.SCRIPT
    if script_payment and script_stake:
        addr_type = AddressType.BASE_SCRIPT_SCRIPT
    elif script_payment:
        addr_type = AddressType.BASE_SCRIPT_KEY
    elif script_stake:
        addr_type = AddressType.BASE_KEY_SCRIPT
    else:
        addr_type = AddressType.BASE
    return Address(network=network, type=addr_type, payment=payment, stake=stake)


def new_enterprise_address(network: Network, payment: StakeCredential) -> Address:
    """Build an enterprise address from a payment credential."""
    addr_type = (
        AddressType.ENTERPRISE_SCRIPT
        if payment.type == StakeCredentialType.SCRIPT
        else AddressType.ENTERPRISE
    )
    return Address(network=network, type=addr_type, payment=payment)


def new_stake_address(network: Network, stake: StakeCredential) -> Address:
    """Build a stake (reward) address from a stake credential."""
    addr_type = (
        AddressType.STAKE_SCRIPT if stake.type == StakeCredentialType.SCRIPT else AddressType.STAKE
    )
    return Address(network=network, type=addr_type, stake=stake)


def new_pointer_address(network: Network, payment: StakeCredential, pointer: Pointer) -> Address:
    """Build a pointer address from a payment credential and a certificate pointer."""
    addr_type = (
        AddressType.PTR_SCRIPT if payment.type == StakeCredentialType.SCRIPT else AddressType.PTR
    )
    return Address(network=network, type=addr_type, payment=payment, pointer=pointer)