"""Cardano certificates and pool relays, with their CBOR array form."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from fractions import Fraction
from typing import Any, List, Optional, Union

from cardanokit.address import Address, new_address_from_bytes
from cardanokit.credential import StakeCredential, new_key_credential
from cardanokit.encoding import cbor_decode, cbor_encode

_MAX_UINT64 = (1 << 64) - 1
_MAX_UINT32 = (1 << 32) - 1


class CertificateType(IntEnum):
    """The kind of a certificate, the first element of its CBOR array."""

    STAKE_REGISTRATION = 0
    STAKE_DEREGISTRATION = 1
    STAKE_DELEGATION = 2
    POOL_REGISTRATION = 3
    POOL_RETIREMENT = 4
    GENESIS_KEY_DELEGATION = 5
    MOVE_INSTANTANEOUS_REWARDS = 6
    STAKE_UNDELEGATION = 7
    STAKE_AUTH_COMMITTEE_HOT_CERTIFICATE = 8


class RelayType(IntEnum):
    """The kind of a pool relay."""

    SINGLE_HOST_ADDR = 0
    SINGLE_HOST_NAME = 1
    MULTI_HOST_NAME = 2


def _leading_type(value: Any, target: str) -> int:
    try:
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"cbor: cannot unmarshal {type(value).__name__} into array")
        if not value:
            raise ValueError("empty CBOR array")
        first = value[0]
        if isinstance(first, bool) or not isinstance(first, int) or not 0 <= first <= _MAX_UINT64:
            raise ValueError("invalid Type")
    except ValueError as exc:
        raise ValueError(f"cbor: cannot unmarshal CBOR array into {target} ({exc})") from None
    return first


def _check_length(value: Any, length: int, target: str) -> None:
    if not isinstance(value, (list, tuple)) or len(value) != length:
        size = len(value) if isinstance(value, (list, tuple)) else "?"
        raise ValueError(f"cbor: cannot unmarshal CBOR array of length {size} into {target}")


def _uint(value: Any, what: str, maximum: int = _MAX_UINT64) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= maximum:
        raise ValueError(f"cbor: cannot unmarshal {value!r} into {what}")
    return value


def _bytes(value: Any, what: str) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise ValueError(f"cbor: cannot unmarshal {type(value).__name__} into {what}")
    return bytes(value)


def _optional_bytes(value: Any, what: str) -> Optional[bytes]:
    return None if value is None else _bytes(value, what)


def _text(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"cbor: cannot unmarshal {type(value).__name__} into {what}")
    return value


def _sequence(value: Any, what: str) -> list:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"cbor: cannot unmarshal {type(value).__name__} into {what}")
    return list(value)


@dataclass
class Relay:
    """A pool relay: an address, a host name or a multi-host name."""

    type: Union[RelayType, int] = RelayType.SINGLE_HOST_ADDR
    port: int = 0
    ipv4: Optional[bytes] = None
    ipv6: Optional[bytes] = None
    dns_name: str = ""

    def to_cbor_value(self) -> Optional[list]:
        """Return the relay as a CBOR array, or None for an unknown type."""
        if self.type == RelayType.SINGLE_HOST_ADDR:
            return [int(self.type), self.port, self.ipv4, self.ipv6]
        if self.type == RelayType.SINGLE_HOST_NAME:
            return [int(self.type), self.port, self.dns_name]
        if self.type == RelayType.MULTI_HOST_NAME:
            return [int(self.type), self.dns_name]
        return None

    @classmethod
    def from_cbor_value(cls, value: Any) -> "Relay":
        """Build a relay from a decoded CBOR array."""
        relay_type = _leading_type(value, "Relay")
        if relay_type == RelayType.SINGLE_HOST_ADDR:
            _check_length(value, 4, "Relay")
            return cls(
                type=RelayType.SINGLE_HOST_ADDR,
                port=_uint(value[1], "port"),
                ipv4=_optional_bytes(value[2], "ipv4"),
                ipv6=_optional_bytes(value[3], "ipv6"),
            )
        if relay_type == RelayType.SINGLE_HOST_NAME:
            _check_length(value, 3, "Relay")
            return cls(
                type=RelayType.SINGLE_HOST_NAME,
                port=_uint(value[1], "port"),
                dns_name=_text(value[2], "dns name"),
            )
        if relay_type == RelayType.MULTI_HOST_NAME:
            _check_length(value, 2, "Relay")
            return cls(type=RelayType.MULTI_HOST_NAME, dns_name=_text(value[1], "dns name"))
        return cls()


@dataclass
class PoolMetadata:
    """The metadata reference of a pool registration."""

    url: str
    hash: bytes

    def to_cbor_value(self) -> list:
        """Return the metadata as the CBOR array [url, hash]."""
        return [self.url, bytes(self.hash)]

    @classmethod
    def from_cbor_value(cls, value: Any) -> "PoolMetadata":
        """Build pool metadata from a decoded CBOR array."""
        _check_length(value, 2, "PoolMetadata")
        return cls(url=_text(value[0], "url"), hash=_bytes(value[1], "metadata hash"))


@dataclass
class StakeDelegationCredential:
    """An index paired with a pool key hash."""

    index: int
    pool_key_hash: bytes

    def _to_value(self) -> list:
        return [self.index, bytes(self.pool_key_hash)]

    @classmethod
    def _from_value(cls, value: Any) -> "StakeDelegationCredential":
        _check_length(value, 2, "StakeDelegationCredential")
        return cls(
            index=_uint(value[0], "index", _MAX_UINT32),
            pool_key_hash=_bytes(value[1], "pool key hash"),
        )


@dataclass
class DelegationDeposit:
    """The body shared by undelegation and committee hot certificates."""

    stake_delegation_credential: StakeDelegationCredential
    key_deposit: int

    def _to_value(self, cert_type: CertificateType) -> list:
        return [int(cert_type), self.stake_delegation_credential._to_value(), self.key_deposit]

    @classmethod
    def _from_value(cls, value: Any) -> "DelegationDeposit":
        _check_length(value, 3, "Certificate")
        return cls(
            stake_delegation_credential=StakeDelegationCredential._from_value(value[1]),
            key_deposit=_uint(value[2], "key deposit", _MAX_UINT32),
        )


@dataclass
class Certificate:
    """A Cardano certificate; which fields matter depends on its type."""

    type: CertificateType = CertificateType.STAKE_REGISTRATION
    stake_credential: StakeCredential = field(default_factory=StakeCredential)
    pool_key_hash: bytes = b""
    vrf_key_hash: bytes = b""
    operator: bytes = b""
    pledge: int = 0
    margin: Fraction = Fraction(0)
    reward_account: Optional[Address] = None
    owners: List[bytes] = field(default_factory=list)
    relays: List[Relay] = field(default_factory=list)
    pool_metadata: Optional[PoolMetadata] = None
    epoch: int = 0
    auth_committee_hot_certificate: Optional[DelegationDeposit] = None
    undelegation: Optional[DelegationDeposit] = None
    genesis_hash: bytes = b""
    genesis_delegate_hash: bytes = b""

    def to_cbor_value(self) -> Optional[list]:
        """Return the certificate as a CBOR array, or None for an unsupported type."""
        kind = self.type
        if kind in (CertificateType.STAKE_REGISTRATION, CertificateType.STAKE_DEREGISTRATION):
            return [int(kind), self.stake_credential.to_cbor_value()]
        if kind == CertificateType.STAKE_DELEGATION:
            return [int(kind), self.stake_credential.to_cbor_value(), bytes(self.pool_key_hash)]
        if kind == CertificateType.STAKE_AUTH_COMMITTEE_HOT_CERTIFICATE:
            if self.auth_committee_hot_certificate is None:
                raise ValueError("missing committee hot certificate body")
            return self.auth_committee_hot_certificate._to_value(kind)
        if kind == CertificateType.STAKE_UNDELEGATION:
            if self.undelegation is None:
                raise ValueError("missing undelegation body")
            return self.undelegation._to_value(kind)
        if kind == CertificateType.POOL_REGISTRATION:
            if self.reward_account is None:
                raise ValueError("missing reward account")
            return [
                int(kind),
                bytes(self.operator),
                bytes(self.vrf_key_hash),
                self.pledge,
                Fraction(self.margin),
                self.reward_account.to_bytes(),
                [bytes(owner) for owner in self.owners],
                [relay.to_cbor_value() for relay in self.relays],
                None if self.pool_metadata is None else self.pool_metadata.to_cbor_value(),
            ]
        if kind == CertificateType.POOL_RETIREMENT:
            return [int(kind), bytes(self.pool_key_hash), self.epoch]
        if kind == CertificateType.GENESIS_KEY_DELEGATION:
            return [
                int(kind),
                bytes(self.genesis_hash),
                bytes(self.genesis_delegate_hash),
                bytes(self.vrf_key_hash),
            ]
        return None

    @classmethod
    def from_cbor_value(cls, value: Any) -> "Certificate":
        """Build a certificate from a decoded CBOR array."""
        cert_type = _leading_type(value, "StakeCredential")
        if cert_type in (CertificateType.STAKE_REGISTRATION, CertificateType.STAKE_DEREGISTRATION):
            _check_length(value, 2, "Certificate")
            return cls(
                type=CertificateType(cert_type),
                stake_credential=StakeCredential.from_cbor_value(value[1]),
            )
        if cert_type == CertificateType.STAKE_DELEGATION:
            _check_length(value, 3, "Certificate")
            return cls(
                type=CertificateType.STAKE_DELEGATION,
                stake_credential=StakeCredential.from_cbor_value(value[1]),
                pool_key_hash=_bytes(value[2], "pool key hash"),
            )
        if cert_type == CertificateType.POOL_REGISTRATION:
            _check_length(value, 9, "Certificate")
            margin = value[4]
            if not isinstance(margin, Fraction):
                raise ValueError(f"cbor: cannot unmarshal {type(margin).__name__} into margin")
            metadata = value[8]
            return cls(
                type=CertificateType.POOL_REGISTRATION,
                operator=_bytes(value[1], "operator"),
                vrf_key_hash=_bytes(value[2], "vrf key hash"),
                pledge=_uint(value[3], "pledge"),
                margin=margin,
                reward_account=new_address_from_bytes(_bytes(value[5], "reward account")),
                owners=[_bytes(owner, "owner") for owner in _sequence(value[6], "owners")],
                relays=[Relay.from_cbor_value(relay) for relay in _sequence(value[7], "relays")],
                pool_metadata=None if metadata is None else PoolMetadata.from_cbor_value(metadata),
            )
        if cert_type == CertificateType.POOL_RETIREMENT:
            _check_length(value, 3, "Certificate")
            return cls(
                type=CertificateType.POOL_RETIREMENT,
                pool_key_hash=_bytes(value[1], "pool key hash"),
                epoch=_uint(value[2], "epoch"),
            )
        if cert_type == CertificateType.GENESIS_KEY_DELEGATION:
            _check_length(value, 4, "Certificate")
            return cls(
                type=CertificateType.GENESIS_KEY_DELEGATION,
                genesis_hash=_bytes(value[1], "genesis hash"),
                genesis_delegate_hash=_bytes(value[2], "genesis delegate hash"),
                vrf_key_hash=_bytes(value[3], "vrf key hash"),
            )
        if cert_type == CertificateType.STAKE_AUTH_COMMITTEE_HOT_CERTIFICATE:
            return cls(
                type=CertificateType.STAKE_AUTH_COMMITTEE_HOT_CERTIFICATE,
                auth_committee_hot_certificate=DelegationDeposit._from_value(value),
            )
        if cert_type == CertificateType.STAKE_UNDELEGATION:
            return cls(
                type=CertificateType.STAKE_UNDELEGATION,
                undelegation=DelegationDeposit._from_value(value),
            )
        return cls()

    def to_cbor(self) -> bytes:
        """Return the canonical CBOR encoding of the certificate."""
        return cbor_encode(self.to_cbor_value())

    @classmethod
    def from_cbor(cls, data: bytes) -> "Certificate":
        """Decode a certificate from CBOR bytes."""
        return cls.from_cbor_value(cbor_decode(data))


def new_stake_registration_certificate(stake_key: bytes) -> Certificate:
    """Create a stake registration certificate for a stake public key."""
    return Certificate(
        type=CertificateType.STAKE_REGISTRATION,
        stake_credential=new_key_credential(stake_key),
    )


def new_stake_deregistration_certificate(stake_key: bytes) -> Certificate:
    """Create a stake deregistration certificate for a stake public key."""
    return Certificate(
        type=CertificateType.STAKE_DEREGISTRATION,
        stake_credential=new_key_credential(stake_key),
    )


def new_stake_delegation_certificate(stake_key: bytes, pool_key_hash: bytes) -> Certificate:
    """Create a certificate delegating a stake key to a pool."""
    return Certificate(
        type=CertificateType.STAKE_DELEGATION,
        stake_credential=new_key_credential(stake_key),
        pool_key_hash=bytes(pool_key_hash),
    )