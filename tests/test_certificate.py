from fractions import Fraction

import pytest

from cardanokit.address import Network, new_stake_address
from cardanokit.certificate import (
    Certificate,
    CertificateType,
    DelegationDeposit,
    PoolMetadata,
    Relay,
    RelayType,
    StakeDelegationCredential,
    new_stake_delegation_certificate,
    new_stake_deregistration_certificate,
    new_stake_registration_certificate,
)
from cardanokit.credential import new_key_credential
from cardanokit.crypto import blake224_hash
from cardanokit.encoding import cbor_encode

STAKE_KEY = bytes(range(32))
POOL_HASH = bytes(range(100, 128))
VRF_HASH = bytes(range(1, 33))


def test_stake_registration_wire_bytes():
    cert = new_stake_registration_certificate(STAKE_KEY)
    expected = bytes([0x82, 0x00, 0x82, 0x00, 0x58, 0x1C]) + blake224_hash(STAKE_KEY)
    assert cert.to_cbor() == expected


def test_stake_deregistration_round_trip():
    cert = new_stake_deregistration_certificate(STAKE_KEY)
    decoded = Certificate.from_cbor(cert.to_cbor())
    assert decoded.type == CertificateType.STAKE_DEREGISTRATION
    assert decoded.stake_credential == new_key_credential(STAKE_KEY)


def test_stake_delegation_wire_and_round_trip():
    cert = new_stake_delegation_certificate(STAKE_KEY, POOL_HASH)
    data = cert.to_cbor()
    assert data[:2] == bytes([0x83, 0x02])
    assert data.endswith(POOL_HASH)
    assert Certificate.from_cbor(data) == cert


def test_pool_retirement_wire_bytes():
    cert = Certificate(type=CertificateType.POOL_RETIREMENT, pool_key_hash=POOL_HASH, epoch=5)
    assert cert.to_cbor() == bytes([0x83, 0x04, 0x58, 0x1C]) + POOL_HASH + bytes([0x05])
    assert Certificate.from_cbor(cert.to_cbor()) == cert


def test_pool_registration_round_trip():
    reward = new_stake_address(Network.MAINNET, new_key_credential(STAKE_KEY))
    cert = Certificate(
        type=CertificateType.POOL_REGISTRATION,
        operator=POOL_HASH,
        vrf_key_hash=VRF_HASH,
        pledge=1_000_000,
        margin=Fraction(1, 20),
        reward_account=reward,
        owners=[blake224_hash(STAKE_KEY)],
        relays=[
            Relay(type=RelayType.SINGLE_HOST_ADDR, port=3001, ipv4=bytes([10, 0, 0, 1])),
            Relay(type=RelayType.SINGLE_HOST_NAME, port=3001, dns_name="relay.example.com"),
            Relay(type=RelayType.MULTI_HOST_NAME, dns_name="pool.example.com"),
        ],
        pool_metadata=PoolMetadata(url="https://example.com/pool.json", hash=VRF_HASH),
    )
    decoded = Certificate.from_cbor(cert.to_cbor())
    assert decoded == cert
    assert decoded.reward_account.bech32() == reward.bech32()


def test_pool_registration_requires_reward_account():
    with pytest.raises(ValueError):
        Certificate(type=CertificateType.POOL_REGISTRATION).to_cbor_value()


def test_genesis_delegation_round_trip():
    cert = Certificate(
        type=CertificateType.GENESIS_KEY_DELEGATION,
        genesis_hash=POOL_HASH,
        genesis_delegate_hash=blake224_hash(b"delegate"),
        vrf_key_hash=VRF_HASH,
    )
    value = cert.to_cbor_value()
    assert value[0] == 5
    assert Certificate.from_cbor(cert.to_cbor()) == cert


@pytest.mark.parametrize(
    "kind, attr",
    [
        (CertificateType.STAKE_UNDELEGATION, "undelegation"),
        (CertificateType.STAKE_AUTH_COMMITTEE_HOT_CERTIFICATE, "auth_committee_hot_certificate"),
    ],
)
def test_delegation_deposit_round_trip(kind, attr):
    body = DelegationDeposit(StakeDelegationCredential(index=0, pool_key_hash=POOL_HASH), 2_000_000)
    cert = Certificate(type=kind, **{attr: body})
    value = cert.to_cbor_value()
    assert value == [int(kind), [0, POOL_HASH], 2_000_000]
    assert getattr(Certificate.from_cbor(cert.to_cbor()), attr) == body


def test_delegation_deposit_missing_body():
    with pytest.raises(ValueError):
        Certificate(type=CertificateType.STAKE_UNDELEGATION).to_cbor()


def test_move_instantaneous_rewards_has_no_encoding():
    assert Certificate(type=CertificateType.MOVE_INSTANTANEOUS_REWARDS).to_cbor_value() is None


def test_decode_errors():
    with pytest.raises(ValueError, match="empty CBOR array"):
        Certificate.from_cbor(cbor_encode([]))
    with pytest.raises(ValueError, match="invalid Type"):
        Certificate.from_cbor(cbor_encode(["x"]))
    with pytest.raises(ValueError):
        Certificate.from_cbor(cbor_encode([4, POOL_HASH]))


def test_relay_round_trip_and_unknown():
    relay = Relay(type=RelayType.SINGLE_HOST_ADDR, port=6000, ipv6=bytes(16))
    assert relay.to_cbor_value() == [0, 6000, None, bytes(16)]
    assert Relay.from_cbor_value(relay.to_cbor_value()) == relay
    assert Relay(type=9).to_cbor_value() is None
    assert Relay.from_cbor_value([9]) == Relay()
    with pytest.raises(ValueError, match="Relay"):
        Relay.from_cbor_value([])


def test_pool_metadata_round_trip():
    meta = PoolMetadata(url="https://example.com/m.json", hash=VRF_HASH)
    assert PoolMetadata.from_cbor_value(meta.to_cbor_value()) == meta
    with pytest.raises(ValueError):
        PoolMetadata.from_cbor_value(["only-url"])