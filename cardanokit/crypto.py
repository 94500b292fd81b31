"""Ed25519 keys, BIP32-Ed25519 derivation and extended-key signatures."""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass

from nacl import bindings
from nacl.exceptions import CryptoError
from nacl.signing import SigningKey, VerifyKey

from cardanokit import bech32 as _bech32

_L = 2**252 + 27742317777372353535851937790883648493
_IDENTITY = bytes([1]) + bytes(31)
_HARDENED = 0x80000000
_PUBLIC_KEY_SIZE = 32
_PRIVATE_KEY_SIZE = 64
_SIGNATURE_SIZE = 64


def blake224_hash(data: bytes) -> bytes:
    """Return the 28-byte blake2b digest of data."""
    return hashlib.blake2b(bytes(data), digest_size=28).digest()


def _clamped_scalar(raw: bytes) -> int:
    if len(raw) != 32:
        raise ValueError(f"invalid scalar length: {len(raw)}")
    clamped = bytearray(raw)
    clamped[0] &= 248
    clamped[31] &= 127
    clamped[31] |= 64
    return int.from_bytes(clamped, "little")


def _base_mult(scalar: int) -> bytes:
    scalar %= _L
    if scalar == 0:
        return _IDENTITY
    return bindings.crypto_scalarmult_ed25519_base_noclamp(scalar.to_bytes(32, "little"))


def _point_add(p: bytes, q: bytes) -> bytes:
    try:
        return bindings.crypto_core_ed25519_add(bytes(p), bytes(q))
    except CryptoError as exc:
        raise ValueError("invalid curve point") from exc


def _add28_mul8(x: bytes, y: bytes) -> bytes:
    total = int.from_bytes(x[:32], "little") + 8 * int.from_bytes(y[:28], "little")
    return (total % (1 << 256)).to_bytes(32, "little")


def _add_mod256(x: bytes, y: bytes) -> bytes:
    total = int.from_bytes(x[:32], "little") + int.from_bytes(y[:32], "little")
    return (total % (1 << 256)).to_bytes(32, "little")


def _serialize_index(index: int) -> bytes:
    if not 0 <= index <= 0xFFFFFFFF:
        raise ValueError(f"derivation index out of range: {index}")
    return index.to_bytes(4, "little")


def _hmac512(key: bytes, *parts: bytes) -> bytes:
    return hmac.new(bytes(key), b"".join(parts), hashlib.sha512).digest()


class PubKey(bytes):
    """An ed25519 public key."""

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Report whether signature is a valid signature of message by this key."""
        if len(self) != _PUBLIC_KEY_SIZE:
            raise ValueError(f"ed25519: bad public key length: {len(self)}")
        if len(signature) != _SIGNATURE_SIZE:
            return False
        try:
            VerifyKey(bytes(self)).verify(bytes(message), bytes(signature))
        except CryptoError:
            return False
        return True

    def bech32(self, prefix: str) -> str:
        """Return the key encoded as bech32 under prefix."""
        return _bech32.encode_from_base256(prefix, self)

    def hash(self) -> bytes:
        """Return the blake2b-224 hash of the key."""
        return blake224_hash(self)

    def __str__(self) -> str:
        return self.hex()


class PrvKey(bytes):
    """An ed25519 extended private key: scalar (32 bytes) followed by nonce key (32 bytes)."""

    def seed(self) -> bytes:
        """Return the first 32 bytes of the key."""
        return bytes(self[:32])

    def pub_key(self) -> PubKey:
        """Return the public key of the clamped, unhashed scalar (used for derivation)."""
        return PubKey(_base_mult(_clamped_scalar(self.seed())))

    def public_key(self) -> PubKey:
        """Return the standard ed25519 public key of the seed."""
        return PubKey(bytes(SigningKey(self.seed()).verify_key))

    def bech32(self, prefix: str) -> str:
        """Return the key encoded as bech32 under prefix."""
        return _bech32.encode_from_base256(prefix, self)

    def sign(self, message: bytes) -> bytes:
        """Sign message with standard ed25519 using the seed."""
        return SigningKey(self.seed()).sign(bytes(message)).signature

    def sign_extended(self, message: bytes) -> bytes:
        """Sign message with the extended key, without hashing the scalar."""
        if len(self) != _PRIVATE_KEY_SIZE:
            raise ValueError(f"ed25519: bad private key length: {len(self)}")
        message = bytes(message)
        x = _clamped_scalar(self[:32])
        m = int.from_bytes(hashlib.sha512(self[32:] + message).digest(), "little") % _L
        encoded_r = _base_mult(m)
        hram = hashlib.sha512(encoded_r + self.pub_key() + message).digest()
        r = int.from_bytes(hram, "little") % _L
        s = (r * x + m) % _L
        return encoded_r + s.to_bytes(32, "little")

    def extended_signer(self) -> "ExtendedEd25519Signer":
        """Return a signer that uses extended signatures."""
        return ExtendedEd25519Signer(self)

    def __str__(self) -> str:
        return self.hex()


@dataclass(frozen=True)
class ExtendedEd25519Signer:
    """Signs messages with an extended private key."""

    key: PrvKey

    def public(self) -> PubKey:
        """Return the public key matching the signatures."""
        return PrvKey(self.key).pub_key()

    def sign(self, message: bytes) -> bytes:
        """Return the extended signature of message."""
        return PrvKey(self.key).sign_extended(message)


class XPubKey(bytes):
    """A public key (32 bytes) followed by a chain code (32 bytes)."""

    def derive(self, index: int) -> "XPubKey":
        """Derive a child public key; only soft indexes are allowed."""
        sindex = _serialize_index(index)
        if index >= _HARDENED:
            raise ValueError("expected soft derivation")
        pub = bytes(self[:32])
        chain_code = bytes(self[32:64])
        z = _hmac512(chain_code, b"\x02", pub, sindex)
        zl8 = int.from_bytes(_add28_mul8(bytes(32), z[:32]), "little")
        if zl8 >= _L:
            raise ValueError("invalid scalar encoding")
        _point_add(pub, _IDENTITY)  # validates the parent point
        child = pub if zl8 == 0 else _point_add(pub, _base_mult(zl8))
        cc = _hmac512(chain_code, b"\x03", pub, sindex)[32:64]
        return XPubKey(child + cc)

    def pub_key(self) -> PubKey:
        """Return the public key part."""
        return PubKey(self[:32])

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Report whether signature is valid for message under the public key part."""
        return self.pub_key().verify(message, signature)

    def __str__(self) -> str:
        return self.hex()


class XPrvKey(bytes):
    """An extended private key (64 bytes) followed by a chain code (32 bytes)."""

    def derive(self, index: int) -> "XPrvKey":
        """Derive a child private key using BIP32-Ed25519."""
        sindex = _serialize_index(index)
        xpriv = bytes(self[:64])
        chain_code = bytes(self[64:])
        if index >= _HARDENED:
            z = _hmac512(chain_code, b"\x00", xpriv, sindex)
            cc = _hmac512(chain_code, b"\x01", xpriv, sindex)
        else:
            pub = bytes(self.pub_key())
            z = _hmac512(chain_code, b"\x02", pub, sindex)
            cc = _hmac512(chain_code, b"\x03", pub, sindex)
        kl = _add28_mul8(self[:32], z[:32])
        kr = _add_mod256(self[32:64], z[32:64])
        return XPrvKey(kl + kr + cc[32:])

    def bech32(self, prefix: str) -> str:
        """Return the key encoded as bech32 under prefix."""
        return _bech32.encode_from_base256(prefix, self)

    def prv_key(self) -> PrvKey:
        """Return the 64-byte extended private key."""
        return PrvKey(self[:64])

    def xpub_key(self) -> XPubKey:
        """Return the extended public key: public key and chain code."""
        return XPubKey(self.prv_key().pub_key() + self[64:])

    def pub_key(self) -> PubKey:
        """Return the public key."""
        return self.prv_key().pub_key()

    def sign(self, message: bytes) -> bytes:
        """Sign message with standard ed25519 using the seed."""
        return self.prv_key().sign(message)

    def seed(self) -> bytes:
        """Return the first 32 bytes of the key."""
        return self.prv_key().seed()

    def __str__(self) -> str:
        return self.hex()


def new_xprv_key(bech: str) -> XPrvKey:
    """Create an extended private key from its bech32 encoding."""
    _, data = _bech32.decode_to_base256(bech)
    return XPrvKey(data)


def new_xprv_key_from_entropy(entropy: bytes, password: str) -> XPrvKey:
    """Create a root extended private key from mnemonic entropy and a password."""
    key = bytearray(
        hashlib.pbkdf2_hmac("sha512", password.encode("utf-8"), bytes(entropy), 4096, 96)
    )
    key[0] &= 0xF8
    key[31] = (key[31] & 0x1F) | 0x40
    return XPrvKey(key)


def new_xpub_key(bech: str) -> XPubKey:
    """Create an extended public key from its bech32 encoding."""
    _, data = _bech32.decode_to_base256(bech)
    return XPubKey(data)


def new_pub_key(bech: str) -> PubKey:
    """Create a public key from its bech32 encoding."""
    _, data = _bech32.decode_to_base256(bech)
    return PubKey(data)


def new_prv_key(bech: str) -> PrvKey:
    """Create a private key from its bech32 encoding."""
    _, data = _bech32.decode_to_base256(bech)
    return PrvKey(data)