"""COSE_Key and COSE_Sign1 messages for Ed25519 signing as used by CIP-30 wallets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import cbor2
from cbor2 import CBORDecodeError, CBORTag

from cardanokit.crypto import PrvKey, PubKey

ALGORITHM_ED25519 = -8
HEADER_LABEL_ALGORITHM = 1
HEADER_LABEL_KEY_ID = 4

_KTY_OKP = 1
_CRV_ED25519 = 6
_PUBLIC_KEY_SIZE = 32
_PRIVATE_KEY_SIZE = 64
_SIGN1_TAG = 18
_SIGN1_PREFIX = 0xD2

_ALGORITHM_NAMES = {
    -7: "ES256",
    -8: "EdDSA",
    -35: "ES384",
    -36: "ES512",
    -37: "PS256",
    -38: "PS384",
    -39: "PS512",
}

Payload = Union[str, bytes, bytearray]


def _alg_name(alg: Any) -> str:
    name = _ALGORITHM_NAMES.get(alg) if isinstance(alg, int) else None
    return name if name is not None else f"unknown algorithm value {alg}"


def _wrong_alg(alg: Any) -> ValueError:
    return ValueError(
        f"alg is wrong, not Ed25519 (value {_alg_name(ALGORITHM_ED25519)}): {_alg_name(alg)}"
    )


def _loads(data: bytes) -> Any:
    try:
        return cbor2.loads(data)
    except CBORDecodeError as exc:
        raise ValueError(f"cbor: {exc}") from None


def _sorted_map(mapping: Dict[Any, Any]) -> Dict[Any, Any]:
    """Order map entries by the bytewise order of their encoded keys."""
    return dict(sorted(mapping.items(), key=lambda item: cbor2.dumps(item[0])))


def _uint_field(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"cbor: cannot unmarshal {value!r} into {what}")
    return value


def _int_field(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"cbor: cannot unmarshal {value!r} into {what}")
    return value


def _bytes_field(value: Any, what: str) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise ValueError(f"cbor: cannot unmarshal {type(value).__name__} into {what}")
    return bytes(value)


def _check_key_size(size: int) -> None:
    if size not in (_PUBLIC_KEY_SIZE, _PRIVATE_KEY_SIZE):
        raise ValueError(
            f"key is wrong size (expected {_PUBLIC_KEY_SIZE} or {_PRIVATE_KEY_SIZE}): {size}"
        )


@dataclass
class COSEKey:
    """An Ed25519 OKP key in COSE_Key form."""

    key: bytes
    kid: bytes = b""
    crv: int = _CRV_ED25519
    kty: int = _KTY_OKP
    alg: int = ALGORITHM_ED25519

    def to_cbor(self) -> bytes:
        """Encode the key as a COSE_Key map; curve, type and algorithm are always Ed25519."""
        body: Dict[int, Any] = {-1: _CRV_ED25519, -2: bytes(self.key), 1: _KTY_OKP}
        if self.kid:
            body[2] = bytes(self.kid)
        body[3] = ALGORITHM_ED25519
        return cbor2.dumps(body)

    @classmethod
    def from_cbor(cls, data: bytes) -> "COSEKey":
        """Decode and validate a COSE_Key map holding an Ed25519 key."""
        value = _loads(bytes(data))
        if not isinstance(value, dict):
            raise ValueError(f"cbor: cannot unmarshal {type(value).__name__} into COSEKey")
        crv = _uint_field(value.get(-1, 0), "crv")
        key = _bytes_field(value.get(-2, b""), "key")
        kty = _uint_field(value.get(1, 0), "kty")
        kid = _bytes_field(value.get(2, b""), "kid")
        alg = _int_field(value.get(3, 0), "alg")
        if crv != _CRV_ED25519:
            raise ValueError(f"crv key is not Ed25519 (value 6): {crv}")
        _check_key_size(len(key))
        if kty != _KTY_OKP:
            raise ValueError(f"kty is wrong, not OKP (value 1): {kty}")
        if alg != ALGORITHM_ED25519:
            raise _wrong_alg(alg)
        return cls(key=key, kid=kid, crv=crv, kty=kty, alg=alg)


@dataclass(frozen=True)
class Signer:
    """Signs with an Ed25519 private key, plainly from its seed or as an extended key."""

    key: PrvKey
    extended: bool = False
    algorithm: int = ALGORITHM_ED25519

    def sign(self, message: bytes) -> bytes:
        """Return the signature of message."""
        key = PrvKey(self.key)
        if self.extended:
            return key.sign_extended(message)
        return key.sign(message)


@dataclass(frozen=True)
class Verifier:
    """Verifies Ed25519 signatures under a public key."""

    public_key: PubKey
    algorithm: int = ALGORITHM_ED25519

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Return True if signature is valid for message; raise ValueError otherwise."""
        if not PubKey(self.public_key).verify(message, signature):
            raise ValueError("verification error")
        return True


@dataclass
class COSESign1Message:
    """A COSE_Sign1 message; its CBOR form is written without the leading tag byte."""

    payload: Optional[bytes] = None
    protected: Dict[Any, Any] = field(default_factory=dict)
    unprotected: Dict[Any, Any] = field(default_factory=dict)
    signature: bytes = b""
    _raw_protected: Optional[bytes] = field(default=None, init=False, repr=False, compare=False)

    def _protected_bytes(self) -> bytes:
        if self._raw_protected is not None:
            return self._raw_protected
        if not self.protected:
            return b""
        return cbor2.dumps(_sorted_map(self.protected))

    def _to_be_signed(self) -> bytes:
        if self.payload is None:
            raise ValueError("missing payload")
        return cbor2.dumps(["Signature1", self._protected_bytes(), b"", bytes(self.payload)])

    def sign(self, signer: Signer) -> None:
        """Sign the message in place, setting the algorithm header if it is absent."""
        if self.signature:
            raise ValueError("sign1 message is already signed")
        alg = self.protected.get(HEADER_LABEL_ALGORITHM)
        if alg is None:
            self.protected[HEADER_LABEL_ALGORITHM] = signer.algorithm
            self._raw_protected = None
        elif alg != signer.algorithm:
            raise ValueError("algorithm mismatch")
        self.signature = bytes(signer.sign(self._to_be_signed()))

    def verify(self, verifier: Verifier) -> bool:
        """Return True if the signature is valid; raise ValueError otherwise."""
        if not self.signature:
            raise ValueError("empty signature")
        alg = self.protected.get(HEADER_LABEL_ALGORITHM)
        if alg is None:
            raise ValueError("algorithm not found")
        if alg != verifier.algorithm:
            raise ValueError("algorithm mismatch")
        return verifier.verify(self._to_be_signed(), self.signature)

    def to_cbor(self) -> bytes:
        """Encode the signed message as a COSE_Sign1 array, without the tag byte."""
        if not self.signature:
            raise ValueError("empty signature")
        content = [
            self._protected_bytes(),
            _sorted_map(self.unprotected),
            None if self.payload is None else bytes(self.payload),
            bytes(self.signature),
        ]
        data = cbor2.dumps(CBORTag(_SIGN1_TAG, content))
        return data[1:] if data[0] == _SIGN1_PREFIX else data

    @classmethod
    def from_cbor(cls, data: bytes) -> "COSESign1Message":
        """Decode a COSE_Sign1 message, with or without its leading tag byte."""
        raw = bytes(data)
        if not raw:
            raise ValueError("cbor: empty data")
        if raw[0] != _SIGN1_PREFIX:
            raw = bytes([_SIGN1_PREFIX]) + raw
        value = _loads(raw)
        if not isinstance(value, CBORTag) or value.tag != _SIGN1_TAG:
            raise ValueError("cbor: invalid COSE_Sign1_Tagged object")
        content = value.value
        if not isinstance(content, (list, tuple)) or len(content) != 4:
            raise ValueError("cbor: invalid COSE_Sign1 array")
        raw_protected = _bytes_field(content[0], "protected header")
        protected: Dict[Any, Any] = {}
        if raw_protected:
            decoded = _loads(raw_protected)
            if not isinstance(decoded, dict):
                raise ValueError("cbor: protected header is not a map")
            protected = dict(decoded)
        unprotected = content[1]
        if not isinstance(unprotected, dict):
            raise ValueError("cbor: unprotected header is not a map")
        payload = content[2]
        if payload is not None:
            payload = _bytes_field(payload, "payload")
        signature = _bytes_field(content[3], "signature")
        if not signature:
            raise ValueError("empty signature")
        message = cls(
            payload=payload,
            protected=protected,
            unprotected=dict(unprotected),
            signature=signature,
        )
        message._raw_protected = raw_protected
        return message


def new_cose_key_from_bytes(key: bytes) -> COSEKey:
    """Wrap a 32-byte public or 64-byte private key as a COSE key."""
    _check_key_size(len(key))
    return COSEKey(key=bytes(key))


def new_cose_key_from_cbor_hex(cbor_hex: str) -> COSEKey:
    """Decode a COSE key from the hex of its CBOR form."""
    return COSEKey.from_cbor(bytes.fromhex(cbor_hex))


def new_cose_sign1_message_from_cbor_hex(cbor_hex: str) -> COSESign1Message:
    """Decode a COSE_Sign1 message from hex."""
    return COSESign1Message.from_cbor(bytes.fromhex(cbor_hex))


def new_cose_sign1_message_with_payload(
    payload: Payload, kid: Optional[bytes] = None
) -> COSESign1Message:
    """Create an unsigned Ed25519 message; kid, if given, also fills the address header."""
    body = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
    protected: Dict[Any, Any] = {HEADER_LABEL_ALGORITHM: ALGORITHM_ED25519}
    if kid is not None:
        protected[HEADER_LABEL_KEY_ID] = bytes(kid)
        protected["address"] = bytes(kid)
    return COSESign1Message(payload=body, protected=protected, unprotected={"hashed": False})


def _new_signer_from_key(key: COSEKey, extended: bool) -> Signer:
    if len(key.key) != _PRIVATE_KEY_SIZE:
        raise ValueError(f"key is wrong size (expected: {_PRIVATE_KEY_SIZE}): {len(key.key)}")
    if key.alg != ALGORITHM_ED25519:
        raise _wrong_alg(key.alg)
    return Signer(key=PrvKey(key.key), extended=extended)


def _sign_payload(payload: Payload, signer: Signer) -> str:
    message = new_cose_sign1_message_with_payload(payload, None)
    message.sign(signer)
    return message.to_cbor().hex()


def _sign_with_raw_key(payload: Payload, key: bytes, extended: bool) -> str:
    if len(key) != _PRIVATE_KEY_SIZE:
        raise ValueError(f"key is wrong size (expected: {_PRIVATE_KEY_SIZE}): {len(key)}")
    return _sign_payload(payload, _new_signer_from_key(COSEKey(key=bytes(key)), extended))


def new_signer_from_cose_key(key: COSEKey) -> Signer:
    """Create a standard Ed25519 signer from a private COSE key."""
    return _new_signer_from_key(key, extended=False)


def new_signer_from_cbor_hex(cbor_hex: str) -> Signer:
    """Create a standard Ed25519 signer from the hex of a private COSE key."""
    return new_signer_from_cose_key(new_cose_key_from_cbor_hex(cbor_hex))


def sign_payload_with_key_from_cbor_hex(payload: Payload, key: str) -> str:
    """Sign payload with a private COSE key given as hex; return the message hex."""
    return _sign_payload(payload, new_signer_from_cbor_hex(key))


def sign_with_key(payload: Payload, key: bytes) -> str:
    """Sign payload with a raw 64-byte private key; return the message hex."""
    return _sign_with_raw_key(payload, key, extended=False)


def new_extended_signer_from_cose_key(key: COSEKey) -> Signer:
    """Create an extended Ed25519 signer from a private COSE key."""
    return _new_signer_from_key(key, extended=True)


def new_extended_signer_from_cbor_hex(cbor_hex: str) -> Signer:
    """Create an extended Ed25519 signer from the hex of a private COSE key."""
    return new_extended_signer_from_cose_key(new_cose_key_from_cbor_hex(cbor_hex))


def sign_extended_payload_with_key_from_cbor_hex(payload: Payload, key: str) -> str:
    """Sign payload with an extended private COSE key given as hex; return the message hex."""
    return _sign_payload(payload, new_extended_signer_from_cbor_hex(key))


def sign_extended_with_key(payload: Payload, key: bytes) -> str:
    """Sign payload with a raw 64-byte extended private key; return the message hex."""
    return _sign_with_raw_key(payload, key, extended=True)


def new_verifier_from_cose_key(key: COSEKey) -> Verifier:
    """Create a verifier from a public COSE key."""
    if len(key.key) != _PUBLIC_KEY_SIZE:
        raise ValueError(f"key is wrong size (expected: {_PUBLIC_KEY_SIZE}): {len(key.key)}")
    if key.alg != ALGORITHM_ED25519:
        raise _wrong_alg(key.alg)
    return Verifier(public_key=PubKey(key.key))


def new_verifier_from_cbor_hex(cbor_hex: str) -> Verifier:
    """Create a verifier from the hex of a public COSE key."""
    return new_verifier_from_cose_key(new_cose_key_from_cbor_hex(cbor_hex))


def verify_from_cbor_hex(signature: str, key: str) -> bool:
    """Verify a COSE_Sign1 message hex against a public COSE key hex; raise on failure."""
    verifier = new_verifier_from_cbor_hex(key)
    message = new_cose_sign1_message_from_cbor_hex(signature)
    return message.verify(verifier)