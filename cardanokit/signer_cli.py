"""Command line tool to sign messages and verify signatures with Ed25519 keys."""

from __future__ import annotations

import argparse
import binascii
import json
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from cardanokit import cose
from cardanokit.crypto import PrvKey, PubKey, XPrvKey, XPubKey, new_prv_key, new_pub_key
from cardanokit.crypto import new_xprv_key, new_xpub_key
from cardanokit.encoding import get_bytes_from_cbor_hex

_PROG = "cardano-signer"
_DESCRIPTION = "A CLI application to manage signing messages in Cardano."


def _try_hex(text: str) -> Optional[bytes]:
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError):
        return None


def _bech32_prefix(text: str) -> str:
    return text.split("1", 1)[0]


def _read_key_file(path: str) -> Tuple[str, str]:
    content = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(content, dict) or not all(
        isinstance(value, str) for value in content.values()
    ):
        raise ValueError(f"invalid key file: {path}")
    return content.get("type", ""), content.get("cborHex", "")


def get_private_key(secret_key: str = "", secret_key_file: str = "") -> bytes:
    """Return the private key given as hex, bech32 (_sk or _xsk) or a key file."""
    if secret_key:
        raw = _try_hex(secret_key)
        if raw is not None:
            return raw
        prefix = _bech32_prefix(secret_key)
        if prefix.endswith("_sk"):
            return bytes(new_prv_key(secret_key))
        if prefix.endswith("_xsk"):
            return bytes(new_xprv_key(secret_key).prv_key())
        raise ValueError("invalid private key, hex or bech32 required")

    if secret_key_file:
        key_type, cbor_hex = _read_key_file(secret_key_file)
        if key_type.startswith("VrfSigningKey_"):
            raise ValueError("VRF signing keys are not supported")
        data = get_bytes_from_cbor_hex(cbor_hex)
        if "SigningKey" not in key_type:
            raise ValueError("unknown private key format")
        if "Extended" in key_type:
            return bytes(XPrvKey(data).prv_key())
        return bytes(PrvKey(data))

    raise ValueError("missing private key to sign data")


def get_public_key(public_key: str = "", public_key_file: str = "") -> bytes:
    """Return the public key given as hex, bech32 (_vk or _xvk) or a key file."""
    if public_key:
        raw = _try_hex(public_key)
        if raw is not None:
            return raw
        prefix = _bech32_prefix(public_key)
        if prefix.endswith("_vk"):
            return bytes(new_pub_key(public_key))
        if prefix.endswith("_xvk"):
            return bytes(new_xpub_key(public_key).pub_key())
        raise ValueError("invalid public key, hex or bech32 required")

    if public_key_file:
        key_type, cbor_hex = _read_key_file(public_key_file)
        if key_type.startswith("VrfVerificationKey_"):
            raise ValueError("VRF verification keys are not supported")
        data = get_bytes_from_cbor_hex(cbor_hex)
        if "VerificationKey" not in key_type:
            raise ValueError("unknown public key format")
        if "Extended" in key_type:
            return bytes(XPubKey(data).pub_key())
        return bytes(PubKey(data))

    raise ValueError("missing public key to verify data and signature")


def sign_message(data: str, private_key: bytes, use_cip30: bool = False) -> Tuple[str, str]:
    """Sign data; return the public key and the signature, both as hex.

    With CIP-30 the public key is a COSE key and the signature a COSE_Sign1
    message, both in CBOR.
    """
    if use_cip30:
        cose_prv_key = cose.new_cose_key_from_bytes(private_key)
        cose_pub_key = cose.new_cose_key_from_bytes(PrvKey(cose_prv_key.key).pub_key())
        signer = cose.new_extended_signer_from_cose_key(cose_prv_key)
        message = cose.new_cose_sign1_message_with_payload(data, None)
        try:
            message.sign(signer)
        except ValueError as exc:
            raise ValueError(f"unable to sign: {exc}") from None
        return cose_pub_key.to_cbor().hex(), message.to_cbor().hex()

    key = PrvKey(private_key)
    signature = key.sign(data.encode("utf-8"))
    return str(key.pub_key()), signature.hex()


def verify_message(data: str, signature: str, public_key: bytes, use_cip30: bool = False) -> bool:
    """Return True if signature (hex) is valid for data; raise ValueError otherwise."""
    if not signature:
        raise ValueError("signature is empty, nothing to verify")
    sig_bytes = _try_hex(signature)
    if sig_bytes is None:
        raise ValueError("invalid signature, expected valid hex-encoded string")

    if use_cip30:
        return cose.verify_from_cbor_hex(signature, bytes(public_key).hex())

    if not PubKey(public_key).verify(data.encode("utf-8"), sig_bytes):
        raise ValueError("verify failed")
    return True


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--cip30", action="store_true", help="Use CIP30 (COSE)")
    common.add_argument("--data", default="", help="message to sign/verify")
    common.add_argument("--json", action="store_true", help="Output formatted as JSON")

    parser = argparse.ArgumentParser(prog=_PROG, description=_DESCRIPTION)
    commands = parser.add_subparsers(dest="command")

    sign = commands.add_parser(
        "sign", parents=[common], help="Sign a message using a private/secret key"
    )
    sign.add_argument("--secret-key", default="", help="private key to sign (bech32 or hex)")
    sign.add_argument("--secret-key-file", default="", help="private key file path")

    verify = commands.add_parser(
        "verify", parents=[common], help="Verify a signature of a message using a public key"
    )
    verify.add_argument("--signature", default="", help="signature of the signed message")
    verify.add_argument("--public-key", default="", help="public key (bech32 or hex)")
    verify.add_argument("--public-key-file", default="", help="public key file path")
    return parser


def _run_sign(args: argparse.Namespace) -> None:
    private_key = get_private_key(args.secret_key, args.secret_key_file)
    public_key, signature = sign_message(args.data, private_key, args.cip30)
    if args.json:
        print(json.dumps({"publicKey": public_key, "signature": signature}, indent=2))
    else:
        print("public key: ", public_key)
        print("signature: ", signature)


def _run_verify(args: argparse.Namespace) -> None:
    if not args.signature:
        raise ValueError("signature is empty, nothing to verify")
    if _try_hex(args.signature) is None:
        raise ValueError("invalid signature, expected valid hex-encoded string")
    public_key = get_public_key(args.public_key, args.public_key_file)
    verify_message(args.data, args.signature, public_key, args.cip30)
    print("success, signature verified")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the signer command line; return the exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    try:
        if args.command == "sign":
            _run_sign(args)
        else:
            _run_verify(args)
    except (ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())