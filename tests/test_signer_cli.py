import json

import pytest

from cardanokit.crypto import PrvKey, XPrvKey
from cardanokit.encoding import get_cbor_hex_from_bytes
from cardanokit.signer_cli import (
    get_private_key,
    get_public_key,
    main,
    sign_message,
    verify_message,
)

KEY = bytes(range(64))
XKEY = bytes(range(96))


def _write_key_file(tmp_path, key_type, payload):
    path = tmp_path / "key.json"
    path.write_text(
        json.dumps({"type": key_type, "description": "", "cborHex": get_cbor_hex_from_bytes(payload)})
    )
    return str(path)


def test_private_key_from_hex():
    assert get_private_key(KEY.hex()) == KEY


def test_private_key_from_bech32_sk():
    encoded = PrvKey(KEY).bech32("ed25519_sk")
    assert get_private_key(encoded) == KEY


def test_private_key_from_bech32_xsk():
    encoded = XPrvKey(XKEY).bech32("root_xsk")
    assert get_private_key(encoded) == XKEY[:64]


def test_private_key_bad_prefix():
    encoded = PrvKey(KEY).bech32("addr")
    with pytest.raises(ValueError, match="hex or bech32 required"):
        get_private_key(encoded)


def test_private_key_missing():
    with pytest.raises(ValueError):
        get_private_key("", "")


def test_private_key_from_file(tmp_path):
    path = _write_key_file(tmp_path, "PaymentSigningKeyShelley_ed25519", KEY[:32])
    assert get_private_key(secret_key_file=path) == KEY[:32]


def test_extended_private_key_from_file(tmp_path):
    path = _write_key_file(tmp_path, "PaymentExtendedSigningKeyShelley_ed25519_bip32", XKEY)
    assert get_private_key(secret_key_file=path) == XKEY[:64]


def test_private_key_file_unknown_type(tmp_path):
    path = _write_key_file(tmp_path, "SomethingElse", KEY)
    with pytest.raises(ValueError, match="unknown private key format"):
        get_private_key(secret_key_file=path)


def test_private_key_file_vrf_unsupported(tmp_path):
    path = _write_key_file(tmp_path, "VrfSigningKey_PraosVRF", KEY)
    with pytest.raises(ValueError, match="VRF"):
        get_private_key(secret_key_file=path)


def test_public_key_from_hex_and_bech32():
    pub = PrvKey(KEY).pub_key()
    assert get_public_key(pub.hex()) == pub
    assert get_public_key(pub.bech32("stake_vk")) == pub


def test_public_key_from_bech32_xvk():
    xpub = XPrvKey(XKEY).xpub_key()
    encoded = XPrvKey(XKEY).xpub_key().__class__(xpub)
    from cardanokit import bech32

    text = bech32.encode_from_base256("acct_xvk", encoded)
    assert get_public_key(text) == xpub[:32]


def test_public_key_from_file(tmp_path):
    pub = PrvKey(KEY).pub_key()
    path = _write_key_file(tmp_path, "PaymentVerificationKeyShelley_ed25519", pub)
    assert get_public_key(public_key_file=path) == pub


def test_extended_public_key_from_file(tmp_path):
    xpub = XPrvKey(XKEY).xpub_key()
    path = _write_key_file(tmp_path, "PaymentExtendedVerificationKeyShelley_ed25519_bip32", xpub)
    assert get_public_key(public_key_file=path) == xpub[:32]


def test_public_key_missing():
    with pytest.raises(ValueError, match="missing public key"):
        get_public_key()


def test_plain_sign_and_verify():
    public_key, signature = sign_message("hello", KEY, False)
    assert public_key == PrvKey(KEY).pub_key().hex()
    assert len(bytes.fromhex(signature)) == 64
    assert verify_message("hello", signature, PrvKey(KEY).public_key(), False) is True


def test_plain_verify_wrong_data():
    _, signature = sign_message("hello", KEY, False)
    with pytest.raises(ValueError, match="verify failed"):
        verify_message("goodbye", signature, PrvKey(KEY).public_key(), False)


def test_cip30_round_trip():
    public_key, signature = sign_message("hello", KEY, True)
    assert verify_message("hello", signature, bytes.fromhex(public_key), True) is True


def test_cip30_tampered_signature_fails():
    public_key, signature = sign_message("hello", KEY, True)
    raw = bytearray(bytes.fromhex(signature))
    raw[-1] ^= 1
    with pytest.raises(ValueError):
        verify_message("hello", raw.hex(), bytes.fromhex(public_key), True)


def test_verify_empty_signature():
    with pytest.raises(ValueError, match="signature is empty"):
        verify_message("hello", "", PrvKey(KEY).public_key(), False)


def test_verify_non_hex_signature():
    with pytest.raises(ValueError, match="invalid signature"):
        verify_message("hello", "zz", PrvKey(KEY).public_key(), False)


def test_main_sign_json(capsys):
    assert main(["sign", "--data", "hello", "--secret-key", KEY.hex(), "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == dict(zip(("publicKey", "signature"), sign_message("hello", KEY, False)))


def test_main_sign_text(capsys):
    assert main(["sign", "--data", "hello", "--secret-key", KEY.hex()]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "public key:  " + PrvKey(KEY).pub_key().hex()
    assert lines[1].startswith("signature:  ")


def test_main_verify_cip30_success(capsys):
    public_key, signature = sign_message("hello", KEY, True)
    code = main(
        ["verify", "--cip30", "--data", "hello", "--signature", signature, "--public-key", public_key]
    )
    assert code == 0
    assert capsys.readouterr().out.strip() == "success, signature verified"


def test_main_verify_failure(capsys):
    _, signature = sign_message("hello", KEY, False)
    code = main(
        [
            "verify",
            "--data",
            "other",
            "--signature",
            signature,
            "--public-key",
            PrvKey(KEY).public_key().hex(),
        ]
    )
    assert code == 1
    assert "verify failed" in capsys.readouterr().err


def test_main_sign_missing_key(capsys):
    assert main(["sign", "--data", "hello"]) == 1
    assert "Error:" in capsys.readouterr().err