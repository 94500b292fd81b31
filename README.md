# cardanokit

Building blocks for working with the Cardano blockchain from Python:

- **bech32** encoding and decoding (`cardanokit.bech32`, `cardanokit.codec`)
- **keys**: extended private/public keys with BIP32-Ed25519 derivation,
  Ed25519 and extended Ed25519 signing (`cardanokit.crypto`)
- **addresses**: base, pointer, enterprise and stake addresses, to and from
  bytes, bech32 and CBOR (`cardanokit.address`)
- **credentials, certificates and auxiliary data** with their CBOR forms
  (`cardanokit.credential`, `cardanokit.certificate`, `cardanokit.auxiliary_data`)
- **canonical CBOR helpers** (`cardanokit.encoding`)
- **CIP-30 message signing** with COSE_Key and COSE_Sign1 (`cardanokit.cose`)
- a **`cardano-signer`** command to sign and verify messages

## Installation

```
pip install cardanokit
```

For running the tests:

```
pip install "cardanokit[test]"
pytest
```

## Bech32

```python
from cardanokit import bech32

text = bech32.encode_from_base256("addr", b"\x61" + bytes(28))
hrp, data = bech32.decode_to_base256(text)
assert hrp == "addr"
```

`bech32.decode` enforces the 90-character limit; `bech32.decode_no_limit` and
`bech32.decode_to_base256` do not. Malformed input raises a subclass of
`bech32.Bech32Error` (itself a `ValueError`), such as `InvalidChecksumError`,
`InvalidSeparatorIndexError` or `MixedCaseError`.

`cardanokit.codec.encode` and `cardanokit.codec.encode_from_base256` accept
either a prefix and bytes, or any object with `prefix()` and `to_bytes()`
methods (the `Bech32Encoder` protocol). `codec.decode_into` fills an object
following the `Bech32Codec` protocol, checking its prefix and length.

## Addresses

```python
from cardanokit.address import Network, new_address, new_enterprise_address
from cardanokit.credential import new_key_credential
from cardanokit.crypto import new_pub_key

addr = new_address("addr1vx2fxv2umyhttkxyxp8x0dlpdt3k6cwng5pxj3jhsydzers66hrl8")
print(addr.type, addr.network)
assert addr.bech32() == "addr1vx2fxv2umyhttkxyxp8x0dlpdt3k6cwng5pxj3jhsydzers66hrl8"

raw = addr.to_bytes()
cbor = addr.to_cbor()
```

New addresses are built from credentials:

```python
payment = new_key_credential(
    new_pub_key("addr_vk1w0l2sr2zgfm26ztc6nl9xy8ghsk5sh6ldwemlpmp9xylzy4dtf7st80zhd")
)
enterprise = new_enterprise_address(Network.MAINNET, payment)
print(enterprise.bech32())
```

`new_base_address`, `new_pointer_address` and `new_stake_address` work the same
way; script credentials come from `credential.new_script_credential`.
Addresses of the wrong length raise `ValueError`.

## Keys and derivation

```python
from cardanokit.crypto import new_xprv_key_from_entropy

entropy = bytes(16)
password = "password"
root = new_xprv_key_from_entropy(entropy, password)

account = root.derive(0x80000000 + 1852).derive(0x80000000 + 1815).derive(0x80000000)
child = account.derive(0).derive(0)

# Soft derivation also works from the public side.
assert account.xpub_key().derive(0) == account.derive(0).xpub_key()

# Extended signatures match the key's derivation public key.
signature = child.prv_key().sign_extended(b"hello")
assert child.pub_key().verify(b"hello", signature)
```

`PrvKey.sign` produces a standard Ed25519 signature from the first 32 bytes
used as a seed; it verifies against `PrvKey.public_key()`, not `pub_key()`.

## Certificates and auxiliary data

```python
from cardanokit.certificate import Certificate, new_stake_registration_certificate

cert = new_stake_registration_certificate(child.pub_key())
assert Certificate.from_cbor(cert.to_cbor()) == cert
```

`AuxiliaryData.to_cbor` writes a map under CBOR tag 259; `from_cbor` keeps
only the metadata.

## CIP-30 signing

```python
from cardanokit.cose import new_cose_key_from_bytes, sign_with_key, verify_from_cbor_hex
from cardanokit.crypto import PrvKey

signing_key = PrvKey(bytes(64))          # 64-byte Ed25519 key
signature_hex = sign_with_key(b"hello", bytes(signing_key))
public_cose_key = new_cose_key_from_bytes(bytes(signing_key.public_key()))
verify_from_cbor_hex(signature_hex, public_cose_key.to_cbor().hex())
```

The `sign_extended_*` variants sign with the extended key instead. A failed
verification raises `ValueError`.

## The `cardano-signer` command

Sign a message with a private key given as hex or bech32 (`_sk` or `_xsk`
prefix), or read from a key file in the JSON text-envelope format:

```
cardano-signer sign --data "hello" --secret-key-file payment.skey
cardano-signer sign --data "hello" --secret-key-file payment.skey --cip30 --json
```

Verify a signature, with a public key given as hex, bech32 (`_vk` or `_xvk`)
or a key file:

```
cardano-signer verify --data "hello" --signature <signature-hex> --public-key-file payment.vkey
cardano-signer verify --data "hello" --signature <cose-sign1-hex> --public-key <cose-key-hex> --cip30
```

With `--cip30`, signing outputs a COSE key and a COSE_Sign1 message (extended
signature), and verification expects them. Errors are printed to standard
error and the command exits with status 1.

The same operations are available as functions in `cardanokit.signer_cli`:
`get_private_key`, `get_public_key`, `sign_message` and `verify_message`.

## What is not included

- No VRF keys: VRF key files are rejected, and there are no CIP-22 or nonce options.
- No connection to a node or chain indexer, no UTxO queries, no transaction
  building or submission, and no wallet storage or wallet command.