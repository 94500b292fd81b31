"""Cardano primitives: bech32, keys, addresses, certificates, CIP-30 signing and a signer command."""

__version__ = "0.1.0"

__all__ = [
    "address",
    "auxiliary_data",
    "bech32",
    "certificate",
    "codec",
    "cose",
    "credential",
    "crypto",
    "encoding",
    "signer_cli",
]