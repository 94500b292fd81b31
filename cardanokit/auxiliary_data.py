"""Transaction auxiliary data: metadata and scripts under CBOR tag 259."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from cbor2 import CBORTag

from cardanokit.encoding import cbor_decode, cbor_encode

_AUXILIARY_DATA_TAG = 259
_MAX_UINT64 = (1 << 64) - 1

Metadata = Dict[int, Any]


def _check_metadata(value: Any) -> Metadata:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"cbor: cannot unmarshal {type(value).__name__} into Metadata")
    for key in value:
        if isinstance(key, bool) or not isinstance(key, int) or not 0 <= key <= _MAX_UINT64:
            raise ValueError(f"cbor: cannot unmarshal metadata key {key!r} into uint")
    return dict(value)


@dataclass
class AuxiliaryData:
    """The auxiliary data of a transaction."""

    metadata: Metadata = field(default_factory=dict)
    native_scripts: Optional[Any] = None
    plutus_scripts: Optional[Any] = None

    def to_cbor(self) -> bytes:
        """Return the canonical CBOR encoding, a tag-259 map omitting empty fields."""
        body: Dict[int, Any] = {}
        if self.metadata:
            body[0] = dict(self.metadata)
        if self.native_scripts is not None:
            body[1] = self.native_scripts
        if self.plutus_scripts is not None:
            body[2] = self.plutus_scripts
        return cbor_encode(CBORTag(_AUXILIARY_DATA_TAG, body))

    @classmethod
    def from_cbor(cls, data: bytes) -> "AuxiliaryData":
        """Decode tag-259 auxiliary data; only the metadata is kept."""
        value = cbor_decode(data)
        if not isinstance(value, CBORTag) or value.tag != _AUXILIARY_DATA_TAG:
            raise ValueError("cbor: wrong tag, expected auxiliary data tag 259")
        body = value.value
        if not isinstance(body, dict):
            raise ValueError(f"cbor: cannot unmarshal {type(body).__name__} into AuxiliaryData")
        return cls(metadata=_check_metadata(body.get(0)))