"""
DecentraID IPFS Service
Content addressing for encrypted blobs.

Stands in for IPFS pinning: the handle is a pure function of the input, so
a real pinning client can replace it without changing callers.
"""

import json
from typing import Any, Union

from decentraid.services.encryption import compute_sha256


def canonical_bytes(data: Union[bytes, str, Any]) -> bytes:
    """
    Canonical byte representation used for addressing.

    Bytes pass through, strings are UTF-8 encoded, and anything else is
    serialized as JSON with sorted keys and compact separators.
    """
    if isinstance(data, bytes):
        return data
    if isinstance(data, str):
        return data.encode("utf-8")
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class ContentAddresser:
    """
    Deterministic content handles.

    A handle is the prefix followed by the leading hex characters of the
    SHA-256 digest of the canonical input.
    """

    def __init__(self, prefix: str = "Qm", length: int = 44):
        self.prefix = prefix
        self.length = length

    def address_of(self, data: Union[bytes, str, Any]) -> str:
        """
        Compute the content handle of data.

        Args:
            data: Bytes, text, or a JSON-serializable value

        Returns:
            Content handle, e.g. "Qm" + 44 hex chars
        """
        digest = compute_sha256(canonical_bytes(data))
        return self.prefix + digest[:self.length]
