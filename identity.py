"""
Stable printable identity tokens for block addresses.

Renderers and content generators key per-block data on these tokens, so the
digest must not depend on the process: it is a truncated SHA-256 over a
fixed byte encoding of the digit sequence.
"""

from __future__ import annotations

import base64
import hashlib
import struct
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from block_address import HierarchicalAddress

DIGEST_SIZE = 8  # bytes, i.e. a 64-bit identity
TOKEN_LENGTH = 12  # len(urlsafe_b64encode(8 bytes))

_DEPTH = struct.Struct(">I")
_DIGIT = struct.Struct(">II")


def encode_digits(address: HierarchicalAddress) -> bytes:
    """Canonical byte encoding: depth, then every (x, y) as big-endian u32."""
    parts = [_DEPTH.pack(address.depth())]
    parts.extend(_DIGIT.pack(d.x, d.y) for d in address)
    return b"".join(parts)


def identity_digest(address: HierarchicalAddress) -> bytes:
    return hashlib.sha256(encode_digits(address)).digest()[:DIGEST_SIZE]


def identity(address: HierarchicalAddress) -> str:
    """
    Printable token naming the block at address.

    Equal digit sequences always give equal tokens, however they were reached.
    Distinct sequences give distinct tokens up to 64-bit collision odds.
    """
    return base64.urlsafe_b64encode(identity_digest(address)).decode("ascii")
