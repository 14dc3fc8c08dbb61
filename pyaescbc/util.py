"""Utility helpers for pyaescbc.

Provides the secure random source, the buffer type alias shared by the public
API and the canonical output buffer size used before every engine call.
"""

from __future__ import annotations

import secrets
from typing import Union

from .block import BLOCK_SIZE

__all__ = ["Buffer", "as_bytes", "random_bytes", "output_length", "writable_output"]

Buffer = Union[bytes, bytearray, memoryview]


def as_bytes(data: Buffer) -> bytes:
    """Copy a buffer of any item format into bytes."""
    return bytes(memoryview(data).cast("B"))


def random_bytes(count: int) -> bytes:
    """Return ``count`` cryptographically secure random bytes."""
    return secrets.token_bytes(count)


def output_length(input_byte_count: int, is_final: bool) -> int:
    """Upper bound of bytes an engine may write for one call.

    An update may release one held-back block in addition to every full block
    of the input, and a final call writes at most one block. ``n + BLOCK_SIZE``
    covers both, for any number of bytes buffered by earlier calls, so
    ``is_final`` does not change the bound.
    """
    if input_byte_count < 0:
        raise ValueError("input_byte_count must not be negative")
    return input_byte_count + BLOCK_SIZE


def writable_output(length: int, into: Buffer | None) -> memoryview:
    """Return a writable view of at least ``length`` bytes, allocating one if into is None."""
    if into is None:
        return memoryview(bytearray(length))
    out_mv = memoryview(into).cast("B")
    if out_mv.readonly:
        raise TypeError("into must be a writable buffer")
    if len(out_mv) < length:
        raise TypeError(f"into length must be at least {length}")
    return out_mv
