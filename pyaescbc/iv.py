"""CBC initialization vectors."""

from __future__ import annotations

from .block import BLOCK_SIZE
from .errors import InvalidIVSize
from .util import Buffer, as_bytes, random_bytes

__all__ = ["IV", "validate_iv", "random_iv"]


def validate_iv(iv: IV | Buffer) -> bytes:
    """Return the raw bytes of ``iv``, checking that they span one block."""
    data = iv.bytes if isinstance(iv, IV) else as_bytes(iv)
    if len(data) != BLOCK_SIZE:
        raise InvalidIVSize()
    return data


class IV:
    """Immutable initialization vector, exactly one AES block long."""

    __slots__ = ("_bytes",)

    def __init__(self, data: Buffer) -> None:
        data = as_bytes(data)
        if len(data) != BLOCK_SIZE:
            raise InvalidIVSize()
        self._bytes = data

    @classmethod
    def random(cls) -> IV:
        """Generate a random IV using the secure random source."""
        return cls(random_bytes(BLOCK_SIZE))

    @property
    def bytes(self) -> bytes:
        return self._bytes

    def __len__(self) -> int:
        return len(self._bytes)

    def __bytes__(self) -> bytes:
        return self._bytes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IV):
            return NotImplemented
        return self._bytes == other._bytes

    def __hash__(self) -> int:
        return hash((IV, self._bytes))

    def __repr__(self) -> str:
        return f"IV({self._bytes.hex()!r})"


def random_iv() -> bytes:
    """Generate random IV bytes."""
    return IV.random().bytes
