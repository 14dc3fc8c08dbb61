"""AES key material."""

from __future__ import annotations

from enum import IntEnum

from .errors import InvalidKeySize
from .util import Buffer, as_bytes, random_bytes

__all__ = ["Key", "KeySize", "random_key"]


class KeySize(IntEnum):
    """Possible key sizes, valued in bytes."""

    K128 = 16
    K192 = 24
    K256 = 32

    @property
    def bits(self) -> int:
        return self.value * 8

    @classmethod
    def from_bits(cls, bits: int) -> KeySize:
        """Return the key size of a 128, 192 or 256 bit key."""
        if bits % 8:
            raise InvalidKeySize()
        return cls.from_length(bits // 8)

    @classmethod
    def from_length(cls, length: int) -> KeySize:
        try:
            return cls(length)
        except ValueError:
            raise InvalidKeySize() from None

    @classmethod
    def coerce(cls, size: KeySize | int) -> KeySize:
        """Accept a KeySize, a byte length (16, 24, 32) or a bit length (128, 192, 256)."""
        if isinstance(size, KeySize):
            return size
        size = int(size)
        if size in (128, 192, 256):
            return cls.from_bits(size)
        return cls.from_length(size)


class Key:
    """Immutable AES key.

    Usage:
        key = Key(bytes(32))
        key = Key.random(KeySize.K128)
    """

    __slots__ = ("_bytes", "_size")

    def __init__(self, data: Buffer) -> None:
        """Create a key from raw bytes.

        Args:
            data: Key material, 16, 24 or 32 bytes long.

        Raises:
            InvalidKeySize: If the length is not a valid AES key length.
        """
        data = as_bytes(data)
        self._size = KeySize.from_length(len(data))
        self._bytes = data

    @classmethod
    def random(cls, size: KeySize | int = KeySize.K256) -> Key:
        """Generate a random key using the secure random source.

        Args:
            size: A KeySize, a byte length or a bit length (128, 192, 256).
        """
        size = KeySize.coerce(size)
        return cls(random_bytes(size))

    @property
    def bytes(self) -> bytes:
        return self._bytes

    @property
    def size(self) -> KeySize:
        return self._size

    def __len__(self) -> int:
        return len(self._bytes)

    def __bytes__(self) -> bytes:
        return self._bytes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return self._bytes == other._bytes

    def __hash__(self) -> int:
        return hash((Key, self._bytes))

    def __repr__(self) -> str:
        return f"<Key AES-{self._size.bits}>"


def random_key(size: KeySize | int = KeySize.K256) -> bytes:
    """Generate random key bytes; ``size`` is read as in ``Key.random``."""
    return Key.random(size).bytes
