"""AES block constants."""

from enum import IntEnum

__all__ = ["BlockSize", "BLOCK_SIZE"]


class BlockSize(IntEnum):
    """Possible block sizes, in bytes."""

    K128 = 16


BLOCK_SIZE = int(BlockSize.K128)
