"""Cipher engine capability interface.

An engine owns one native AES-CBC session with PKCS#7 padding. Engines write
into caller-provided buffers and report the number of bytes written; they
signal failures by raising ``BackendError`` subclasses, which the Cryptor
wraps in ``EngineError``.
"""

from __future__ import annotations

import abc
import enum

from ..key import Key
from ..util import output_length

__all__ = ["Operation", "CipherEngine"]


class Operation(enum.Enum):
    ENCRYPT = 1
    DECRYPT = 0


class CipherEngine(abc.ABC):
    """One AES-CBC/PKCS#7 session bound to an operation, a key and an IV."""

    name: str = ""

    def __init__(self, operation: Operation, key: Key, iv: bytes) -> None:
        self.operation = operation
        self.key = key
        self.iv = iv

    @classmethod
    def available(cls) -> bool:
        """Return True if the engine can be used in this process."""
        return True

    @abc.abstractmethod
    def update(self, data, out: memoryview) -> int:
        """Process ``data``, write the produced bytes to ``out`` and return their count."""

    @abc.abstractmethod
    def final(self, out: memoryview) -> int:
        """Flush buffered input including padding and return the bytes written."""

    @abc.abstractmethod
    def reset(self) -> None:
        """Restart the session with the same operation, key and IV."""

    def output_length(self, input_byte_count: int, is_final: bool) -> int:
        """Output buffer size the engine needs for the next call."""
        return output_length(input_byte_count, is_final)

    def close(self) -> None:
        """Release native resources. Must be safe to call more than once."""
