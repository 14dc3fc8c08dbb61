"""AES-CBC engine backed by the ``cryptography`` hazmat primitives.

``cryptography`` runs CBC without padding, so PKCS#7 is layered in front of
the encryptor and behind the decryptor with its ``padding.PKCS7`` contexts.
"""

from __future__ import annotations

from cryptography.exceptions import AlreadyFinalized
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..block import BLOCK_SIZE
from ..errors import EngineStatus, StatusError
from .base import CipherEngine, Operation

__all__ = ["CryptographyEngine"]


class CryptographyEngine(CipherEngine):
    name = "cryptography"

    def __init__(self, operation: Operation, key, iv: bytes) -> None:
        super().__init__(operation, key, iv)
        self._init_context()

    def _init_context(self) -> None:
        try:
            cipher = Cipher(algorithms.AES(self.key.bytes), modes.CBC(self.iv))
        except ValueError as e:
            raise StatusError(EngineStatus.PARAM_ERROR, str(e), self.name) from e
        pkcs7 = padding.PKCS7(BLOCK_SIZE * 8)
        if self.operation is Operation.ENCRYPT:
            self._ctx = cipher.encryptor()
            self._padding = pkcs7.padder()
        else:
            self._ctx = cipher.decryptor()
            self._padding = pkcs7.unpadder()

    def _copy(self, produced: bytes, out: memoryview) -> int:
        n = len(produced)
        if n > len(out):
            raise StatusError(EngineStatus.BUFFER_TOO_SMALL, backend=self.name)
        out[:n] = produced
        return n

    def update(self, data, out: memoryview) -> int:
        try:
            if self.operation is Operation.ENCRYPT:
                produced = self._ctx.update(self._padding.update(data))
            else:
                produced = self._padding.update(self._ctx.update(data))
        except AlreadyFinalized as e:
            raise StatusError(
                EngineStatus.CALL_SEQUENCE_ERROR, str(e), self.name
            ) from e
        except ValueError as e:
            raise StatusError(EngineStatus.PARAM_ERROR, str(e), self.name) from e
        return self._copy(produced, out)

    def final(self, out: memoryview) -> int:
        try:
            if self.operation is Operation.ENCRYPT:
                produced = self._ctx.update(self._padding.finalize())
                produced += self._ctx.finalize()
            else:
                produced = self._padding.update(self._ctx.finalize())
                produced += self._padding.finalize()
        except AlreadyFinalized as e:
            raise StatusError(
                EngineStatus.CALL_SEQUENCE_ERROR, str(e), self.name
            ) from e
        except ValueError as e:
            # Truncated ciphertext or malformed padding
            raise StatusError(EngineStatus.DECODE_ERROR, str(e), self.name) from e
        return self._copy(produced, out)

    def reset(self) -> None:
        self._init_context()
