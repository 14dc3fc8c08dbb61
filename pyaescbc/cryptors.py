"""Encryptor and Decryptor: single-direction facades over Cryptor."""

from __future__ import annotations

from .cryptor import Cryptor
from .engine import CipherEngine, Operation
from .iv import IV
from .key import Key
from .util import Buffer

__all__ = ["Encryptor", "Decryptor", "encrypt", "decrypt"]


class _Facade:
    __slots__ = ("_cryptor",)

    _OPERATION: Operation

    def __init__(
        self,
        key: Key | Buffer,
        iv: IV | Buffer,
        *,
        engine: str | type[CipherEngine] | None = None,
    ) -> None:
        self._cryptor = Cryptor(self._OPERATION, key, iv, engine=engine)

    @property
    def engine(self) -> str:
        return self._cryptor.engine

    @property
    def bytes_in(self) -> int:
        """Total bytes fed since creation or the last reset()."""
        return self._cryptor.bytes_in

    @property
    def bytes_out(self) -> int:
        """Total bytes produced since creation or the last reset()."""
        return self._cryptor.bytes_out

    def reset(self) -> None:
        """Restart with the same key and IV."""
        self._cryptor.reset()

    def close(self) -> None:
        self._cryptor.close()

    def _one_shot(self, data: Buffer) -> bytes:
        self._cryptor.reset()
        return self._cryptor.update(data) + self._cryptor.final()  # type: ignore[operator]

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class Encryptor(_Facade):
    """Incremental and one-shot AES-CBC encryptor with PKCS#7 padding.

    - encrypt_next(message[, into]) -> ciphertext for the complete blocks so far
    - encrypt_final([into]) -> last padded block
    - encrypt(message) -> whole ciphertext, after an implicit reset()

    Reusing one key and IV pair for several messages leaks equal prefixes;
    that choice is left to the caller.
    """

    __slots__ = ()

    _OPERATION = Operation.ENCRYPT

    def encrypt_next(
        self, message: Buffer, into: Buffer | None = None
    ) -> bytes | memoryview:
        """Encrypt a chunk of the message.

        Raises:
            EngineError: If called after encrypt_final() without reset().
        """
        return self._cryptor.update(message, into)

    def encrypt_final(self, into: Buffer | None = None) -> bytes | memoryview:
        """Pad and encrypt the buffered tail."""
        return self._cryptor.final(into)

    def encrypt(self, message: Buffer) -> bytes:
        """Encrypt a whole message from a fresh chaining state."""
        return self._one_shot(message)

    update = encrypt_next
    final = encrypt_final


class Decryptor(_Facade):
    """Incremental and one-shot AES-CBC decryptor with PKCS#7 padding.

    - decrypt_next(ct[, into]) -> plaintext, holding back the last block
    - decrypt_final([into]) -> last block with its padding removed
    - decrypt(ct) -> whole plaintext, after an implicit reset()
    """

    __slots__ = ()

    _OPERATION = Operation.DECRYPT

    def decrypt_next(self, ct: Buffer, into: Buffer | None = None) -> bytes | memoryview:
        return self._cryptor.update(ct, into)

    def decrypt_final(self, into: Buffer | None = None) -> bytes | memoryview:
        """Decrypt the last block and strip its padding.

        Raises:
            EngineError: If the padding is malformed or the ciphertext is not
                a whole number of blocks.
        """
        return self._cryptor.final(into)

    def decrypt(self, ct: Buffer) -> bytes:
        """Decrypt a whole ciphertext from a fresh chaining state."""
        return self._one_shot(ct)

    update = decrypt_next
    final = decrypt_final


def encrypt(
    key: Key | Buffer,
    iv: IV | Buffer,
    message: Buffer,
    *,
    engine: str | type[CipherEngine] | None = None,
) -> bytes:
    """Encrypt message in one shot, returning the padded ciphertext."""
    with Encryptor(key, iv, engine=engine) as enc:
        return enc.encrypt(message)


def decrypt(
    key: Key | Buffer,
    iv: IV | Buffer,
    ct: Buffer,
    *,
    engine: str | type[CipherEngine] | None = None,
) -> bytes:
    """Decrypt ciphertext in one shot, returning the unpadded plaintext.

    Raises:
        EngineError: If the padding is malformed or the length is not a block multiple.
    """
    with Decryptor(key, iv, engine=engine) as dec:
        return dec.decrypt(ct)
