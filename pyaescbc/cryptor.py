"""Stateful AES-CBC cipher context."""

from __future__ import annotations

import enum
import logging
import weakref

from .engine import CipherEngine, Operation, get_engine
from .errors import BackendError, EngineError, EngineStatus, StatusError
from .iv import IV, validate_iv
from .key import Key
from .util import Buffer, output_length, writable_output

__all__ = ["Cryptor", "CryptorState"]

logger = logging.getLogger(__name__)


class CryptorState(enum.Enum):
    CREATED = "created"
    UPDATING = "updating"
    FINALIZED = "finalized"
    FAILED = "failed"
    CLOSED = "closed"


def _release(engine: CipherEngine) -> None:
    # Runs during teardown; never raise from here
    try:
        engine.close()
    except Exception as e:
        logger.warning("Releasing %s cipher engine failed: %r", engine.name, e)


class Cryptor:
    """One engine session bound to an operation, a key and an IV.

    Usage:
        with Cryptor(Operation.ENCRYPT, key, iv) as c:
            ct = c.update(b"part one") + c.update(b"part two") + c.final()
            c.reset()  # same key and IV, new message

    States go CREATED -> UPDATING -> FINALIZED; ``reset()`` returns to
    CREATED from any state but CLOSED. Not safe for concurrent use.
    """

    __slots__ = (
        "_operation",
        "_key",
        "_iv",
        "_engine",
        "_state",
        "_bytes_in",
        "_bytes_out",
        "_finalizer",
        "__weakref__",
    )

    def __init__(
        self,
        operation: Operation,
        key: Key | Buffer,
        iv: IV | Buffer,
        *,
        engine: str | type[CipherEngine] | None = None,
    ) -> None:
        """Create the context and initialize its engine session.

        Args:
            operation: ``Operation.ENCRYPT`` or ``Operation.DECRYPT``.
            key: A Key, or raw key bytes (16, 24 or 32).
            iv: An IV, or raw IV bytes (16).
            engine: Engine name or class (default: see ``get_engine``).

        Raises:
            InvalidKeySize: If the key length is invalid.
            InvalidIVSize: If the IV length is not one block.
            EngineError: If the engine fails to initialize.
        """
        iv_bytes = validate_iv(iv)
        if not isinstance(key, Key):
            key = Key(key)
        engine_cls = get_engine(engine)
        self._operation = Operation(operation)
        self._key = key
        self._iv = iv_bytes
        self._state = CryptorState.CREATED
        self._bytes_in = 0
        self._bytes_out = 0
        try:
            self._engine = engine_cls(self._operation, key, iv_bytes)
        except BackendError as e:
            raise EngineError(e) from e
        self._finalizer = weakref.finalize(self, _release, self._engine)

    @property
    def operation(self) -> Operation:
        return self._operation

    @property
    def key(self) -> Key:
        return self._key

    @property
    def iv(self) -> bytes:
        return self._iv

    @property
    def engine(self) -> str:
        """Name of the engine performing the transform."""
        return self._engine.name

    @property
    def state(self) -> CryptorState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is CryptorState.CLOSED

    @property
    def bytes_in(self) -> int:
        """Total bytes fed to update() since creation or the last reset()."""
        return self._bytes_in

    @property
    def bytes_out(self) -> int:
        """Total bytes produced by update() and final() since the last reset()."""
        return self._bytes_out

    def _sequence_error(self, message: str) -> EngineError:
        return EngineError(
            StatusError(EngineStatus.CALL_SEQUENCE_ERROR, message, self._engine.name)
        )

    def _check_usable(self, call: str) -> None:
        if self._state is CryptorState.CLOSED:
            raise self._sequence_error(f"Cannot call {call}() on a closed Cryptor")
        if self._state is CryptorState.FINALIZED:
            raise self._sequence_error(f"Cannot call {call}() after final()")
        if self._state is CryptorState.FAILED:
            raise self._sequence_error(
                f"Cannot call {call}() after a failed operation without reset()"
            )

    def _run(self, func, *args) -> int:
        try:
            return func(*args)
        except BackendError as e:
            self._state = CryptorState.FAILED
            raise EngineError(e) from e

    def get_output_length(self, input_byte_count: int, is_final: bool) -> int:
        """Output buffer size needed by the next update() or final().

        The larger of the engine-agnostic bound and the engine's own answer,
        so the buffer is never smaller than what any engine may write.
        """
        return max(
            output_length(input_byte_count, is_final),
            self._engine.output_length(input_byte_count, is_final),
        )

    def update(self, data: Buffer, into: Buffer | None = None) -> bytes | memoryview:
        """Feed a chunk and return the bytes the engine produced for it.

        Trailing partial blocks are buffered by the engine, so the result may
        be shorter than ``data``.

        Args:
            data: Input bytes.
            into: Optional destination buffer; must be at least
                ``get_output_length(len(data), False)`` bytes.

        Returns:
            The produced bytes, or a memoryview of into when provided.

        Raises:
            TypeError: If into is too small or read-only.
            EngineError: If the engine rejects the call or the call sequence is invalid.
        """
        self._check_usable("update")
        data = memoryview(data).cast("B")
        length = self.get_output_length(len(data), False)
        out = writable_output(length, into)
        w = self._run(self._engine.update, data, out)
        assert w <= len(out), f"engine wrote {w} bytes into {len(out)}"
        self._state = CryptorState.UPDATING
        self._bytes_in += len(data)
        self._bytes_out += w
        return out[:w].tobytes() if into is None else out[:w]

    def final(self, into: Buffer | None = None) -> bytes | memoryview:
        """Flush the buffered block, padding on encrypt and unpadding on decrypt.

        Raises:
            TypeError: If into is too small or read-only.
            EngineError: If the padding or ciphertext length is invalid, or
                the call sequence is invalid.
        """
        self._check_usable("final")
        length = self.get_output_length(0, True)
        out = writable_output(length, into)
        w = self._run(self._engine.final, out)
        assert w <= len(out), f"engine wrote {w} bytes into {len(out)}"
        self._state = CryptorState.FINALIZED
        self._bytes_out += w
        return out[:w].tobytes() if into is None else out[:w]

    def reset(self) -> None:
        """Restart the context with the same operation, key and IV."""
        if self._state is CryptorState.CLOSED:
            raise self._sequence_error("Cannot call reset() on a closed Cryptor")
        self._run(self._engine.reset)
        self._state = CryptorState.CREATED
        self._bytes_in = 0
        self._bytes_out = 0

    def close(self) -> None:
        """Release the engine session. Further calls other than close() fail."""
        self._state = CryptorState.CLOSED
        self._finalizer()

    def __enter__(self) -> Cryptor:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"<Cryptor {self._operation.name.lower()} AES-{self._key.size.bits}-CBC "
            f"engine={self._engine.name} state={self._state.value}>"
        )
