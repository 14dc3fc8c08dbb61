"""Error taxonomy for pyaescbc.

Every error carries a numeric ``code``, a human readable ``reason`` and an
optional ``caused_by`` link to the error that triggered it. Backend errors keep
the native status or error code verbatim so diagnostics survive the engine
boundary.
"""

from __future__ import annotations

from enum import IntEnum

__all__ = [
    "ChainedError",
    "ErrorCode",
    "AESError",
    "InvalidKeySize",
    "InvalidIVSize",
    "EngineError",
    "BackendError",
    "OpenSSLError",
    "EngineStatus",
    "StatusError",
]


class ChainedError(Exception):
    """Exception with a code, a reason and an optional nested cause."""

    def __init__(
        self, code: int, reason: str, caused_by: ChainedError | None = None
    ) -> None:
        super().__init__(reason)
        self.code = int(code)
        self.reason = reason
        self.caused_by = caused_by
        self.__cause__ = caused_by

    def chain(self) -> list[ChainedError]:
        """Return this error followed by all of its causes."""
        errors: list[ChainedError] = []
        err: ChainedError | None = self
        while err is not None:
            errors.append(err)
            err = err.caused_by
        return errors

    @property
    def description(self) -> str:
        return " <- ".join(
            f"{type(e).__name__}({e.code}): {e.reason}" for e in self.chain()
        )

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, reason={self.reason!r}, "
            f"caused_by={self.caused_by!r})"
        )


class ErrorCode(IntEnum):
    INVALID_KEY_SIZE = 1
    INVALID_IV_SIZE = 2
    ENGINE_ERROR = 3


class AESError(ChainedError):
    """Base class of the errors raised by the public API."""

    CODE: ErrorCode
    REASON: str

    def __init__(self, caused_by: ChainedError | None = None) -> None:
        super().__init__(self.CODE, self.REASON, caused_by)


class InvalidKeySize(AESError, ValueError):
    CODE = ErrorCode.INVALID_KEY_SIZE
    REASON = "Key size is not valid"


class InvalidIVSize(AESError, ValueError):
    CODE = ErrorCode.INVALID_IV_SIZE
    REASON = "Initialization vector size is not valid"


class EngineError(AESError, RuntimeError):
    """A cipher engine rejected an operation.

    The backend error is always available as ``caused_by`` (and ``__cause__``).
    """

    CODE = ErrorCode.ENGINE_ERROR
    REASON = "Engine error"

    def __init__(self, caused_by: BackendError) -> None:
        if not isinstance(caused_by, BackendError):
            raise TypeError("EngineError must wrap a BackendError")
        super().__init__(caused_by)

    @property
    def backend(self) -> str:
        return self.caused_by.backend  # type: ignore[union-attr]


class BackendError(ChainedError):
    """Error reported by a specific cipher engine."""

    def __init__(
        self,
        code: int,
        reason: str,
        backend: str,
        caused_by: ChainedError | None = None,
    ) -> None:
        super().__init__(code, reason, caused_by)
        self.backend = backend


class OpenSSLError(BackendError):
    """Packed libcrypto error code with its ``ERR_error_string_n`` text."""

    def __init__(self, code: int, reason: str | None = None) -> None:
        super().__init__(code, reason or "Unexpected reason", "openssl")


class EngineStatus(IntEnum):
    """Normalised engine status codes."""

    SUCCESS = 0
    PARAM_ERROR = -4300
    BUFFER_TOO_SMALL = -4301
    MEMORY_FAILURE = -4302
    ALIGNMENT_ERROR = -4303
    DECODE_ERROR = -4304
    UNIMPLEMENTED = -4305
    OVERFLOW = -4306
    RNG_FAILURE = -4307
    UNSPECIFIED_ERROR = -4308
    CALL_SEQUENCE_ERROR = -4309
    KEY_SIZE_ERROR = -4310
    INVALID_KEY = -4311


_STATUS_REASONS = {
    EngineStatus.PARAM_ERROR: "Illegal parameter value",
    EngineStatus.BUFFER_TOO_SMALL: "Insufficient buffer provided for specified operation",
    EngineStatus.MEMORY_FAILURE: "Memory allocation failure",
    EngineStatus.ALIGNMENT_ERROR: "Input size was not aligned properly",
    EngineStatus.DECODE_ERROR: "Input data did not decode or decrypt properly",
    EngineStatus.UNIMPLEMENTED: "Function not implemented for the current algorithm",
    EngineStatus.OVERFLOW: "Overflow",
    EngineStatus.RNG_FAILURE: "Random Number Generator Err",
    EngineStatus.UNSPECIFIED_ERROR: "Unspecified error",
    EngineStatus.CALL_SEQUENCE_ERROR: "Call sequence error",
    EngineStatus.KEY_SIZE_ERROR: "Key size is not valid",
    EngineStatus.INVALID_KEY: "Key is not valid",
}


class StatusError(BackendError):
    """Engine failure described by an ``EngineStatus``.

    Building one from ``EngineStatus.SUCCESS`` is a programming error and
    raises ``AssertionError``.
    """

    def __init__(
        self, status: int, reason: str | None = None, backend: str = "pyaescbc"
    ) -> None:
        if status == EngineStatus.SUCCESS:
            raise AssertionError("StatusError may not be created with SUCCESS status")
        try:
            status = EngineStatus(status)
        except ValueError:
            pass
        super().__init__(
            status,
            reason or _STATUS_REASONS.get(status, "Unexpected reason"),  # type: ignore[arg-type]
            backend,
        )
        self.status = status
