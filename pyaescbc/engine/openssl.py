"""AES-CBC engine backed by libcrypto's EVP interface through cffi."""

from __future__ import annotations

from .._loader import ffi, load_libcrypto
from ..errors import OpenSSLError
from ..key import KeySize
from .base import CipherEngine, Operation

__all__ = ["OpenSSLEngine"]

# EVP lengths are C ints
_MAX_CHUNK = 1 << 30
_ERR_BUF_LEN = 256

_CIPHERS = {
    KeySize.K128: "EVP_aes_128_cbc",
    KeySize.K192: "EVP_aes_192_cbc",
    KeySize.K256: "EVP_aes_256_cbc",
}


def _openssl_error(lib) -> OpenSSLError:
    """Drain the libcrypto error queue into a chain of OpenSSLError."""
    codes = []
    while True:
        code = lib.ERR_get_error()
        if code == 0:
            break
        codes.append(int(code))
    if not codes:
        return OpenSSLError(0)
    buf = ffi.new("char[]", _ERR_BUF_LEN)
    err = None
    # The most recent error is the head; causes lead back to the earliest
    for code in codes:
        lib.ERR_error_string_n(code, buf, _ERR_BUF_LEN)
        reason = ffi.string(buf).decode("ascii", "replace")
        head = OpenSSLError(code, reason)
        head.caused_by = err
        head.__cause__ = err
        err = head
    return err  # type: ignore[return-value]


class OpenSSLEngine(CipherEngine):
    """EVP_CIPHER_CTX session.

    The context is allocated with ``ffi.gc`` so it is freed when the engine is
    collected, and ``close()`` frees it immediately.
    """

    name = "openssl"

    def __init__(self, operation: Operation, key, iv: bytes) -> None:
        super().__init__(operation, key, iv)
        self._lib = load_libcrypto()
        self._lib.ERR_clear_error()
        ctx = self._lib.EVP_CIPHER_CTX_new()
        if ctx == ffi.NULL:
            raise _openssl_error(self._lib)
        self._ctx = ffi.gc(ctx, self._lib.EVP_CIPHER_CTX_free)
        self._init_context()

    @classmethod
    def available(cls) -> bool:
        try:
            load_libcrypto()
        except OSError:
            return False
        return True

    def _call(self, func, *args) -> None:
        # Errors queued by other code on this thread are not ours
        self._lib.ERR_clear_error()
        if func(*args) != 1:
            raise _openssl_error(self._lib)

    def _init_context(self) -> None:
        lib = self._lib
        cipher = getattr(lib, _CIPHERS[self.key.size])()
        self._call(
            lib.EVP_CipherInit_ex,
            self._ctx,
            cipher,
            ffi.NULL,
            ffi.from_buffer(self.key.bytes),
            ffi.from_buffer(self.iv),
            self.operation.value,
        )
        self._call(lib.EVP_CIPHER_CTX_set_padding, self._ctx, 1)

    def update(self, data, out: memoryview) -> int:
        data = memoryview(data)
        outl = ffi.new("int *")
        written = 0
        for start in range(0, len(data), _MAX_CHUNK):
            chunk = data[start : start + _MAX_CHUNK]
            self._call(
                self._lib.EVP_CipherUpdate,
                self._ctx,
                ffi.from_buffer(out[written:]),
                outl,
                ffi.from_buffer(chunk),
                len(chunk),
            )
            written += outl[0]
        return written

    def final(self, out: memoryview) -> int:
        outl = ffi.new("int *")
        self._call(self._lib.EVP_CipherFinal_ex, self._ctx, ffi.from_buffer(out), outl)
        return outl[0]

    def reset(self) -> None:
        self._call(self._lib.EVP_CIPHER_CTX_reset, self._ctx)
        self._init_context()

    def close(self) -> None:
        ctx, self._ctx = self._ctx, None
        if ctx is not None:
            ffi.release(ctx)
