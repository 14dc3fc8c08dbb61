"""Dynamic loader for libcrypto using CFFI (ABI mode)."""

import ctypes.util
import functools
import os
import sys
from pathlib import Path
from typing import Any

from cffi import FFI

__all__ = ["ffi", "load_libcrypto", "LIBCRYPTO_ENV"]

LIBCRYPTO_ENV = "PYAESCBC_LIBCRYPTO"


def _platform_lib_names() -> list[str]:
    if sys.platform == "darwin":
        return ["libcrypto.3.dylib"]
    if os.name == "nt":
        return ["libcrypto-3-x64.dll", "libcrypto-3.dll", "libcrypto-1_1-x64.dll"]
    return ["libcrypto.so.3", "libcrypto.so.1.1", "libcrypto.so"]


def _candidates() -> list[str]:
    override = os.environ.get(LIBCRYPTO_ENV)
    if override:
        return [override]
    names = _platform_lib_names()
    if sys.platform == "darwin":
        # The unversioned system libcrypto aborts the process when opened
        return names
    found = ctypes.util.find_library("crypto")
    if found and found not in names:
        names.append(found)
    return names


@functools.lru_cache(maxsize=None)
def _open() -> tuple[Any, str | None]:
    """Try every candidate once; the outcome, failure included, is cached."""
    errors = []
    for candidate in _candidates():
        try:
            lib = ffi.dlopen(candidate)
        except OSError as e:
            errors.append(f"{candidate}: {e}")
            continue
        try:
            # Missing symbols only surface on first access in ABI mode
            lib.EVP_CIPHER_CTX_reset
            lib.EVP_aes_192_cbc
        except AttributeError as e:
            errors.append(f"{candidate}: {e}")
            continue
        return lib, None
    return None, f"Could not load libcrypto. Tried: {'; '.join(errors)}"


def load_libcrypto() -> Any:
    """Open libcrypto once and return the cffi library object.

    Raises:
        OSError: If no usable libcrypto (OpenSSL 1.1 or newer) is found.
    """
    lib, error = _open()
    if error is not None:
        raise OSError(error)
    return lib


ffi = FFI()
ffi.cdef(Path(__file__).with_name("libcrypto_cdef.h").read_text(encoding="utf-8"))
