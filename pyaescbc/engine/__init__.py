"""Cipher engine registry.

The engine used by a Cryptor is chosen, in order, by an explicit ``engine=``
argument, the ``PYAESCBC_ENGINE`` environment variable, or ``auto``, which
prefers libcrypto and falls back to ``cryptography``.
"""

from __future__ import annotations

import logging
import os

from .base import CipherEngine, Operation
from .hazmat import CryptographyEngine
from .openssl import OpenSSLEngine

__all__ = [
    "CipherEngine",
    "Operation",
    "OpenSSLEngine",
    "CryptographyEngine",
    "ENGINES",
    "ENGINE_ENV",
    "available_engines",
    "get_engine",
]

logger = logging.getLogger(__name__)

ENGINE_ENV = "PYAESCBC_ENGINE"

ENGINES: dict[str, type[CipherEngine]] = {
    OpenSSLEngine.name: OpenSSLEngine,
    CryptographyEngine.name: CryptographyEngine,
}

_AUTO_ORDER = (OpenSSLEngine.name, CryptographyEngine.name)


def available_engines() -> list[str]:
    """Names of the engines usable in this process."""
    return [name for name, cls in ENGINES.items() if cls.available()]


def get_engine(engine: str | type[CipherEngine] | None = None) -> type[CipherEngine]:
    """Resolve an engine name or class to an engine class.

    Raises:
        ValueError: If the name is unknown or the requested engine is unavailable.
    """
    if isinstance(engine, type) and issubclass(engine, CipherEngine):
        return engine
    name = (engine or os.environ.get(ENGINE_ENV) or "auto").lower()
    if name == "auto":
        for candidate in _AUTO_ORDER:
            if ENGINES[candidate].available():
                logger.debug("Selected %s cipher engine", candidate)
                return ENGINES[candidate]
        raise ValueError("no cipher engine is available")
    try:
        cls = ENGINES[name]
    except KeyError:
        raise ValueError(
            f"unknown cipher engine {name!r}, expected one of {sorted(ENGINES)}"
        ) from None
    if not cls.available():
        raise ValueError(f"cipher engine {name!r} is not available")
    return cls
