"""AES-CBC with PKCS#7 padding over interchangeable native engines."""

from .block import BLOCK_SIZE, BlockSize
from .cryptor import Cryptor, CryptorState
from .cryptors import Decryptor, Encryptor, decrypt, encrypt
from .engine import ENGINES, CipherEngine, Operation, available_engines, get_engine
from .errors import (
    AESError,
    BackendError,
    ChainedError,
    EngineError,
    EngineStatus,
    ErrorCode,
    InvalidIVSize,
    InvalidKeySize,
    OpenSSLError,
    StatusError,
)
from .iv import IV, random_iv
from .key import Key, KeySize, random_key

__all__ = [
    # constants
    "BLOCK_SIZE",
    "BlockSize",
    # values
    "Key",
    "KeySize",
    "IV",
    "random_key",
    "random_iv",
    # cipher contexts
    "Cryptor",
    "CryptorState",
    "Encryptor",
    "Decryptor",
    "encrypt",
    "decrypt",
    # engines
    "CipherEngine",
    "Operation",
    "ENGINES",
    "available_engines",
    "get_engine",
    # errors
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
