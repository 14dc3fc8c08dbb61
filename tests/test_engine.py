"""Tests for engine selection, output sizing and engine lifetime."""

import gc
import logging

import pytest

from pyaescbc import (
    BLOCK_SIZE,
    IV,
    Cryptor,
    Decryptor,
    Encryptor,
    EngineError,
    EngineStatus,
    Key,
    KeySize,
    Operation,
    StatusError,
    available_engines,
    encrypt,
    get_engine,
)
from pyaescbc import _loader
from pyaescbc.engine import ENGINE_ENV, CryptographyEngine, OpenSSLEngine
from pyaescbc.engine.openssl import _openssl_error
from pyaescbc.errors import OpenSSLError
from pyaescbc.util import output_length

from .util import random_split_bytes


class ExplodingCloseEngine(CryptographyEngine):
    name = "exploding-close"

    def close(self):
        raise RuntimeError("release failed")


class BrokenInitEngine(CryptographyEngine):
    name = "broken-init"

    def __init__(self, operation, key, iv):
        raise StatusError(EngineStatus.MEMORY_FAILURE, backend=self.name)


class GreedyEngine(CryptographyEngine):
    """Asks for more output space than the generic bound."""

    name = "greedy"

    def output_length(self, input_byte_count, is_final):
        return input_byte_count + 4 * BLOCK_SIZE


class FakeErrorQueue:
    """Stands in for the ERR_* functions of libcrypto."""

    def __init__(self, *codes):
        self.queue = list(codes)

    def ERR_get_error(self):
        return self.queue.pop(0) if self.queue else 0

    def ERR_error_string_n(self, code, buf, size):
        text = f"error:{code:08X}".encode() + b"\0"
        _loader.ffi.memmove(buf, text, min(len(text), size))

    def ERR_clear_error(self):
        self.queue.clear()


class TestSelection:
    def test_cryptography_always_available(self):
        assert "cryptography" in available_engines()

    def test_by_name(self):
        assert get_engine("cryptography") is CryptographyEngine
        assert get_engine("CRYPTOGRAPHY") is CryptographyEngine

    def test_class_passthrough(self):
        assert get_engine(GreedyEngine) is GreedyEngine

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="unknown cipher engine"):
            get_engine("rot13")

    def test_environment(self, monkeypatch):
        monkeypatch.setenv(ENGINE_ENV, "cryptography")
        assert get_engine() is CryptographyEngine
        assert Encryptor(Key(bytes(16)), bytes(16)).engine == "cryptography"

    def test_argument_overrides_environment(self, monkeypatch):
        monkeypatch.setenv(ENGINE_ENV, "rot13")
        assert get_engine("cryptography") is CryptographyEngine

    def test_auto_prefers_openssl(self, monkeypatch):
        monkeypatch.delenv(ENGINE_ENV, raising=False)
        expected = OpenSSLEngine if OpenSSLEngine.available() else CryptographyEngine
        assert get_engine() is expected
        assert get_engine("auto") is expected

    def test_unavailable_openssl(self, monkeypatch):
        monkeypatch.setattr(OpenSSLEngine, "available", classmethod(lambda cls: False))
        monkeypatch.delenv(ENGINE_ENV, raising=False)
        assert get_engine() is CryptographyEngine
        with pytest.raises(ValueError, match="not available"):
            get_engine("openssl")


class TestOutputLength:
    @pytest.mark.parametrize(
        "n, is_final, expected",
        [(0, True, 16), (0, False, 16), (1, False, 17), (16, False, 32), (300, False, 316)],
    )
    def test_bound(self, n, is_final, expected):
        assert output_length(n, is_final) == expected

    def test_negative(self):
        with pytest.raises(ValueError):
            output_length(-1, False)

    def test_engine_may_ask_for_more(self):
        cryptor = Cryptor(Operation.ENCRYPT, Key(bytes(16)), bytes(16), engine=GreedyEngine)
        assert cryptor.get_output_length(10, False) == 10 + 4 * BLOCK_SIZE
        with pytest.raises(TypeError):
            cryptor.update(b"x" * 10, into=bytearray(26))

    @pytest.mark.parametrize("operation", list(Operation))
    @pytest.mark.parametrize("seed", range(4))
    def test_never_under_allocates(self, engine, operation, seed):
        """Every chunk fits the buffer predicted for it, including held-back blocks."""
        key = Key.random(KeySize.K128)
        iv = IV.random()
        data = encrypt(key, iv, bytes(333), engine=engine)
        if operation is Operation.ENCRYPT:
            data = bytes(333)
        cryptor = Cryptor(operation, key, iv, engine=engine)
        # Single bytes after whole blocks make a decrypting engine release
        # its held-back block
        chunks = [data[:16], data[16:17], data[17:32]] + random_split_bytes(data[32:], seed=seed)
        for chunk in chunks:
            predicted = cryptor.get_output_length(len(chunk), False)
            assert len(cryptor.update(chunk)) <= predicted
        assert len(cryptor.final()) <= cryptor.get_output_length(0, True)


class TestLifetime:
    def test_release_failure_logged_on_close(self, caplog):
        cryptor = Cryptor(Operation.ENCRYPT, Key(bytes(16)), bytes(16), engine=ExplodingCloseEngine)
        with caplog.at_level(logging.WARNING, logger="pyaescbc.cryptor"):
            cryptor.close()
        assert "release failed" in caplog.text

    def test_release_failure_logged_on_collection(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pyaescbc.cryptor"):
            Decryptor(Key(bytes(16)), bytes(16), engine=ExplodingCloseEngine)
            gc.collect()
        assert "Releasing exploding-close cipher engine failed" in caplog.text

    def test_release_runs_once(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pyaescbc.cryptor"):
            cryptor = Cryptor(Operation.ENCRYPT, Key(bytes(16)), bytes(16), engine=ExplodingCloseEngine)
            cryptor.close()
            cryptor.close()
            del cryptor
            gc.collect()
        assert caplog.text.count("release failed") == 1

    def test_engine_init_failure(self):
        with pytest.raises(EngineError) as exc_info:
            Encryptor(Key(bytes(16)), bytes(16), engine=BrokenInitEngine)
        assert exc_info.value.caused_by.status is EngineStatus.MEMORY_FAILURE
        assert exc_info.value.backend == "broken-init"

    def test_openssl_context_freed(self):
        if not OpenSSLEngine.available():
            pytest.skip("openssl engine is not available")
        engine = OpenSSLEngine(Operation.ENCRYPT, Key(bytes(16)), bytes(16))
        engine.close()
        engine.close()
        assert engine._ctx is None


class TestOpenSSLErrors:
    def test_latest_error_heads_the_chain(self):
        err = _openssl_error(FakeErrorQueue(1, 2, 3))
        assert [e.code for e in err.chain()] == [3, 2, 1]
        assert err.reason == "error:00000003"
        assert err.__cause__ is err.caused_by
        assert err.chain()[-1].caused_by is None

    def test_empty_queue(self):
        err = _openssl_error(FakeErrorQueue())
        assert err.code == 0
        assert err.reason == "Unexpected reason"
        assert err.caused_by is None

    def test_stale_errors_cleared_before_call(self):
        engine = object.__new__(OpenSSLEngine)
        engine._lib = FakeErrorQueue(0x1234)
        engine._call(lambda: 1)
        assert engine._lib.queue == []

        engine._lib.queue.append(0x1234)
        with pytest.raises(OpenSSLError) as exc_info:
            engine._call(lambda: 0)
        assert exc_info.value.code == 0
        assert exc_info.value.reason == "Unexpected reason"

    def test_stale_errors_do_not_leak_into_real_failure(self):
        engine = object.__new__(OpenSSLEngine)
        engine._lib = FakeErrorQueue(0x1234)

        def failing_call():
            engine._lib.queue.append(0x5678)
            return 0

        with pytest.raises(OpenSSLError) as exc_info:
            engine._call(failing_call)
        assert [e.code for e in exc_info.value.chain()] == [0x5678]


class TestLoader:
    @pytest.fixture
    def failing_dlopen(self, monkeypatch):
        calls = []

        def dlopen(name):
            calls.append(name)
            raise OSError(f"cannot open {name}")

        _loader._open.cache_clear()
        monkeypatch.setenv(_loader.LIBCRYPTO_ENV, "/nonexistent/libcrypto.so")
        monkeypatch.setattr(_loader.ffi, "dlopen", dlopen)
        yield calls
        _loader._open.cache_clear()

    def test_failure_is_cached(self, failing_dlopen):
        for _ in range(2):
            with pytest.raises(OSError, match="Could not load libcrypto"):
                _loader.load_libcrypto()
        assert OpenSSLEngine.available() is False
        assert failing_dlopen == ["/nonexistent/libcrypto.so"]
