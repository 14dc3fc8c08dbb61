"""Tests for the error taxonomy."""

import pytest

from pyaescbc import (
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


def test_codes_and_reasons():
    assert InvalidKeySize().code == ErrorCode.INVALID_KEY_SIZE == 1
    assert InvalidIVSize().code == ErrorCode.INVALID_IV_SIZE == 2
    err = EngineError(StatusError(EngineStatus.DECODE_ERROR))
    assert err.code == ErrorCode.ENGINE_ERROR == 3
    assert err.reason == "Engine error"
    assert isinstance(err, AESError)


def test_validation_errors_have_no_cause():
    assert InvalidKeySize().caused_by is None
    assert InvalidIVSize().__cause__ is None


def test_engine_error_chain():
    backend = OpenSSLError(0x1C800064, "error:1C800064:Provider routines::bad decrypt")
    err = EngineError(backend)
    assert err.caused_by is backend
    assert err.__cause__ is backend
    assert err.backend == "openssl"
    assert err.chain() == [err, backend]
    assert err.description == (
        "EngineError(3): Engine error <- "
        "OpenSSLError(478150756): error:1C800064:Provider routines::bad decrypt"
    )
    assert str(err) == err.description


def test_engine_error_requires_backend_error():
    with pytest.raises(TypeError):
        EngineError(InvalidKeySize())  # type: ignore[arg-type]


def test_status_error_rejects_success():
    with pytest.raises(AssertionError):
        StatusError(EngineStatus.SUCCESS)
    with pytest.raises(AssertionError):
        StatusError(0)


@pytest.mark.parametrize(
    "status, reason",
    [
        (EngineStatus.DECODE_ERROR, "Input data did not decode or decrypt properly"),
        (EngineStatus.CALL_SEQUENCE_ERROR, "Call sequence error"),
        (EngineStatus.BUFFER_TOO_SMALL, "Insufficient buffer provided for specified operation"),
    ],
)
def test_status_default_reasons(status, reason):
    err = StatusError(status, backend="cryptography")
    assert err.reason == reason
    assert err.code == status
    assert err.status is status
    assert err.backend == "cryptography"


def test_status_error_keeps_unknown_native_codes():
    err = StatusError(-1, "native failure")
    assert err.code == -1
    assert err.status == -1
    assert err.reason == "native failure"


def test_openssl_error_without_reason():
    err = OpenSSLError(0)
    assert err.reason == "Unexpected reason"
    assert isinstance(err, BackendError)
    assert isinstance(err, ChainedError)


def test_repr():
    err = EngineError(StatusError(EngineStatus.OVERFLOW, backend="openssl"))
    assert repr(err).startswith("EngineError(code=3, reason='Engine error', caused_by=StatusError(")
