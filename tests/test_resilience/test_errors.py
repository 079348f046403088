"""Tests for the error taxonomy and error classification."""

from __future__ import annotations

import pytest

from dibea_router.resilience.errors import (
    CollaboratorError,
    CollaboratorTimeoutError,
    CollaboratorUnavailableError,
    ConfigurationError,
    ErrorClass,
    RouterError,
    ValidationError,
    as_collaborator_error,
    classify_error,
    is_retryable,
)


class _StatusCodeError(Exception):
    """Exception with a status_code attribute."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


# ── hierarchy ────────────────────────────────────────────────


@pytest.mark.parametrize(
    "cls",
    [
        ValidationError,
        ConfigurationError,
        CollaboratorError,
        CollaboratorTimeoutError,
        CollaboratorUnavailableError,
    ],
)
def test_all_errors_are_router_errors(cls: type[Exception]) -> None:
    assert issubclass(cls, RouterError)


def test_collaborator_subclasses() -> None:
    assert issubclass(CollaboratorTimeoutError, CollaboratorError)
    assert issubclass(CollaboratorUnavailableError, CollaboratorError)
    assert not issubclass(ValidationError, CollaboratorError)


# ── classify_error ───────────────────────────────────────────


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (429, ErrorClass.TRANSIENT),
        (401, ErrorClass.CLIENT),
        (404, ErrorClass.CLIENT),
        (500, ErrorClass.SERVER),
        (503, ErrorClass.SERVER),
    ],
)
def test_classify_status_code(status: int, expected: ErrorClass) -> None:
    assert classify_error(_StatusCodeError("x", status)) == expected


def test_classify_timeout_error_type() -> None:
    assert classify_error(TimeoutError()) == ErrorClass.TIMEOUT


def test_classify_collaborator_timeout() -> None:
    err = CollaboratorTimeoutError("no reply within 5s")
    assert classify_error(err) == ErrorClass.TIMEOUT


def test_classify_string_fallbacks() -> None:
    assert classify_error(Exception("Rate limit hit")) == ErrorClass.TRANSIENT
    assert classify_error(Exception("request timed out")) == ErrorClass.TIMEOUT
    assert classify_error(Exception("got 502")) == ErrorClass.SERVER
    assert (
        classify_error(Exception("connection reset"))
        == ErrorClass.TRANSIENT
    )


def test_classify_unknown() -> None:
    assert classify_error(ValueError("weird")) == ErrorClass.UNKNOWN


# ── is_retryable ─────────────────────────────────────────────


def test_retryable_classes() -> None:
    assert is_retryable(_StatusCodeError("x", 429))
    assert is_retryable(TimeoutError())
    assert not is_retryable(_StatusCodeError("x", 400))
    assert not is_retryable(ValueError("weird"))


# ── as_collaborator_error ────────────────────────────────────


def test_collaborator_error_passthrough() -> None:
    err = CollaboratorUnavailableError("down")
    assert as_collaborator_error(err) is err


def test_timeout_wraps_as_timeout() -> None:
    wrapped = as_collaborator_error(TimeoutError())
    assert isinstance(wrapped, CollaboratorTimeoutError)


def test_other_errors_wrap_as_unavailable() -> None:
    wrapped = as_collaborator_error(RuntimeError("boom"))
    assert isinstance(wrapped, CollaboratorUnavailableError)
    assert "boom" in str(wrapped)


def test_empty_message_uses_type_name() -> None:
    wrapped = as_collaborator_error(KeyError())
    assert isinstance(wrapped, CollaboratorUnavailableError)
    assert str(wrapped)
