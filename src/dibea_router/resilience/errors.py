"""Router error taxonomy and error classification.

Only ValidationError and ConfigurationError ever leave the router.
Collaborator errors are recovered locally with a canned reply; the
classification below decides how they are logged.
"""

from __future__ import annotations

import asyncio
from enum import Enum


class RouterError(Exception):
    """Base class for all router errors."""


class ValidationError(RouterError):
    """Incoming message rejected before routing (empty or oversized)."""


class ConfigurationError(RouterError):
    """Malformed lexicon; fatal at load time."""


class CollaboratorError(RouterError):
    """The external reply generator failed."""


class CollaboratorTimeoutError(CollaboratorError):
    """The reply generator did not answer within its time budget."""


class CollaboratorUnavailableError(CollaboratorError):
    """The reply generator errored or returned an unusable payload."""


class ErrorClass(Enum):
    TRANSIENT = "transient"  # 429, network errors: retryable
    SERVER = "server"  # 500, 502, 503: retryable
    TIMEOUT = "timeout"  # deadline exceeded: retryable with backoff
    CLIENT = "client"  # 400, 401, 403: do NOT retry
    UNKNOWN = "unknown"  # unclassified: do NOT retry


def classify_error(error: Exception) -> ErrorClass:
    """Classify an error to determine handling strategy.

    Checks structured attributes first (status_code), falls back
    to string matching for untyped exceptions.
    """
    if isinstance(error, CollaboratorTimeoutError):
        return ErrorClass.TIMEOUT

    # 1. Structured status_code attribute (httpx, litellm)
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        if status_code == 429:
            return ErrorClass.TRANSIENT
        if 400 <= status_code < 500:
            return ErrorClass.CLIENT
        if 500 <= status_code < 600:
            return ErrorClass.SERVER

    # 2. Timeout types
    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return ErrorClass.TIMEOUT

    # 3. String matching for untyped exceptions
    msg = str(error).lower()

    if "timeout" in msg or "timed out" in msg:
        return ErrorClass.TIMEOUT
    if "429" in msg or "rate limit" in msg or "rate_limit" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("500", "502", "503", "504")):
        return ErrorClass.SERVER
    if "econnrefused" in msg or "connection" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("400", "401", "403", "404")):
        return ErrorClass.CLIENT

    return ErrorClass.UNKNOWN


_RETRYABLE = frozenset({
    ErrorClass.TRANSIENT,
    ErrorClass.SERVER,
    ErrorClass.TIMEOUT,
})


def is_retryable(error: Exception) -> bool:
    """Return True if the error category supports retry."""
    return classify_error(error) in _RETRYABLE


def as_collaborator_error(error: BaseException) -> CollaboratorError:
    """Wrap a reply-generator failure in the router's taxonomy."""
    if isinstance(error, CollaboratorError):
        return error
    if isinstance(error, Exception) and (
        classify_error(error) is ErrorClass.TIMEOUT
    ):
        return CollaboratorTimeoutError(str(error) or "reply timed out")
    return CollaboratorUnavailableError(
        str(error) or type(error).__name__
    )
