"""Singleton logging configuration: two-phase initialization.

Phase 1: setup_logging(), call BEFORE litellm is imported.
  Sets LITELLM_LOG env var and configures root logger.

Phase 2: cleanup_third_party_handlers(), call AFTER all imports.
  Clears litellm's duplicate StreamHandlers added at import time.

Both phases are idempotent (guarded by module-level flags).
"""

import logging
import os

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Third-party loggers kept at WARNING
_SUPPRESSED_LOGGERS = (
    "LiteLLM",
    "LiteLLM Router",
    "LiteLLM Proxy",
    "httpx",
    "httpcore",
)

_LITELLM_LOGGERS = ("LiteLLM", "LiteLLM Router", "LiteLLM Proxy")

_phase1_done = False
_phase2_done = False


def setup_logging(level: str = "INFO") -> None:
    """Phase 1: Configure root logger and set env vars.

    Must run before the LLM reply backend is imported. Idempotent.
    """
    global _phase1_done  # noqa: PLW0603
    if _phase1_done:
        return
    _phase1_done = True

    # litellm._logging reads this at import time.
    os.environ.setdefault("LITELLM_LOG", "WARNING")

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )

    for name in _SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def cleanup_third_party_handlers() -> None:
    """Phase 2: Remove litellm's duplicate StreamHandlers.

    litellm attaches its own handler to each of its loggers, so every
    message would print twice (its handler + root propagation).
    Idempotent.
    """
    global _phase2_done  # noqa: PLW0603
    if _phase2_done:
        return
    _phase2_done = True

    for name in _LITELLM_LOGGERS:
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.propagate = True
