"""Structured JSON-lines logger for routed messages and errors."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from dibea_router.constants import ERROR_TRUNCATION_CHARS

__all__ = ["RouteLogger"]


class RouteLogger:
    """Writes one JSON object per line to ``log_dir/router.log``.

    Every record carries the session id supplied by the caller so
    a conversation can be followed across requests.
    """

    def __init__(
        self,
        log_dir: Path,
        level: str = "INFO",
        *,
        name: str = "dibea_router.routes",
    ) -> None:
        self._log_dir = log_dir
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger(name)
        self._logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self._logger.propagate = False

        if not self._logger.handlers:
            handler = logging.FileHandler(log_dir / "router.log")
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)

    @property
    def log_path(self) -> Path:
        return self._log_dir / "router.log"

    def log_route(
        self,
        session_id: str | None,
        request_id: str,
        agent: str,
        confidence: float,
        degraded: bool,
        used_context: bool,
        duration_ms: float,
    ) -> None:
        self._logger.info(
            json.dumps({
                "type": "route",
                "timestamp": datetime.now(UTC).isoformat(),
                "session_id": session_id,
                "request_id": request_id,
                "agent": agent,
                "confidence": round(confidence, 4),
                "degraded": degraded,
                "used_context": used_context,
                "duration_ms": duration_ms,
            })
        )

    def log_error(
        self,
        session_id: str | None,
        request_id: str,
        component: str,
        error: str,
    ) -> None:
        self._logger.error(
            json.dumps({
                "type": "error",
                "timestamp": datetime.now(UTC).isoformat(),
                "session_id": session_id,
                "request_id": request_id,
                "component": component,
                "error": error[:ERROR_TRUNCATION_CHARS],
            })
        )

    def log_stage(
        self,
        request_id: str,
        stage_name: str,
        status: str,
        duration_ms: float,
        error: str | None = None,
    ) -> None:
        self._logger.info(
            json.dumps({
                "type": "stage",
                "timestamp": datetime.now(UTC).isoformat(),
                "request_id": request_id,
                "stage": stage_name,
                "status": status,
                "duration_ms": duration_ms,
                "error": error,
            })
        )

    def close(self) -> None:
        for handler in list(self._logger.handlers):
            handler.close()
            self._logger.removeHandler(handler)
