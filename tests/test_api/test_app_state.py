"""Tests for typed AppState wiring."""

from __future__ import annotations

from pathlib import Path

import pytest

from dibea_router.api.app_state import AppState
from dibea_router.config import Settings
from dibea_router.constants import ReplyBackend
from dibea_router.main import build_app_state
from dibea_router.resilience.errors import ConfigurationError


class TestBuildAppState:
    def test_wires_components(self, tmp_path: Path) -> None:
        settings = Settings(log_dir=tmp_path, trace_enabled=False)

        state = build_app_state(settings)

        assert isinstance(state, AppState)
        assert state.settings is settings
        assert state.router.store is state.store
        assert state.router.reply_generator is None
        assert state.dispatcher.get("agent_metrics") is state.metrics
        assert state.route_logger is not None
        assert state.route_logger.log_path == tmp_path / "router.log"
        state.route_logger.close()

    def test_custom_lexicon_path(
        self, tmp_path: Path, lexicon_file: Path
    ) -> None:
        state = build_app_state(
            Settings(log_dir=tmp_path, lexicon_path=lexicon_file)
        )
        assert state.store.path == lexicon_file
        assert state.route_logger is not None
        state.route_logger.close()

    def test_bad_lexicon_aborts(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("version: x\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            build_app_state(Settings(log_dir=tmp_path, lexicon_path=bad))

    def test_incomplete_webhook_config_aborts(self, tmp_path: Path) -> None:
        settings = Settings(
            log_dir=tmp_path, reply_backend=ReplyBackend.WEBHOOK
        )
        with pytest.raises(ConfigurationError, match="REPLY_WEBHOOK_URL"):
            build_app_state(settings)
