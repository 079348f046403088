"""Tests for CLI argument parsing and the route/validate commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dibea_router import __version__
from dibea_router.cli import (
    EXIT_CONFIG_ERROR,
    EXIT_INVALID_INPUT,
    _build_parser,
    main,
)


class TestArgParser:
    def test_version_flag(self) -> None:
        args = _build_parser().parse_args(["--version"])
        assert args.version is True

    def test_route_defaults(self) -> None:
        args = _build_parser().parse_args(["route", "Quero adotar"])
        assert args.command == "route"
        assert args.message == "Quero adotar"
        assert args.history_json is None
        assert args.role is None
        assert args.lexicon is None
        assert args.session_id is None

    def test_route_role_case_insensitive(self) -> None:
        args = _build_parser().parse_args(
            ["route", "oi", "--role", "veterinario"]
        )
        assert args.role == "VETERINARIO"

    def test_route_unknown_role_rejected(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["route", "oi", "--role", "root"])

    def test_validate_path_optional(self) -> None:
        args = _build_parser().parse_args(["validate"])
        assert args.command == "validate"
        assert args.path is None

    def test_no_command_prints_help(self) -> None:
        args = _build_parser().parse_args([])
        assert args.command is None


class TestMain:
    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["--version"])
        assert capsys.readouterr().out.strip() == f"dibea-router {__version__}"


class TestRouteCommand:
    def test_prints_agent_response(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        main(["route", "Quero enviar a carteira de vacinação"])

        data = json.loads(capsys.readouterr().out)
        assert data["agent"] == "document"
        assert data["degraded"] is False
        assert data["entities"]["document_type"] == "CARTEIRA_VACINACAO"
        assert data["actions"][0]["actionKey"] == "upload_document"
        assert data["actions"][0]["payload"] == {
            "document_type": "CARTEIRA_VACINACAO"
        }

    def test_history_and_role(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        history = tmp_path / "history.json"
        history.write_text(
            json.dumps([{"sender": "user", "content": "quero adotar um gato"}]),
            encoding="utf-8",
        )

        main(
            [
                "route",
                "sim",
                "--history-json",
                str(history),
                "--role",
                "veterinario",
            ]
        )

        data = json.loads(capsys.readouterr().out)
        assert data["agent"] == "tutor"
        assert data["usedContext"] is True
        assert [a["actionKey"] for a in data["actions"]] == [
            "adoption_process",
            "pending_adoptions",
        ]

    def test_empty_message_exits_invalid_input(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["route", "   "])
        assert exc_info.value.code == EXIT_INVALID_INPUT
        assert "empty" in capsys.readouterr().err

    def test_bad_history_file_exits_invalid_input(
        self, tmp_path: Path
    ) -> None:
        history = tmp_path / "history.json"
        history.write_text('[{"sender": "robot"}]', encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main(["route", "oi", "--history-json", str(history)])
        assert exc_info.value.code == EXIT_INVALID_INPUT

    def test_bad_lexicon_exits_config_error(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("version: 1\ntriggers: {}\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main(["route", "oi", "--lexicon", str(bad)])
        assert exc_info.value.code == EXIT_CONFIG_ERROR


class TestValidateCommand:
    def test_bundled_lexicon_ok(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        main(["validate"])
        out = capsys.readouterr().out
        header, _, summary = out.partition("\n")
        assert header.startswith("Lexicon OK: ")
        assert json.loads(summary)["version"] == "2025.10.1"

    def test_custom_lexicon_ok(
        self, lexicon_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        main(["validate", str(lexicon_file)])
        assert str(lexicon_file) in capsys.readouterr().out

    def test_missing_file_exits_config_error(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["validate", str(tmp_path / "missing.yaml")])
        assert exc_info.value.code == EXIT_CONFIG_ERROR
        assert "not found" in capsys.readouterr().err
