"""Tests for message normalization."""

from __future__ import annotations

import pytest

from dibea_router.routing.normalizer import (
    normalize,
    normalize_phrase,
    strip_accents,
    tokenize,
)


def test_lowercases_and_strips_accents() -> None:
    msg = normalize("  Vacinação do CÃO  ")
    assert msg.tokens == ("vacinacao", "do", "cao")
    assert msg.text == "vacinacao do cao"
    assert msg.raw == "  Vacinação do CÃO  "


def test_punctuation_and_underscore_are_boundaries() -> None:
    assert tokenize("olá,tudo_bem?sim!") == ("ola", "tudo", "bem", "sim")


def test_digits_are_kept() -> None:
    assert tokenize("vacina V10 em 2024") == ("vacina", "v10", "em", "2024")


def test_collapses_whitespace() -> None:
    assert normalize("a \t\n  b").text == "a b"


@pytest.mark.parametrize("raw", ["", "   ", "\n\t", "?!..."])
def test_empty_input(raw: str) -> None:
    msg = normalize(raw)
    assert msg.tokens == ()
    assert msg.is_empty


def test_strip_accents() -> None:
    assert strip_accents("ção àéîõü") == "cao aeiou"


@pytest.mark.parametrize(
    "raw",
    [
        "Quero enviar a carteira de vacinação",
        "Olá, como você está?",
        "  Rex   tomou VERMÍFUGO!! ",
        "xyzabc123",
        "ℌello",
        "㎒ signal",
        "İzmir",
    ],
)
def test_idempotent(raw: str) -> None:
    once = normalize(raw)
    assert normalize(once.text).tokens == once.tokens
    assert normalize(once.raw) == once


def test_normalize_phrase_matches_message_tokens() -> None:
    assert normalize_phrase("Estatístic") == ("estatistic",)
    assert normalize_phrase("carteira de vacin") == (
        "carteira",
        "de",
        "vacin",
    )


@pytest.mark.parametrize(
    ("raw", "tokens"),
    [
        ("ℌello", ("hello",)),
        ("㎒ signal", ("mhz", "signal")),
        ("ＣＡＤＡＳＴＲＯ", ("cadastro",)),
    ],
)
def test_compatibility_characters_fold_to_lower_case(
    raw: str, tokens: tuple[str, ...]
) -> None:
    assert tokenize(raw) == tokens
