"""Lightweight entity extraction for action payloads.

Lexicon-driven groups (species, procedure type, document type) map
phrases to canonical values; within a group the first value in
lexicon order that matches wins. The animal name is a best-effort
guess: a capitalised word that is not the first word of the message,
not a stop word and not a trigger token ("Acabei de vacinar o Rex").
"""

from __future__ import annotations

import re

from dibea_router.constants import ANIMAL_NAME_ENTITY, NAME_STOPWORDS
from dibea_router.lexicon.schemas import Lexicon
from dibea_router.routing.normalizer import NormalizedMessage, tokenize
from dibea_router.routing.scorer import count_occurrences

_WORD_RE = re.compile(r"[^\W\d_]+")


def extract_entities(
    message: NormalizedMessage, lexicon: Lexicon
) -> dict[str, str]:
    """Extract entity key → canonical value pairs from a message."""
    found: dict[str, str] = {}
    for pattern in lexicon.entities:
        if pattern.key in found:
            continue
        if any(
            count_occurrences(message.tokens, phrase, prefix=True)
            for phrase in pattern.phrases
        ):
            found[pattern.key] = pattern.value

    name = guess_animal_name(
        message.raw, lexicon.trigger_tokens, lexicon.trigger_prefixes
    )
    if name:
        found[ANIMAL_NAME_ENTITY] = name
    return found


def guess_animal_name(
    raw: str,
    trigger_tokens: frozenset[str],
    trigger_prefixes: frozenset[str] = frozenset(),
) -> str | None:
    words = _WORD_RE.findall(raw)
    for word in words[1:]:
        if not word[0].isupper():
            continue
        folded = tokenize(word)
        if not folded:
            continue
        token = folded[0]
        if token in NAME_STOPWORDS or token in trigger_tokens:
            continue
        if any(token.startswith(stem) for stem in trigger_prefixes):
            continue
        return word
    return None

