"""Message normalization: lower-case, accent-free token sequence.

"Adoção!!" and "adocao" normalize to the same token, so lexicon
authors and users may write with or without diacritics. The
function is pure and a fixed point after one pass.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass

_TOKEN_RE = re.compile(r"[^\W_]+")


@dataclass(frozen=True)
class NormalizedMessage:
    """Per-request normalized view of a raw message."""

    raw: str
    text: str
    tokens: tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.tokens


def strip_accents(value: str) -> str:
    """Drop combining marks after NFKD decomposition."""
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(
        ch for ch in decomposed if not unicodedata.combining(ch)
    )


def tokenize(value: str) -> tuple[str, ...]:
    """Split on every non-alphanumeric boundary after folding.

    Lower-cased after NFKD: compatibility characters such as "ℌ"
    decompose to upper-case letters.
    """
    folded = strip_accents(value.strip()).lower()
    return tuple(_TOKEN_RE.findall(folded))


def normalize(raw: str) -> NormalizedMessage:
    """Normalize a raw user message.

    Empty or whitespace-only input yields an empty token sequence,
    never an error.
    """
    tokens = tokenize(raw)
    return NormalizedMessage(
        raw=raw, text=" ".join(tokens), tokens=tokens
    )


def normalize_phrase(phrase: str) -> tuple[str, ...]:
    """Normalize a lexicon phrase with the same rules as messages."""
    return tokenize(phrase)
