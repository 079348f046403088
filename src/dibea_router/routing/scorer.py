"""Lexicon scorer: one auditable pass over the message tokens.

Scoring rules:
1. A rule matches where its phrase appears as a contiguous token
   subsequence; with ``prefix`` the last token only needs to start
   the message token.
2. Every occurrence counts: a rule matching twice adds its weight
   twice.
3. Distinct rules for the same category accumulate additively.
4. Weights are positive (enforced by the loader), so no category
   ever goes negative.
"""

from __future__ import annotations

from collections.abc import Sequence

from dibea_router.lexicon.schemas import Lexicon, TriggerRule
from dibea_router.routing.normalizer import NormalizedMessage
from dibea_router.routing.schemas import ScoreBoard, empty_scoreboard


def count_occurrences(
    tokens: Sequence[str],
    phrase: Sequence[str],
    *,
    prefix: bool = False,
) -> int:
    """Count start positions where ``phrase`` matches ``tokens``."""
    size = len(phrase)
    if size == 0 or size > len(tokens):
        return 0

    head, last = phrase[:-1], phrase[-1]
    count = 0
    for start in range(len(tokens) - size + 1):
        window = tokens[start : start + size]
        if tuple(window[:-1]) != tuple(head):
            continue
        candidate = window[-1]
        if candidate == last or (prefix and candidate.startswith(last)):
            count += 1
    return count


def rule_score(tokens: Sequence[str], rule: TriggerRule) -> float:
    """Weight contributed by a single rule."""
    hits = count_occurrences(tokens, rule.phrase, prefix=rule.prefix)
    return rule.weight * hits


def score(message: NormalizedMessage, lexicon: Lexicon) -> ScoreBoard:
    """Accumulate per-category scores for a normalized message."""
    board = empty_scoreboard()
    if message.is_empty:
        return board
    for rule in lexicon.iter_rules():
        board[rule.category] += rule_score(message.tokens, rule)
    return board
