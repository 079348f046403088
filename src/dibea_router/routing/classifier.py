"""Score board → routing decision, with one-message context fallback.

Classification rules:
1. Highest score wins.
2. Equal non-zero scores resolve by the priority order
   (ANIMAL > PROCEDURE > TUTOR > DOCUMENT > GENERAL by default).
3. A top score of zero routes to DEFAULT with confidence 0.
4. confidence = winning score / total score, a dominance measure,
   not a calibrated probability.

No input raises: an all-zero board is the normal DEFAULT case.
"""

from __future__ import annotations

from collections.abc import Sequence

from dibea_router.constants import (
    PRIORITY_ORDER,
    AgentCategory,
    SenderRole,
)
from dibea_router.lexicon.schemas import Lexicon
from dibea_router.routing.normalizer import normalize
from dibea_router.routing.schemas import (
    HistoryMessage,
    RoutingDecision,
    ScoreBoard,
)
from dibea_router.routing.scorer import score


def classify(
    scores: ScoreBoard,
    priority: Sequence[AgentCategory] = PRIORITY_ORDER,
) -> RoutingDecision:
    """Pick the winning category for a score board."""
    board = dict(scores)
    ranked = [c for c in priority if c is not AgentCategory.DEFAULT]
    top = max((board.get(c, 0.0) for c in ranked), default=0.0)
    total = sum(board.get(c, 0.0) for c in ranked)

    if top <= 0.0 or total <= 0.0:
        return RoutingDecision(
            agent=AgentCategory.DEFAULT, confidence=0.0, scores=board
        )

    # First category in priority order holding the top score.
    winner = next(c for c in ranked if board.get(c, 0.0) == top)
    return RoutingDecision(
        agent=winner, confidence=top / total, scores=board
    )


def recent_user_messages(
    history: Sequence[HistoryMessage], depth: int
) -> list[str]:
    """Last ``depth`` user turns, oldest first; agent replies skipped."""
    if depth <= 0:
        return []
    picked: list[str] = []
    for entry in reversed(history):
        if entry.sender == SenderRole.USER and entry.content.strip():
            picked.append(entry.content)
            if len(picked) == depth:
                break
    picked.reverse()
    return picked


def needs_context(decision: RoutingDecision, lexicon: Lexicon) -> bool:
    return decision.confidence < lexicon.settings.confidence_threshold


def disambiguate(
    decision: RoutingDecision,
    message: str,
    history: Sequence[HistoryMessage],
    lexicon: Lexicon,
) -> RoutingDecision:
    """Re-score with prior user turns when no category dominates.

    Runs only below the confidence threshold and with at least one
    prior user message. The context decision is kept only if it
    reaches the threshold; otherwise the original decision stands.
    """
    if not needs_context(decision, lexicon):
        return decision

    prior = recent_user_messages(
        history, lexicon.settings.history_lookback
    )
    if not prior:
        return decision

    combined = normalize(" ".join([*prior, message]))
    candidate = classify(score(combined, lexicon), lexicon.priority)
    if needs_context(candidate, lexicon):
        return decision

    return RoutingDecision(
        agent=candidate.agent,
        confidence=candidate.confidence,
        scores=candidate.scores,
        used_context=True,
    )
