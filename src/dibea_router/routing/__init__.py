"""Routing pipeline: normalize, score, classify, synthesize actions.

``AgentRouter`` lives in ``dibea_router.routing.router``; it is not
re-exported here because it pulls in the lexicon store and reply
collaborators.
"""

from dibea_router.routing.actions import synthesize
from dibea_router.routing.classifier import classify, disambiguate
from dibea_router.routing.entities import extract_entities
from dibea_router.routing.normalizer import NormalizedMessage, normalize
from dibea_router.routing.schemas import (
    AgentResponse,
    HistoryMessage,
    RoutingDecision,
    ScoreBoard,
    SuggestedAction,
)
from dibea_router.routing.scorer import score

__all__ = [
    "AgentResponse",
    "HistoryMessage",
    "NormalizedMessage",
    "RoutingDecision",
    "ScoreBoard",
    "SuggestedAction",
    "classify",
    "disambiguate",
    "extract_entities",
    "normalize",
    "score",
    "synthesize",
]
