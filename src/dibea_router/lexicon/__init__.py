"""Routing lexicon: trigger rules, action templates, canned replies."""

from dibea_router.lexicon.loader import (
    DEFAULT_LEXICON_PATH,
    load_lexicon,
    parse_lexicon,
)
from dibea_router.lexicon.schemas import (
    ActionTemplate,
    EntityPattern,
    Lexicon,
    RouterSettings,
    TriggerRule,
)
from dibea_router.lexicon.store import LexiconStore

__all__ = [
    "DEFAULT_LEXICON_PATH",
    "ActionTemplate",
    "EntityPattern",
    "Lexicon",
    "LexiconStore",
    "RouterSettings",
    "TriggerRule",
    "load_lexicon",
    "parse_lexicon",
]
