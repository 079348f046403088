"""Hot-reloadable holder for the active lexicon snapshot."""

from __future__ import annotations

import logging
from pathlib import Path

from dibea_router.lexicon.loader import load_lexicon
from dibea_router.lexicon.schemas import Lexicon

logger = logging.getLogger(__name__)


class LexiconStore:
    """Serves one immutable Lexicon and swaps it atomically on reload.

    Readers call ``current`` once per request and keep that snapshot
    for the whole request; a reload only rebinds a single attribute,
    so a reader sees either the old or the new lexicon, never a mix.
    """

    def __init__(
        self,
        lexicon: Lexicon | None = None,
        *,
        path: Path | None = None,
    ) -> None:
        self._path = path
        self._lexicon = lexicon if lexicon is not None else load_lexicon(path)

    @property
    def current(self) -> Lexicon:
        return self._lexicon

    @property
    def path(self) -> Path | None:
        return self._path

    def reload(self) -> Lexicon:
        """Load and validate the source file, then swap it in.

        On ConfigurationError the previous snapshot stays active.
        """
        fresh = load_lexicon(self._path)
        previous = self._lexicon.version
        self._lexicon = fresh
        logger.info(
            "event=lexicon_reloaded previous=%s current=%s",
            previous,
            fresh.version,
        )
        return fresh
