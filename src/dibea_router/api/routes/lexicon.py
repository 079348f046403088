"""Lexicon inspection and hot-reload routes."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Response

from dibea_router.api.dependencies import get_store
from dibea_router.api.schemas import APIResponse
from dibea_router.lexicon.store import LexiconStore
from dibea_router.resilience.errors import ConfigurationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agents/lexicon", tags=["lexicon"])


@router.get("")
async def get_lexicon(
    store: LexiconStore = Depends(get_store),
) -> APIResponse:
    """Version and shape of the active lexicon."""
    return APIResponse(success=True, data=store.current.summary())


@router.post("/reload")
async def reload_lexicon(
    response: Response,
    store: LexiconStore = Depends(get_store),
) -> APIResponse:
    """Re-read the lexicon file; on error the old lexicon stays active."""
    previous = store.current.version
    try:
        fresh = await asyncio.to_thread(store.reload)
    except ConfigurationError as exc:
        logger.error("event=lexicon_reload_failed error=%s", exc)
        response.status_code = 500
        return APIResponse(
            success=False,
            error=str(exc),
            metadata={"activeVersion": previous},
        )

    return APIResponse(
        success=True,
        data=fresh.summary(),
        metadata={"previousVersion": previous},
    )
