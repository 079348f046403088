"""Health check endpoint."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from dibea_router import __version__
from dibea_router.api.dependencies import get_store
from dibea_router.lexicon.store import LexiconStore

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(
    store: LexiconStore = Depends(get_store),
) -> dict[str, str]:
    """Liveness for load balancers, with the active lexicon version."""
    return {
        "status": "healthy",
        "version": __version__,
        "lexicon_version": store.current.version,
        "timestamp": datetime.now(UTC).isoformat(),
    }
