"""Result cache inspection endpoints."""

from fastapi import APIRouter, Depends

from common.logging import get_logger
from pipeline.orchestrator import EnrichmentOrchestrator
from routes.dependencies import get_orchestrator

logger = get_logger(__name__)
router = APIRouter(prefix="/api/cache", tags=["cache"])


@router.get("/stats")
async def cache_stats(orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator)):
    return orchestrator.cache.stats()


@router.delete("/clear")
async def clear_cache(pattern: str | None = None, orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator)):
    """Clear every cached result, or only keys containing `pattern` (e.g. `domain:acme`)."""
    removed = orchestrator.cache.clear(pattern)
    return {"success": True, "cleared": removed, "pattern": pattern}
