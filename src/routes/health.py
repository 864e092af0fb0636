"""Health check and service info endpoints."""

from fastapi import APIRouter

from common.config import config

router = APIRouter(tags=["health"])


@router.get("/")
async def root():
    """Root endpoint with basic info."""
    return {
        "service": "Lead Enrichment Cascade API",
        "version": "0.1.0",
        "status": "running",
        "description": "Domain and email lead enrichment with CSV deduplication",
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "enrich_domain": "/api/enrichment/domain",
            "enrich_email": "/api/enrichment/email",
            "deduplicate": "/api/enrichment/deduplicate",
            "batch": "/api/enrichment/batch",
            "status": "/api/enrichment/status",
            "cache_stats": "/api/cache/stats",
        },
        "example_request": {"domain": "acme.com"},
    }


@router.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "lead-enrichment-cascade",
        "openai_configured": config.openai_configured,
        "search_configured": config.serper_configured,
    }
