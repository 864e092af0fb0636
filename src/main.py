#!/usr/bin/env python3
"""
FastAPI server for the lead enrichment cascade.
"""

# Load environment variables first
import os

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI  # noqa: E402

from common.config import config  # noqa: E402
from pipeline.events import LoggingEventSink  # noqa: E402
from pipeline.orchestrator import build_orchestrator  # noqa: E402
from routes import cache, enrichment, health  # noqa: E402

# Initialize
app = FastAPI(
    title="Lead Enrichment Cascade API",
    description="Domain and email lead enrichment (search, website, AI, contact databases) with CSV deduplication",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)
app.state.orchestrator = build_orchestrator(config, events=LoggingEventSink())

# Include routers
app.include_router(health.router)
app.include_router(enrichment.router)
app.include_router(cache.router)


if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", 8080))

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        log_level="info",
    )
