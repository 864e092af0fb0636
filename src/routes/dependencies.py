from fastapi import Request

from pipeline.orchestrator import EnrichmentOrchestrator


def get_orchestrator(request: Request) -> EnrichmentOrchestrator:
    return request.app.state.orchestrator
