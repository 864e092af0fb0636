"""Domain, email and CSV batch enrichment endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from common.errors import http_status_for
from common.logging import get_logger
from models.enrichment import EmailEnrichmentResult, EnrichmentResult
from models.lead import Lead
from pipeline.orchestrator import EnrichmentOrchestrator
from routes.dependencies import get_orchestrator

logger = get_logger(__name__)
router = APIRouter(prefix="/api/enrichment", tags=["enrichment"])


class DomainRequest(BaseModel):
    domain: str = ""


class EmailRequest(BaseModel):
    email: str = ""


class LeadsRequest(BaseModel):
    leads: list[Lead] = Field(default_factory=list)


def _respond(result: EnrichmentResult | EmailEnrichmentResult) -> JSONResponse:
    """Status code comes from the error kind; the body always carries success, error and message."""
    body = result.model_dump(mode="json", by_alias=True)
    body["message"] = result.message
    if isinstance(result, EnrichmentResult) and not result.success:
        body["leads"] = []
    return JSONResponse(status_code=http_status_for(result.error_kind), content=body)


@router.post("/domain")
async def enrich_domain(request: DomainRequest, orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator)):
    """
    Enrich a company domain with contact leads.

    Runs hybrid (search + website), then direct AI knowledge, then external
    contact databases; the first stage with at least one lead wins.

    Example request:
        ```json
        {"domain": "acme.com"}
        ```
    """
    try:
        result = await orchestrator.enrich_domain(request.domain)
    except Exception as e:
        logger.error(f"Domain enrichment failed for {request.domain}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Enrichment failed: {str(e)}") from e

    logger.info(f"Domain enrichment for {request.domain}: {result.message}")
    return _respond(result)


@router.post("/email")
async def enrich_email(request: EmailRequest, orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator)):
    """Enrich a single email address into a lead."""
    try:
        result = await orchestrator.enrich_by_email(request.email)
    except Exception as e:
        logger.error(f"Email enrichment failed for {request.email}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Email enrichment failed: {str(e)}") from e

    logger.info(f"Email enrichment for {request.email}: {result.message}")
    return _respond(result)


@router.post("/deduplicate")
async def deduplicate(request: LeadsRequest, orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator)):
    if not request.leads:
        raise HTTPException(status_code=400, detail="No leads provided")
    try:
        result = await orchestrator.deduplicate_leads(request.leads)
    except Exception as e:
        logger.error(f"Deduplication failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Deduplication failed: {str(e)}") from e
    return result.model_dump(mode="json", by_alias=True)


@router.post("/batch")
async def enrich_batch(request: LeadsRequest, orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator)):
    """Classify specialty and seniority for uploaded CSV leads."""
    if not request.leads:
        raise HTTPException(status_code=400, detail="No leads provided")
    try:
        leads = await orchestrator.enrich_leads(request.leads)
    except Exception as e:
        logger.error(f"Batch enrichment failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Batch enrichment failed: {str(e)}") from e
    return {
        "success": True,
        "leads": [lead.export_row() for lead in leads],
        "metadata": {"totalLeads": len(leads)},
    }


@router.get("/status")
async def status(orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator)):
    return orchestrator.status()


@router.post("/{stage}")
async def enrich_with_stage(
    stage: Literal["hybrid", "openai", "external"],
    request: DomainRequest,
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
):
    """Run a single enrichment stage for a domain, outside the cascade."""
    try:
        result = await orchestrator.run_stage(stage, request.domain)
    except Exception as e:
        logger.error(f"{stage} enrichment failed for {request.domain}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Enrichment failed: {str(e)}") from e
    return _respond(result)
