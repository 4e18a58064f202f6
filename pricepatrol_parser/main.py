"""
Price Patrol Structured Data Parser - FastAPI Application
Main entry point with REST API endpoints.
"""
from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI, HTTPException, Body
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from pricepatrol_parser import __version__
from pricepatrol_parser.config import config
from pricepatrol_parser.utils.logger import get_logger, set_trace_id
from pricepatrol_parser.layers.resolver import StructuredDataProcessor
from pricepatrol_parser.adapters.page_extractor import PageDataExtractor
from pricepatrol_parser.adapters.page_fetcher import PageFetcher
from pricepatrol_parser.models.payload import (
    ExtractorCapabilities,
    StructuredDataPayload,
    StructuredDataSubmission,
    SubmissionSource,
)
from pricepatrol_parser.models.selector import ExtractedField, FieldSelector


# Initialize FastAPI app
app = FastAPI(
    title="Price Patrol Structured Data Parser",
    description="Extracts structured product data from pages and resolves recipe fields from it",
    version=__version__,
    debug=config.DEBUG,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

processor = StructuredDataProcessor()
page_fetcher = PageFetcher()

logger = get_logger("main")


# Request/Response models
class ResolveRequest(BaseModel):
    """Request model for recipe resolution."""
    payload: Dict[str, Any]
    selectors: Dict[str, FieldSelector]


class ResolveResponse(BaseModel):
    """Response model for recipe resolution."""
    fields: Dict[str, ExtractedField]
    missing: list
    processor_version: str
    trace_id: str


class ExtractRequest(BaseModel):
    """Request model for extraction from supplied HTML."""
    html: str
    registers: Optional[Dict[str, Any]] = None
    url: Optional[str] = None
    selectors: Optional[Dict[str, str]] = None  # ad-hoc CSS selectors


class ExtractUrlRequest(BaseModel):
    """Request model for extraction from a fetched URL."""
    url: str
    selectors: Optional[Dict[str, str]] = None


class ExtractResponse(BaseModel):
    """Response model for page extraction."""
    submission: StructuredDataSubmission
    has_structured_data: bool
    custom_data: Optional[Dict[str, Optional[str]]] = None
    trace_id: str


def _build_extract_response(
    extractor: PageDataExtractor,
    source: SubmissionSource,
    selectors: Optional[Dict[str, str]],
    trace_id: str,
) -> ExtractResponse:
    payload = extractor.extract_all()
    submission = StructuredDataSubmission(
        extractor_version=payload.extractor_version,
        url=payload.url,
        timestamp=payload.timestamp,
        source=source,
        capabilities=extractor.get_capabilities(),
        data=payload,
    )
    return ExtractResponse(
        submission=submission,
        has_structured_data=extractor.has_structured_data(),
        custom_data=extractor.extract_custom_data(selectors) if selectors else None,
        trace_id=trace_id,
    )


# API Routes
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": processor.get_version()}


@app.get("/api/capabilities", response_model=ExtractorCapabilities)
async def capabilities():
    """Extraction categories supported by the page extractor."""
    return PageDataExtractor.get_capabilities()


@app.post("/api/validate")
async def validate_payload(candidate: Any = Body(...)):
    """Structural check of a structured data payload."""
    return {"valid": StructuredDataProcessor.is_valid_payload(candidate)}


@app.post("/api/resolve", response_model=ResolveResponse)
async def resolve_recipe(request: ResolveRequest):
    """
    Resolve recipe fields from a structured data payload.

    Fields that cannot be resolved are listed under "missing".
    """
    trace_id = set_trace_id()

    logger.info(
        "resolve_request",
        fields=list(request.selectors.keys()),
        url=request.payload.get("url"),
        trace_id=trace_id
    )

    if not StructuredDataProcessor.is_valid_payload(request.payload):
        logger.warning("invalid_payload", trace_id=trace_id)
        raise HTTPException(status_code=422, detail="Payload is not valid structured data")

    try:
        payload = StructuredDataPayload.model_validate(request.payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        fields = processor.resolve_recipe(payload, request.selectors)
    except Exception as e:
        logger.error("resolve_error", error=str(e), trace_id=trace_id)
        raise HTTPException(status_code=500, detail=str(e))

    return ResolveResponse(
        fields=fields,
        missing=[name for name in request.selectors if name not in fields],
        processor_version=processor.get_version(),
        trace_id=trace_id,
    )


@app.post("/api/extract", response_model=ExtractResponse)
async def extract_structured_data(request: ExtractRequest):
    """Extract structured data from supplied page HTML."""
    trace_id = set_trace_id()

    logger.info("extract_request", url=request.url, html_length=len(request.html), trace_id=trace_id)

    try:
        extractor = PageDataExtractor(request.html, registers=request.registers, url=request.url)
        return _build_extract_response(extractor, SubmissionSource.API, request.selectors, trace_id)
    except Exception as e:
        logger.error("extract_error", error=str(e), url=request.url)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/extract-url", response_model=ExtractResponse)
async def extract_from_url(request: ExtractUrlRequest):
    """Fetch a page and extract its structured data."""
    trace_id = set_trace_id()

    logger.info("extract_url_request", url=request.url, trace_id=trace_id)

    try:
        extractor = await page_fetcher.fetch_extractor(request.url)
    except httpx.HTTPError as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch page: {str(e)}")

    try:
        return _build_extract_response(extractor, SubmissionSource.SCRAPER, request.selectors, trace_id)
    except Exception as e:
        logger.error("extract_error", error=str(e), url=request.url)
        raise HTTPException(status_code=500, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
