"""FastAPI application for the competitor analysis API."""

from __future__ import annotations

import logging
import time
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel

from competitor_analysis import __version__
from competitor_analysis.config.settings import Settings
from competitor_analysis.errors import (
    ComparisonFailure,
    ResolutionFailure,
    UnknownChartType,
    UnknownMetric,
)
from competitor_analysis.service import CompetitorService

settings = Settings()

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

_started_at = time.monotonic()

# Singleton service (resolver + record cache live for the process)
_service: Optional[CompetitorService] = None


def get_service() -> CompetitorService:
    global _service
    if _service is None:
        _service = CompetitorService(settings=settings)
    return _service


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if _service is not None:
        await _service.aclose()


app = FastAPI(title="Competitor Analysis API", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ResolutionFailure)
async def resolution_failure_handler(request: Request, exc: ResolutionFailure):
    return JSONResponse(status_code=404, content={"status": "fail", "message": str(exc)})


@app.exception_handler(ComparisonFailure)
async def comparison_failure_handler(request: Request, exc: ComparisonFailure):
    return JSONResponse(
        status_code=404,
        content={"status": "fail", "message": str(exc), "company": exc.company_name},
    )


@app.exception_handler(UnknownChartType)
@app.exception_handler(UnknownMetric)
async def unknown_name_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"status": "fail", "message": str(exc)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    content = {"status": "error", "message": "Internal server error"}
    if settings.is_development:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=content)


@app.get("/api/health")
async def health(service: CompetitorService = Depends(get_service)):
    """Liveness plus which providers are configured."""
    return {
        "status": "OK",
        "uptime": round(time.monotonic() - _started_at, 3),
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        "version": __version__,
        "environment": settings.environment,
        "apis": {
            to_camel(p.source.name.lower()): p.enabled for p in service.resolver.providers
        },
    }


@app.get("/api/companies")
async def list_companies(service: CompetitorService = Depends(get_service)):
    """All resolved (cached) companies."""
    records = service.list_companies()
    return {
        "status": "success",
        "results": len(records),
        "data": [r.to_wire() for r in records],
    }


@app.get("/api/companies/{name}")
async def get_company(name: str, service: CompetitorService = Depends(get_service)):
    """Resolve-or-fetch a single company."""
    record = await service.get_company(name)
    return {"status": "success", "data": record.to_wire()}


@app.post("/api/companies/{name}/refresh")
async def refresh_company(name: str, service: CompetitorService = Depends(get_service)):
    """Force a re-fetch from providers, replacing the cached record."""
    record = await service.refresh_company(name)
    return {"status": "success", "data": record.to_wire()}


def _missing_pair() -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "status": "fail",
            "message": "Please provide both company1 and company2 query parameters",
        },
    )


@app.get("/api/comparison")
async def compare_companies(
    company1: Optional[str] = None,
    company2: Optional[str] = None,
    service: CompetitorService = Depends(get_service),
):
    """Compare two companies, resolving each first."""
    if not company1 or not company2 or not company1.strip() or not company2.strip():
        return _missing_pair()
    result = await service.compare(company1, company2)
    return {"status": "success", "data": result.to_wire()}


@app.get("/api/comparison/chart/{chart_type}")
async def comparison_chart(
    chart_type: str,
    company1: Optional[str] = None,
    company2: Optional[str] = None,
    service: CompetitorService = Depends(get_service),
):
    """A single chart projection for a pair of companies."""
    if not company1 or not company2 or not company1.strip() or not company2.strip():
        return _missing_pair()
    chart = await service.chart(company1, company2, chart_type)
    return {"status": "success", "data": chart.to_wire()}


@app.get("/api/comparison/detail/{metric}")
async def comparison_detail(
    metric: str,
    company1: Optional[str] = None,
    company2: Optional[str] = None,
    service: CompetitorService = Depends(get_service),
):
    """One section (financial, product, customer), one metric, or the overall verdict."""
    if not company1 or not company2 or not company1.strip() or not company2.strip():
        return _missing_pair()
    detail = await service.detail(company1, company2, metric)
    return {"status": "success", "data": detail.to_wire()}
