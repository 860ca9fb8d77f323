"""FastAPI backend exposing the page scanner and field locator over HTML snapshots."""

import hashlib
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from fill_assist.config.settings import settings
from fill_assist.core.cache import TTLCache
from fill_assist.core.errors import AppError
from fill_assist.core.logging import get_logger, setup_logging
from fill_assist.core.metrics import metrics
from fill_assist.core.middleware import ObservabilityMiddleware
from fill_assist.core.schemas import (
    ErrorBody,
    ErrorResponse,
    LocateRequest,
    LocateResponse,
    PageData,
    ScanRequest,
)
from fill_assist.core.validators import validate_query
from fill_assist.page import SoupDocument, describe_control, extract_page_data, locate_field

setup_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    async with TTLCache(
        default_ttl=settings.cache.ttl_seconds,
        max_entries=settings.cache.max_entries,
        sweep_interval=settings.cache.sweep_interval_seconds,
    ) as cache:
        app.state.cache = cache
        logger.info("Cache ready")
        yield
    logger.info("Cache destroyed")


app = FastAPI(title="Fill Assist", version="0.1.0", lifespan=lifespan)
app.add_middleware(ObservabilityMiddleware)


def _error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(code=code, message=message, details=details))
    return JSONResponse(body.model_dump(mode="json"), status_code=status_code)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
    return _error_response(exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc!r}", exc_info=exc)
    return _error_response(500, "INTERNAL_ERROR", "Internal server error")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _error_response(
        400, "VALIDATION_ERROR", "Invalid request data", jsonable_encoder(exc.errors())
    )


def _scan(html: str, url: str) -> PageData:
    return extract_page_data(SoupDocument(html, url=url))


@app.get("/health")
async def health() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"status": "ok", "service": "fill-assist"})


@app.get("/metrics")
async def get_metrics(request: Request) -> JSONResponse:
    """Request metrics plus cache hit/miss counters."""
    cache: TTLCache = request.app.state.cache
    snapshot = metrics.snapshot()
    snapshot.update(cache_hits=cache.hits, cache_misses=cache.misses, cache_size=len(cache))
    return JSONResponse(snapshot)


@app.get("/cache/stats")
async def cache_stats(request: Request) -> JSONResponse:
    return JSONResponse(request.app.state.cache.stats())


@app.post("/page/scan", response_model=PageData)
async def scan_page(payload: ScanRequest, request: Request) -> PageData:
    """Forms and fillable fields of an HTML snapshot; repeated snapshots hit the cache."""
    cache: TTLCache = request.app.state.cache
    digest = hashlib.sha256(payload.html.encode("utf-8")).hexdigest()
    return await cache.get_cached(
        f"scan:{payload.url}:{digest}",
        lambda: run_in_threadpool(_scan, payload.html, payload.url),
    )


@app.post("/page/locate", response_model=LocateResponse)
async def locate(payload: LocateRequest) -> LocateResponse:
    validate_query(payload.field_name, settings.api.max_query_length)
    # Exact id/name tiers need the raw name, not the sanitized one
    field_name = payload.field_name.strip()
    document = SoupDocument(payload.html)
    control = locate_field(document, field_name)
    if control is None:
        return LocateResponse(found=False)
    return LocateResponse(found=True, field=describe_control(document, control))
