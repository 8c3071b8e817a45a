"""FastAPI application exposing equinox and solstice computations."""

from __future__ import annotations

import json
import logging
import os
import time
from datetime import UTC, timedelta, timezone
from typing import List, Optional

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from core.astro import jd_to_datetime
from core.seasons import SeasonalEvent, SeasonalMarkerScanner
from models import (
    ErrorResponse,
    HealthResponse,
    SeasonalEventModel,
    SeasonsQueryParams,
    SeasonsResponse,
)

logging.basicConfig(level=logging.INFO, format="%(message)s")
LOGGER = logging.getLogger("seasons-api")

APP_DESCRIPTION = (
    "Equinox and solstice times from the Sun's apparent declination (ERFA, IAU 2006/2000A)"
)

DEFAULT_MAX_SPAN_DAYS = 36525.0


def _max_span_days() -> float:
    return float(os.environ.get("SEASONS_MAX_SPAN_DAYS", DEFAULT_MAX_SPAN_DAYS))


def _worker_count() -> int:
    return max(1, int(os.environ.get("SEASONS_N_JOBS", "1")))


def _cors_origins() -> List[str]:
    raw = os.environ.get("SEASONS_CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - exercised in integration tests
    LOGGER.info(
        json.dumps(
            {
                "event": "startup",
                "max_span_days": _max_span_days(),
                "n_jobs": _worker_count(),
            }
        )
    )
    yield


app = FastAPI(
    title="Seasons API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _format_utc(jd: float) -> Optional[str]:
    try:
        dt = jd_to_datetime(jd)
    except ValueError:
        return None
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _format_local(jd: float, offset_hours: Optional[float]) -> Optional[str]:
    if offset_hours is None:
        return None
    try:
        dt = jd_to_datetime(jd)
    except ValueError:
        return None
    offset = timezone(timedelta(hours=offset_hours))
    return dt.astimezone(offset).isoformat()


def _event_model(event: SeasonalEvent, offset_hours: Optional[float]) -> SeasonalEventModel:
    return SeasonalEventModel(
        kind=event.kind,
        jd=event.jd,
        declination_deg=event.declination,
        utc=_format_utc(event.jd),
        local=_format_local(event.jd, offset_hours),
    )


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True)


@app.get(
    "/seasons",
    response_model=SeasonsResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def seasons_endpoint(params: SeasonsQueryParams = Depends()) -> SeasonsResponse:
    if params.end_jd <= params.start_jd:
        raise HTTPException(status_code=400, detail="end_jd must be greater than start_jd")
    max_span = _max_span_days()
    if params.end_jd - params.start_jd > max_span:
        raise HTTPException(
            status_code=400,
            detail=f"Requested range exceeds the maximum span of {max_span:g} days",
        )

    start_time = time.perf_counter()
    scanner = SeasonalMarkerScanner()
    try:
        events = scanner.calculate_parallel(
            params.start_jd,
            params.end_jd,
            params.step_days,
            params.high_precision,
            n_jobs=_worker_count(),
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    duration_ms = (time.perf_counter() - start_time) * 1000.0

    response = SeasonsResponse(
        start_jd=params.start_jd,
        end_jd=params.end_jd,
        step_days=params.step_days,
        high_precision=params.high_precision,
        offset_hours=params.offset_hours,
        events=[_event_model(event, params.offset_hours) for event in events],
    )

    LOGGER.info(
        json.dumps(
            {
                "event": "seasons",
                "start_jd": params.start_jd,
                "end_jd": params.end_jd,
                "step_days": params.step_days,
                "high_precision": params.high_precision,
                "found": len(response.events),
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response
