"""Pydantic models for API requests and responses."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from core.seasons import SeasonalEventKind

SOURCE = "ERFA-IAU2006"


class SeasonsQueryParams(BaseModel):
    """Validated query parameters for the ``/seasons`` endpoint."""

    start_jd: float = Field(..., description="Start of the search range (Julian Date, TT)")
    end_jd: float = Field(..., description="End of the search range, exclusive (Julian Date, TT)")
    step_days: float = Field(
        1.0,
        gt=0.0,
        le=30.0,
        description="Declination sampling step in days",
    )
    high_precision: bool = Field(
        True, description="Use the full ERFA solar reduction instead of the truncated series"
    )
    offset_hours: Optional[float] = Field(
        None,
        description="Optional fixed offset in hours applied to derive local times",
    )

    @field_validator("offset_hours")
    def validate_offset_hours(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return value
        if not -24.0 <= value <= 24.0:
            raise ValueError("offset_hours must be within ±24 hours")
        return value


class SeasonalEventModel(BaseModel):
    """A single equinox or solstice."""

    kind: SeasonalEventKind
    jd: float = Field(..., description="Julian Date of the event (TT)")
    declination_deg: Optional[float] = Field(
        None, description="Extreme solar declination, solstices only"
    )
    utc: Optional[str] = Field(None, description="Event time in UTC (ISO-8601)")
    local: Optional[str] = Field(
        None, description="Event time in local time when offset provided"
    )


class SeasonsResponse(BaseModel):
    """Successful equinox/solstice response payload."""

    ok: bool = True
    start_jd: float
    end_jd: float
    step_days: float
    high_precision: bool
    offset_hours: Optional[float] = Field(
        None, description="User-specified offset in hours"
    )
    events: List[SeasonalEventModel]
    source: Literal["ERFA-IAU2006"] = Field(
        SOURCE, description="Solar ephemeris source identifier"
    )


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    source: Literal["ERFA-IAU2006"] = SOURCE


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
