from datetime import date, datetime
from typing import Any, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.config import settings
from core.state import ParsedFlightQuery


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Chat ───────────────────────────────────────────────────────────────────────

class ChatRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        json_schema_extra={
            "example": {"query": "cheap flight from NYC to London next week"},
        },
    )

    query: str = Field(min_length=1, max_length=settings.max_query_length)
    user_id: Optional[UUID] = None  # optional, enables per-user history


class Price(CamelModel):
    amount: float
    currency: str


class FlightSegment(CamelModel):
    origin: str
    destination: str
    departure: str
    arrival: str
    duration: int
    carrier: str
    flight_number: str
    aircraft: str


class FlightResult(CamelModel):
    id: str
    price: Price
    segments: List[FlightSegment] = []
    total_duration: int
    stops: int


class SearchMetadata(CamelModel):
    search_id: str
    results_count: int
    search_time: int  # milliseconds
    timestamp: datetime


class ChatResponse(CamelModel):
    parsed_query: ParsedFlightQuery
    results: List[FlightResult] = []
    metadata: SearchMetadata


# ── Search history ────────────────────────────────────────────────────────────

class SearchHistoryOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    user_id: Optional[str] = None
    query: str
    origin: str
    destination: str
    departure_date: date
    return_date: Optional[date] = None
    results_count: int
    search_time_ms: int
    cabin_class: str
    passengers: int
    created_at: Optional[datetime] = None


class PopularRouteOut(BaseModel):
    origin: str
    destination: str
    count: int


# ── Errors ────────────────────────────────────────────────────────────────────

class ErrorResponse(CamelModel):
    status_code: int
    error: str
    message: Union[str, List[str]]
    timestamp: datetime
    path: str
    correlation_id: Optional[str] = None
    field: Optional[str] = None
    details: Optional[Any] = None  # development only
