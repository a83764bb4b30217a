"""Typed flight-search parameters produced by the query parser."""
from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CabinClass(str, Enum):
    ECONOMY = "economy"
    PREMIUM_ECONOMY = "premium_economy"
    BUSINESS = "business"
    FIRST = "first"


class Passengers(BaseModel):
    model_config = ConfigDict(extra="forbid")

    adults: int = Field(ge=1, le=9, strict=True)
    children: int = Field(default=0, ge=0, le=9, strict=True)
    infants: int = Field(default=0, ge=0, le=9, strict=True)

    @property
    def total(self) -> int:
        return self.adults + self.children + self.infants


class ParsedFlightQuery(BaseModel):
    """Closed structure the model must emit.

    Validated by camelCase key only, so it accepts exactly the keys the model
    is shown. Dates stay lax to parse ISO strings.
    """

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel)

    origin: str = Field(min_length=3, max_length=3, strict=True)
    destination: str = Field(min_length=3, max_length=3, strict=True)
    departure_date: date
    return_date: Optional[date] = None
    passengers: Passengers
    cabin_class: CabinClass
    max_stops: Optional[int] = Field(default=None, ge=0, strict=True)

    @property
    def is_round_trip(self) -> bool:
        return self.return_date is not None

    def to_wire(self) -> dict:
        """Serialize with camelCase keys and ISO dates, nulls included."""
        return self.model_dump(mode="json", by_alias=True)
