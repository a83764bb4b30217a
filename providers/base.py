"""Base flight-offer provider interface."""
from abc import ABC, abstractmethod

from core.state import ParsedFlightQuery


class BaseFlightProvider(ABC):
    """Turns a parsed query into a list of priced offers.

    Each offer is a dict of the form::

        {
            "id": str,
            "price": {"amount": float, "currency": str},
            "segments": [{"origin", "destination", "departure", "arrival",
                          "duration", "carrier", "flightNumber", "aircraft"}],
            "totalDuration": int,   # minutes
            "stops": int,
        }
    """

    name: str = "base"

    @abstractmethod
    async def search_offers(self, query: ParsedFlightQuery) -> list[dict]:
        pass
