"""FastAPI dependencies for the parsing pipeline and offer provider."""
from functools import lru_cache

from agents.flight_query_parser import FlightQueryParser
from providers.base import BaseFlightProvider
from providers.factory import get_flight_provider


@lru_cache
def get_query_parser() -> FlightQueryParser:
    """One parser (and one Anthropic connection pool) per process."""
    return FlightQueryParser()


def get_provider() -> BaseFlightProvider:
    return get_flight_provider()
