"""Provider factory — returns the Mock or Duffel provider based on USE_REAL_APIS."""
from typing import Optional

from core.config import Settings, settings as default_settings
from providers.base import BaseFlightProvider


def get_flight_provider(config: Optional[Settings] = None) -> BaseFlightProvider:
    """Return the active flight-offer provider.

    Returns MockFlightProvider unless USE_REAL_APIS is set.
    """
    config = config or default_settings

    if config.use_real_apis:
        from providers.real.duffel import DuffelFlightProvider
        return DuffelFlightProvider(api_key=config.duffel_api_key, base_url=config.duffel_base_url)

    from providers.mock.flight_provider import MockFlightProvider
    return MockFlightProvider()
