"""Duffel Flight Provider — real API integration.

Uses the Duffel Offer Requests + Offers endpoints.
Credentials loaded from settings (DUFFEL_API_KEY).
"""
import logging
import re
import time
from typing import Optional

import httpx

from core.config import settings
from core.exceptions import ExternalApiError
from core.state import ParsedFlightQuery
from providers.base import BaseFlightProvider

logger = logging.getLogger(__name__)

CHILD_AGE = 10
INFANT_AGE = 1
MAX_CONNECTIONS = 2

_DURATION_RE = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:\d+(?:\.\d+)?S)?)?$")


def parse_duration(iso_duration: Optional[str]) -> int:
    """Convert ISO 8601 duration (e.g. P1DT2H30M) to minutes."""
    if not iso_duration:
        return 0
    match = _DURATION_RE.match(iso_duration)
    if not match:
        return 0
    days, hours, minutes = (int(g or 0) for g in match.groups())
    return days * 24 * 60 + hours * 60 + minutes


def build_offer_request(query: ParsedFlightQuery) -> dict:
    """Translate a parsed query into a Duffel offer request body."""
    passengers: list[dict] = [{"type": "adult"} for _ in range(query.passengers.adults)]
    passengers += [{"age": CHILD_AGE} for _ in range(query.passengers.children)]
    passengers += [{"age": INFANT_AGE} for _ in range(query.passengers.infants)]

    slices = [
        {
            "origin": query.origin,
            "destination": query.destination,
            "departure_date": query.departure_date.isoformat(),
            "departure_time": None,
            "arrival_time": None,
        }
    ]
    if query.return_date is not None:
        slices.append(
            {
                "origin": query.destination,
                "destination": query.origin,
                "departure_date": query.return_date.isoformat(),
                "departure_time": None,
                "arrival_time": None,
            }
        )

    data = {
        "slices": slices,
        "passengers": passengers,
        "cabin_class": query.cabin_class.value,
    }
    if query.max_stops is not None:
        data["max_connections"] = min(MAX_CONNECTIONS, max(0, query.max_stops))
    return {"data": data}


def _map_segment(segment: dict) -> dict:
    carrier = segment.get("marketing_carrier") or {}
    return {
        "origin": (segment.get("origin") or {}).get("iata_code", ""),
        "destination": (segment.get("destination") or {}).get("iata_code", ""),
        "departure": segment.get("departing_at", ""),
        "arrival": segment.get("arriving_at", ""),
        "duration": parse_duration(segment.get("duration")),
        "carrier": carrier.get("name") or carrier.get("iata_code", ""),
        "flightNumber": f"{carrier.get('iata_code', '')}{segment.get('marketing_carrier_flight_number', '')}",
        "aircraft": (segment.get("aircraft") or {}).get("name", ""),
    }


def map_offer(offer: dict) -> dict:
    slices = offer.get("slices", [])
    return {
        "id": offer["id"],
        "price": {
            "amount": float(offer.get("total_amount", 0)),
            "currency": offer.get("total_currency", ""),
        },
        "segments": [_map_segment(seg) for s in slices for seg in s.get("segments", [])],
        "totalDuration": sum(parse_duration(s.get("duration")) for s in slices),
        "stops": sum(max(0, len(s.get("segments", [])) - 1) for s in slices),
    }


class DuffelFlightProvider(BaseFlightProvider):
    name = "duffel"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key if api_key is not None else settings.duffel_api_key
        if not self._api_key:
            raise ValueError("DUFFEL_API_KEY is not configured")
        self._base_url = (base_url or settings.duffel_base_url).rstrip("/")
        self._transport = transport
        self._max_offers = settings.duffel_max_offers

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Duffel-Version": settings.duffel_version,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def search_offers(self, query: ParsedFlightQuery) -> list[dict]:
        start = time.perf_counter()
        logger.info(
            "Searching flights via Duffel origin=%s destination=%s departure_date=%s",
            query.origin, query.destination, query.departure_date,
        )

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers(),
                timeout=settings.duffel_timeout_seconds,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    "/air/offer_requests",
                    params={"return_offers": "false"},
                    json=build_offer_request(query),
                )
                resp.raise_for_status()
                offer_request_id = resp.json()["data"]["id"]

                resp = await client.get(
                    "/air/offers",
                    params={
                        "offer_request_id": offer_request_id,
                        "sort": "total_amount",
                        "limit": self._max_offers,
                    },
                )
                resp.raise_for_status()
                offers = resp.json().get("data", [])

            results = [map_offer(o) for o in offers[: self._max_offers]]
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            latency_ms = int((time.perf_counter() - start) * 1000)
            logger.error(
                "Duffel search failed latency_ms=%d error=%s: %s",
                latency_ms, type(exc).__name__, exc,
            )
            raise ExternalApiError("Duffel", "Flight search failed") from exc

        latency_ms = int((time.perf_counter() - start) * 1000)
        logger.info("Duffel search completed results=%d latency_ms=%d", len(results), latency_ms)
        return results
