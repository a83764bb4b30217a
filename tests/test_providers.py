"""Tests for flight-offer providers and the provider factory."""
import json
from datetime import date

import httpx
import pytest

from core.config import Settings
from core.exceptions import ExternalApiError, ErrorKind
from core.state import ParsedFlightQuery
from providers.factory import get_flight_provider
from providers.mock.flight_provider import MockFlightProvider
from providers.real.duffel import DuffelFlightProvider, build_offer_request, map_offer, parse_duration


def _query(**overrides) -> ParsedFlightQuery:
    fields = {
        "origin": "JFK",
        "destination": "LHR",
        "departureDate": date(2026, 6, 1),
        "returnDate": None,
        "passengers": {"adults": 1},
        "cabinClass": "economy",
        "maxStops": None,
    }
    fields.update(overrides)
    return ParsedFlightQuery.model_validate(fields)


DUFFEL_OFFER = {
    "id": "off_0001",
    "total_amount": "412.30",
    "total_currency": "GBP",
    "slices": [
        {
            "duration": "PT9H45M",
            "segments": [
                {
                    "origin": {"iata_code": "JFK"},
                    "destination": {"iata_code": "DUB"},
                    "departing_at": "2026-06-01T18:00:00",
                    "arriving_at": "2026-06-02T05:30:00",
                    "duration": "PT6H30M",
                    "marketing_carrier": {"name": "Aer Lingus", "iata_code": "EI"},
                    "marketing_carrier_flight_number": "104",
                    "aircraft": {"name": "Airbus A330"},
                },
                {
                    "origin": {"iata_code": "DUB"},
                    "destination": {"iata_code": "LHR"},
                    "departing_at": "2026-06-02T06:45:00",
                    "arriving_at": "2026-06-02T08:05:00",
                    "duration": "PT1H20M",
                    "marketing_carrier": {"name": "Aer Lingus", "iata_code": "EI"},
                    "marketing_carrier_flight_number": "152",
                    "aircraft": {"name": "Airbus A320"},
                },
            ],
        }
    ],
}


# ── Mock provider ────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_mock_search_returns_offers_cheapest_first():
    provider = MockFlightProvider()
    results = await provider.search_offers(_query(passengers={"adults": 2}))

    assert len(results) == 2
    amounts = [r["price"]["amount"] for r in results]
    assert amounts == sorted(amounts)
    first = results[0]
    assert first["segments"][0]["origin"] == "JFK"
    assert first["segments"][-1]["destination"] == "LHR"
    assert first["price"]["amount"] == pytest.approx(399.98)


@pytest.mark.asyncio
async def test_mock_search_honours_direct_only():
    provider = MockFlightProvider()
    results = await provider.search_offers(_query(maxStops=0))

    assert len(results) == 1
    assert results[0]["stops"] == 0


@pytest.mark.asyncio
async def test_mock_round_trip_includes_return_segment():
    provider = MockFlightProvider()
    results = await provider.search_offers(_query(returnDate=date(2026, 6, 8), maxStops=0))

    segments = results[0]["segments"]
    assert segments[-1]["origin"] == "LHR"
    assert segments[-1]["departure"].startswith("2026-06-08")


# ── Duffel request / response mapping ────────────────────────────────────────

@pytest.mark.parametrize(
    "value, minutes",
    [("PT2H30M", 150), ("PT45M", 45), ("P1DT2H", 1560), ("PT3H", 180), ("", 0), (None, 0), ("garbage", 0)],
)
def test_parse_duration(value, minutes):
    assert parse_duration(value) == minutes


def test_offer_request_one_way():
    body = build_offer_request(_query(passengers={"adults": 2, "children": 1, "infants": 1}))["data"]

    assert body["cabin_class"] == "economy"
    assert body["passengers"] == [{"type": "adult"}, {"type": "adult"}, {"age": 10}, {"age": 1}]
    assert len(body["slices"]) == 1
    assert body["slices"][0]["departure_date"] == "2026-06-01"
    assert "max_connections" not in body


def test_offer_request_round_trip_and_stop_clamp():
    body = build_offer_request(_query(returnDate=date(2026, 6, 10), maxStops=5))["data"]

    assert [(s["origin"], s["destination"]) for s in body["slices"]] == [("JFK", "LHR"), ("LHR", "JFK")]
    assert body["slices"][1]["departure_date"] == "2026-06-10"
    assert body["max_connections"] == 2


def test_offer_request_direct_only():
    body = build_offer_request(_query(maxStops=0))["data"]
    assert body["max_connections"] == 0


def test_map_offer():
    result = map_offer(DUFFEL_OFFER)

    assert result["id"] == "off_0001"
    assert result["price"] == {"amount": 412.30, "currency": "GBP"}
    assert result["totalDuration"] == 585
    assert result["stops"] == 1
    assert result["segments"][0] == {
        "origin": "JFK",
        "destination": "DUB",
        "departure": "2026-06-01T18:00:00",
        "arrival": "2026-06-02T05:30:00",
        "duration": 390,
        "carrier": "Aer Lingus",
        "flightNumber": "EI104",
        "aircraft": "Airbus A330",
    }


# ── Duffel over HTTP (mocked transport) ──────────────────────────────────────

@pytest.mark.asyncio
async def test_duffel_search_creates_request_then_lists_offers():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "POST" and request.url.path == "/air/offer_requests":
            return httpx.Response(201, json={"data": {"id": "orq_123"}})
        if request.method == "GET" and request.url.path == "/air/offers":
            return httpx.Response(200, json={"data": [DUFFEL_OFFER]})
        return httpx.Response(404)

    provider = DuffelFlightProvider(
        api_key="duffel_test_abc", base_url="https://duffel.test", transport=httpx.MockTransport(handler)
    )
    results = await provider.search_offers(_query())

    assert [r["id"] for r in results] == ["off_0001"]
    create, listing = seen
    assert create.headers["Authorization"] == "Bearer duffel_test_abc"
    assert create.headers["Duffel-Version"] == "v2"
    assert create.url.params["return_offers"] == "false"
    assert json.loads(create.content)["data"]["slices"][0]["origin"] == "JFK"
    assert listing.url.params["offer_request_id"] == "orq_123"
    assert listing.url.params["sort"] == "total_amount"


@pytest.mark.asyncio
async def test_duffel_http_error_becomes_external_api_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"errors": [{"message": "Invalid origin"}]})

    provider = DuffelFlightProvider(
        api_key="duffel_test_abc", base_url="https://duffel.test", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(ExternalApiError) as exc_info:
        await provider.search_offers(_query())

    assert exc_info.value.provider == "Duffel"
    assert exc_info.value.kind is ErrorKind.EXTERNAL_API
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_duffel_network_error_becomes_external_api_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = DuffelFlightProvider(
        api_key="duffel_test_abc", base_url="https://duffel.test", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(ExternalApiError, match="Flight search failed"):
        await provider.search_offers(_query())


def test_duffel_requires_api_key():
    with pytest.raises(ValueError, match="DUFFEL_API_KEY"):
        DuffelFlightProvider(api_key="")


# ── Provider factory ─────────────────────────────────────────────────────────

def test_factory_returns_mock_by_default():
    assert isinstance(get_flight_provider(Settings(use_real_apis=False)), MockFlightProvider)


def test_factory_returns_duffel_when_real_apis_enabled():
    provider = get_flight_provider(Settings(use_real_apis=True, duffel_api_key="duffel_test_abc"))
    assert isinstance(provider, DuffelFlightProvider)
