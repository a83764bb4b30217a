from providers.base import BaseFlightProvider
from core.state import ParsedFlightQuery


def _segment(origin: str, destination: str, day: str, departs: str, arrives: str,
             duration: int, carrier: str, flight_number: str) -> dict:
    return {
        "origin": origin,
        "destination": destination,
        "departure": f"{day}T{departs}:00",
        "arrival": f"{day}T{arrives}:00",
        "duration": duration,
        "carrier": carrier,
        "flightNumber": flight_number,
        "aircraft": "Airbus A320",
    }


class MockFlightProvider(BaseFlightProvider):
    name = "mock"

    async def search_offers(self, query: ParsedFlightQuery) -> list[dict]:
        passengers = query.passengers.total
        out_day = query.departure_date.isoformat()
        back_day = query.return_date.isoformat() if query.return_date else None

        direct = [_segment(query.origin, query.destination, out_day, "09:00", "11:00", 120, "Mock Air", "MA100")]
        if back_day:
            direct.append(
                _segment(query.destination, query.origin, back_day, "18:00", "20:00", 120, "Mock Air", "MA101")
            )

        offers = [
            {
                "id": "off_mock_001",
                "price": {"amount": round(299.99 * passengers, 2), "currency": "USD"},
                "segments": direct,
                "totalDuration": sum(s["duration"] for s in direct),
                "stops": 0,
            }
        ]

        if query.max_stops is None or query.max_stops >= 1:
            connecting = [
                _segment(query.origin, "XXX", out_day, "14:00", "15:30", 90, "Budget Wings", "BW200"),
                _segment("XXX", query.destination, out_day, "16:30", "18:00", 90, "Budget Wings", "BW201"),
            ]
            offers.append(
                {
                    "id": "off_mock_002",
                    "price": {"amount": round(199.99 * passengers, 2), "currency": "USD"},
                    "segments": connecting,
                    "totalDuration": sum(s["duration"] for s in connecting),
                    "stops": 1,
                }
            )

        return sorted(offers, key=lambda o: o["price"]["amount"])
