import logging
from datetime import date
from typing import Callable, Optional

from pydantic import ValidationError

from agents.structured_output import StructuredOutputClient, StructuredOutputRequest
from core.config import settings
from core.exceptions import AiValidationError, ErrorKind, InvalidFlightSearchError
from core.state import ParsedFlightQuery

logger = logging.getLogger(__name__)

SCHEMA_NAME = "flight_search_parameters"

# Every key is required; optionals are nullable so the model emits null instead of omitting them.
FLIGHT_QUERY_SCHEMA = {
    "type": "object",
    "properties": {
        "origin": {"type": "string", "description": "Origin airport IATA code (3 letters)"},
        "destination": {"type": "string", "description": "Destination airport IATA code (3 letters)"},
        "departureDate": {"type": "string", "description": "Departure date in ISO 8601 format (YYYY-MM-DD)"},
        "returnDate": {
            "type": ["string", "null"],
            "description": "Return date in ISO 8601 format (YYYY-MM-DD), null for one-way",
        },
        "passengers": {
            "type": "object",
            "properties": {
                "adults": {"type": "integer", "minimum": 1, "maximum": 9},
                "children": {"type": "integer", "minimum": 0, "maximum": 9, "default": 0},
                "infants": {"type": "integer", "minimum": 0, "maximum": 9, "default": 0},
            },
            "required": ["adults", "children", "infants"],
            "additionalProperties": False,
        },
        "cabinClass": {
            "type": "string",
            "enum": ["economy", "premium_economy", "business", "first"],
        },
        "maxStops": {
            "type": ["integer", "null"],
            "description": "Maximum number of stops (0 for direct), null for no limit",
        },
    },
    "required": [
        "origin", "destination", "departureDate", "returnDate",
        "passengers", "cabinClass", "maxStops",
    ],
    "additionalProperties": False,
}

_PASSTHROUGH_KINDS = {ErrorKind.AI_VALIDATION, ErrorKind.INVALID_SEARCH}


def build_system_prompt(today: date) -> str:
    return f"""Extract flight search parameters from natural language queries.

Rules:
- Use 3-letter IATA airport codes
- Dates in YYYY-MM-DD format
- Default: 1 adult, economy class
- Dates relative to: {today.isoformat()}

Examples:
- "NYC to London" → origin: JFK, destination: LHR
- "tomorrow" → +1 day from today
- "next week" → +7 days from today"""


class FlightQueryParser:
    """Natural language → validated ParsedFlightQuery, one model call per parse."""

    def __init__(
        self,
        client: Optional[StructuredOutputClient] = None,
        clock: Callable[[], date] = date.today,
        temperature: Optional[float] = None,
    ):
        self.client = client or StructuredOutputClient()
        self._clock = clock
        self.temperature = settings.parser_temperature if temperature is None else temperature

    async def parse(self, query: str) -> ParsedFlightQuery:
        logger.info("Parsing flight query (length=%d)", len(query))
        today = self._clock()

        try:
            payload = await self.client.generate_structured_output(
                StructuredOutputRequest(
                    system_prompt=build_system_prompt(today),
                    user_prompt=query,
                    schema=FLIGHT_QUERY_SCHEMA,
                    schema_name=SCHEMA_NAME,
                    temperature=self.temperature,
                )
            )
            parsed = self._coerce(payload)
            self._validate_dates(parsed, today)
        except Exception as exc:
            if getattr(exc, "kind", None) in _PASSTHROUGH_KINDS:
                raise
            logger.error("Failed to parse flight query: %s", exc, exc_info=True)
            raise InvalidFlightSearchError("Failed to parse flight query") from exc

        logger.info(
            "Flight query parsed origin=%s destination=%s departure_date=%s",
            parsed.origin, parsed.destination, parsed.departure_date,
        )
        return parsed

    @staticmethod
    def _coerce(payload) -> ParsedFlightQuery:
        """Validate the raw model output against the closed query model."""
        if not isinstance(payload, dict):
            raise AiValidationError("Model output is not a JSON object", raw_output=payload)
        try:
            return ParsedFlightQuery.model_validate(payload)
        except ValidationError as exc:
            raise AiValidationError(
                f"Model output does not match the flight query schema ({exc.error_count()} errors)",
                raw_output=payload,
            ) from exc

    @staticmethod
    def _validate_dates(parsed: ParsedFlightQuery, today: date) -> None:
        if parsed.departure_date < today:
            raise InvalidFlightSearchError("Departure date must be in the future", "departureDate")
        if parsed.return_date is not None and parsed.return_date <= parsed.departure_date:
            raise InvalidFlightSearchError("Return date must be after departure date", "returnDate")
