import logging
import time
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from agents.flight_query_parser import FlightQueryParser
from api.dependencies import get_provider, get_query_parser
from api.schemas import ChatRequest, ChatResponse, SearchMetadata
from core.search_history import SearchHistoryRepository
from db.database import get_db
from providers.base import BaseFlightProvider

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)


@router.post("", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    db: AsyncSession = Depends(get_db),
    parser: FlightQueryParser = Depends(get_query_parser),
    provider: BaseFlightProvider = Depends(get_provider),
):
    """Search flights using natural language.

    1. Parse the query with the model
    2. Search offers via the flight provider
    3. Save to history
    """
    start = time.perf_counter()
    search_id = str(uuid.uuid4())
    user_id = str(body.user_id) if body.user_id else None

    logger.info(
        "Processing flight search search_id=%s user_id=%s query_length=%d",
        search_id, user_id, len(body.query),
    )

    try:
        parsed = await parser.parse(body.query)
        results = await provider.search_offers(parsed)
        search_time_ms = int((time.perf_counter() - start) * 1000)

        await SearchHistoryRepository(db).create(
            user_id=user_id,
            query=body.query,
            origin=parsed.origin,
            destination=parsed.destination,
            departure_date=parsed.departure_date,
            return_date=parsed.return_date,
            results_count=len(results),
            search_time_ms=search_time_ms,
            cabin_class=parsed.cabin_class.value,
            passengers=parsed.passengers.total,
        )
    except Exception as exc:
        logger.error("Flight search failed search_id=%s: %s", search_id, exc)
        raise

    logger.info(
        "Flight search completed search_id=%s results=%d search_time_ms=%d",
        search_id, len(results), search_time_ms,
    )
    return ChatResponse(
        parsed_query=parsed,
        results=results,
        metadata=SearchMetadata(
            search_id=search_id,
            results_count=len(results),
            search_time=search_time_ms,
            timestamp=datetime.now(timezone.utc),
        ),
    )
