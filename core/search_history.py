import uuid
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import SearchHistory


class SearchHistoryRepository:
    """Append-only search history plus the read queries behind /searches."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        query: str,
        origin: str,
        destination: str,
        departure_date: date,
        results_count: int,
        search_time_ms: int,
        cabin_class: str,
        passengers: int = 1,
        return_date: Optional[date] = None,
        user_id: Optional[str] = None,
    ) -> SearchHistory:
        """Append a SearchHistory record. Never updates existing records."""
        record = SearchHistory(
            id=str(uuid.uuid4()),
            user_id=user_id,
            query=query,
            origin=origin,
            destination=destination,
            departure_date=departure_date,
            return_date=return_date,
            results_count=results_count,
            search_time_ms=search_time_ms,
            cabin_class=cabin_class,
            passengers=passengers,
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        return record

    async def find_by_user(self, user_id: str, limit: int = 10) -> list[SearchHistory]:
        result = await self.db.execute(
            select(SearchHistory)
            .where(SearchHistory.user_id == user_id)
            .order_by(SearchHistory.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_popular_routes(self, limit: int = 10) -> list[dict]:
        """Most searched origin/destination pairs, most frequent first."""
        count = func.count().label("count")
        result = await self.db.execute(
            select(SearchHistory.origin, SearchHistory.destination, count)
            .group_by(SearchHistory.origin, SearchHistory.destination)
            .order_by(count.desc())
            .limit(limit)
        )
        return [
            {"origin": origin, "destination": destination, "count": int(n)}
            for origin, destination, n in result.all()
        ]
