from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas import PopularRouteOut, SearchHistoryOut
from core.search_history import SearchHistoryRepository
from db.database import get_db

router = APIRouter(prefix="/searches", tags=["search-history"])


@router.get("/history", response_model=list[SearchHistoryOut])
async def get_history(
    user_id: str = Query(..., alias="userId", description="User identifier"),
    limit: int = Query(10, ge=1, le=100, description="Maximum number of results to return"),
    db: AsyncSession = Depends(get_db),
):
    """Recent flight searches for one user, newest first."""
    records = await SearchHistoryRepository(db).find_by_user(user_id, limit)
    return [SearchHistoryOut.model_validate(r) for r in records]


@router.get("/popular", response_model=list[PopularRouteOut])
async def get_popular(
    limit: int = Query(10, ge=1, le=100, description="Maximum number of routes to return"),
    db: AsyncSession = Depends(get_db),
):
    """Most frequently searched routes across all users."""
    return await SearchHistoryRepository(db).get_popular_routes(limit)
