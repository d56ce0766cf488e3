from typing import Optional

from fastapi import APIRouter, Depends

from prompt_library.api.deps import get_current_user, get_stats_service
from prompt_library.models import User
from prompt_library.schemas import ActivityStatsResponse, DataResponse, StatsResponse, UserStatsResponse
from prompt_library.services import StatsService

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=DataResponse[StatsResponse])
def get_stats(stats: StatsService = Depends(get_stats_service)):
    """Global totals, averages and top lists."""
    return DataResponse(data=stats.get_stats())


@router.get("/activity", response_model=DataResponse[ActivityStatsResponse])
def get_activity_stats(timeframe: Optional[str] = "7d", stats: StatsService = Depends(get_stats_service)):
    """Activity counts per action within the timeframe (24h, 7d, 30d, ...)."""
    return DataResponse(data=stats.get_activity_stats(timeframe))


@router.get("/user", response_model=DataResponse[UserStatsResponse])
def get_user_stats(stats: StatsService = Depends(get_stats_service), user: User = Depends(get_current_user)):
    """Rollups for the authenticated caller."""
    return DataResponse(data=stats.get_user_stats(user.id))
