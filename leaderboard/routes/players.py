from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Path
from ..core.errors import LeaderboardError, NotFoundError
from ..integrity.pipeline import SubmissionPipeline
from ..models.response import LeaderboardEntry, PlayerStats
from ..logger import get_logger
from .deps import general_rate_limit, get_pipeline, to_http_error

logger = get_logger()
router = APIRouter(prefix="/players", dependencies=[Depends(general_rate_limit)])

@router.get("/{name}/stats", response_model=PlayerStats)
async def get_player_stats(
    name: str = Path(..., min_length=1, max_length=50),
    pipeline: SubmissionPipeline = Depends(get_pipeline)
):
    try:
        stats = await pipeline.store.player_stats(name)
        if stats is None:
            raise NotFoundError("Player not found")
        return stats.to_dict()
    except LeaderboardError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.error(f"Error getting player stats: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get player stats")

@router.get("/{name}/games", response_model=List[LeaderboardEntry])
async def get_player_games(
    name: str = Path(..., min_length=1, max_length=50),
    limit: int = Query(50, ge=1, le=50),
    pipeline: SubmissionPipeline = Depends(get_pipeline)
):
    try:
        games = await pipeline.store.player_games(name, limit)
        return [entry.to_dict() for entry in games]
    except LeaderboardError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.error(f"Error getting player games: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get player games")
