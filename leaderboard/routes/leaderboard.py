from fastapi import APIRouter, Depends, HTTPException, Query, Path
from ..core.errors import LeaderboardError, NotFoundError
from ..integrity.pipeline import SubmissionPipeline
from ..models.response import LeaderboardPage, LeaderboardTotals, Pagination, PlayerHistory
from ..logger import get_logger
from .deps import general_rate_limit, get_pipeline, to_http_error

logger = get_logger()
router = APIRouter(prefix="/leaderboard", dependencies=[Depends(general_rate_limit)])

@router.get("", response_model=LeaderboardPage)
async def get_leaderboard(
    limit: int = Query(100, ge=1, le=100),
    offset: int = Query(0, ge=0),
    pipeline: SubmissionPipeline = Depends(get_pipeline)
):
    """
    Get a page of the global leaderboard.

    - **limit**: Number of entries to return (1-100)
    - **offset**: Number of entries to skip
    """
    try:
        entries = await pipeline.store.leaderboard_page(limit, offset)
        logger.info(f"Retrieved {len(entries)} leaderboard entries at offset {offset}")
        return LeaderboardPage(
            entries=[entry.to_dict() for entry in entries],
            pagination=Pagination(limit=limit, offset=offset, has_more=len(entries) == limit)
        )
    except LeaderboardError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.error(f"Error getting leaderboard: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get leaderboard")

@router.get("/stats", response_model=LeaderboardTotals)
async def get_totals(pipeline: SubmissionPipeline = Depends(get_pipeline)):
    """Total number of recorded games and players"""
    try:
        totals = await pipeline.store.totals()
        return LeaderboardTotals(total_games=totals.total_games, total_players=totals.total_players)
    except LeaderboardError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.error(f"Error getting leaderboard stats: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get leaderboard stats")

@router.get("/player/{name}", response_model=PlayerHistory)
async def get_player_leaderboard(
    name: str = Path(..., min_length=1, max_length=50),
    limit: int = Query(50, ge=1, le=50),
    pipeline: SubmissionPipeline = Depends(get_pipeline)
):
    """
    Get a player's stats and best games.

    Each game carries its rank on the global board and its rank among the
    player's own games.
    """
    try:
        stats = await pipeline.store.player_stats(name)
        if stats is None:
            raise NotFoundError("Player not found")
        games = await pipeline.store.player_games(name, limit)
        return PlayerHistory(
            player_name=name,
            stats=stats.to_dict(),
            games=[entry.to_dict() for entry in games]
        )
    except HTTPException:
        raise
    except LeaderboardError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.error(f"Error getting player leaderboard: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get player leaderboard")
