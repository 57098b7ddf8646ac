from fastapi import APIRouter, Depends, HTTPException, Request
from ..core.errors import LeaderboardError
from ..integrity.pipeline import SubmissionPipeline
from ..models.score import ScoreSubmission
from ..models.response import ScoreResponse
from ..logger import get_logger
from .deps import client_key, general_rate_limit, get_pipeline, to_http_error

logger = get_logger()
router = APIRouter(dependencies=[Depends(general_rate_limit)])

@router.post("/scores", response_model=ScoreResponse, status_code=201)
async def submit_score(
    data: ScoreSubmission,
    request: Request,
    pipeline: SubmissionPipeline = Depends(get_pipeline)
):
    """
    Submit a finished game to the leaderboard.

    The submission is rate limited per caller, checked for plausibility and
    stored together with a fingerprint of its content.
    """
    try:
        result = await pipeline.submit(client_key(request), data)
        return ScoreResponse(data=result.to_dict(), message="Score submitted successfully")
    except HTTPException:
        raise
    except LeaderboardError as e:
        raise to_http_error(e)
    except Exception as e:
        logger.error(f"Error submitting score: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
