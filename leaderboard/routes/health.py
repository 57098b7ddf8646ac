import time
from fastapi import APIRouter, HTTPException, Request
from ..models.response import HealthResponse
from ..logger import get_logger

logger = get_logger()
router = APIRouter()

@router.get("/health", response_model=HealthResponse)
@router.head("/health")
async def health_check(request: Request):
    """Health check endpoint"""
    try:
        response = HealthResponse(
            uptime=time.time() - request.app.state.start_time
        )
        logger.debug(f"Health check response: {response.model_dump()}")
        return response
    except Exception as e:
        logger.error(f"Health check error: {e}")
        raise HTTPException(status_code=500, detail="Health check failed")
