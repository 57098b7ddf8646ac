import asyncio
from fastapi import FastAPI
from ..config import service
from ..logger import get_logger

logger = get_logger()

async def startup_event(app: FastAPI):
    """Open the result store and the audit publisher"""
    pipeline = app.state.pipeline
    try:
        await pipeline.store.initialize()
        logger.info("Result store initialized")
        if pipeline.publisher is not None and pipeline.publisher.enabled:
            await pipeline.publisher.initialize()
            logger.info("Audit publisher initialized")
    except Exception as e:
        logger.error(f"Failed to initialize leaderboard service: {e}")
        raise

async def shutdown_event(app: FastAPI):
    """Flush pending audit events, then close the publisher and the result store"""
    pipeline = app.state.pipeline
    try:
        # Set a timeout for the shutdown process
        async with asyncio.timeout(service.shutdown_timeout):
            await pipeline.drain(timeout=service.shutdown_timeout / 2)
            if pipeline.publisher is not None:
                await pipeline.publisher.close()
            await pipeline.store.close()
            logger.info("Result store closed")
    except asyncio.TimeoutError:
        logger.warning("Shutdown timed out, connections may not have closed cleanly")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")
