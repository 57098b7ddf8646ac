from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from ..core.errors import LeaderboardError, RateLimitedError
from ..integrity.pipeline import SubmissionPipeline
from ..integrity.rate_gate import LimiterClass

FORWARDING_HEADERS = ('CF-Connecting-IP', 'X-Forwarded-For', 'X-Real-IP')

def client_key(request: Request) -> str:
    """Best guess at the caller's address, preferring proxy headers"""
    for header in FORWARDING_HEADERS:
        value = request.headers.get(header)
        if value:
            return value.split(',')[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return '0.0.0.0'

def get_pipeline(request: Request) -> SubmissionPipeline:
    return request.app.state.pipeline

def to_http_error(error: LeaderboardError) -> HTTPException:
    headers = None
    if isinstance(error, RateLimitedError) and error.retry_after_seconds is not None:
        headers = {'Retry-After': str(error.retry_after_seconds)}
    return HTTPException(status_code=error.status_code, detail=error.message, headers=headers)

def general_rate_limit(request: Request):
    """Route dependency applying the general limiter to read endpoints"""
    try:
        get_pipeline(request).admit(client_key(request), LimiterClass.GENERAL)
    except RateLimitedError as e:
        raise to_http_error(e)

async def validation_error_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    """422 body without echoing the rejected input, which may not be encodable"""
    errors = [
        {'type': error['type'], 'loc': list(error['loc']), 'msg': error['msg']}
        for error in exc.errors()
    ]
    return ORJSONResponse(status_code=422, content={'detail': errors})
