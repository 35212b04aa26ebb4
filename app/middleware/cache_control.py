"""Marks API responses as non-cacheable; the dashboard always refetches."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings


class NoStoreMiddleware(BaseHTTPMiddleware):
    """Adds cache-control: no-store to every response under the API prefix."""

    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        if request.url.path.startswith(settings.API_PREFIX):
            response.headers["cache-control"] = "no-store"
        return response
