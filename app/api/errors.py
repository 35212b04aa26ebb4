"""
Error responses

Handlers raise APIError(status_code, code) and the exception handlers below
render it as {"error": code}. Unmatched routes (including a known path with
the wrong method) answer 404 {"error": "not_found"}.
"""
import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.middleware.metrics import TRIAGE_COUNT
from app.services.triage_classifier import ClassificationError

logger = logging.getLogger(__name__)


class APIError(Exception):
    def __init__(self, status_code: int, code: str):
        super().__init__(code)
        self.status_code = status_code
        self.code = code


def error_response(status_code: int, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code})


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return error_response(exc.status_code, exc.code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code in (404, 405):
        return error_response(404, "not_found")
    code = exc.detail if isinstance(exc.detail, str) else "http_error"
    return error_response(exc.status_code, code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
    return error_response(400, "invalid_request")


async def classification_error_handler(request: Request, exc: ClassificationError) -> JSONResponse:
    TRIAGE_COUNT.labels(outcome="error").inc()
    raw = (exc.raw_output or "")[:500]
    logger.warning("Triage failed: %s | raw output: %r", exc, raw)
    return error_response(502, "triage_failed")
