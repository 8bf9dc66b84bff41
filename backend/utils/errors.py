# backend/utils/errors.py
import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Base class for failures the API reports to the client as ``{"message": ...}``."""

    status_code = 500

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        # Extra details for audit logging (e.g. the product that failed checkout)
        self.context = context


class ValidationError(MarketplaceError):
    """Bad input or a business rule violation."""

    status_code = 400


class AuthorizationError(MarketplaceError):
    """Caller acts on a record it does not own."""

    status_code = 401


class NotFoundError(MarketplaceError):
    status_code = 404


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "Invalid input"))
    return "; ".join(parts) or "Invalid input"


# Map every failure raised while handling a request to the {"message": ...} error body
def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(MarketplaceError)
    async def _marketplace_error(request: Request, exc: MarketplaceError):
        return _message(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: HTTPException):
        response = _message(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        return _message(400, _validation_message(exc))

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _message(500, "Server error")
