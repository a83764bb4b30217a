import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes import chat, searches
from api.schemas import ErrorResponse
from core.config import settings
from core.exceptions import FlightSearchError, InvalidFlightSearchError
from db.database import init_db

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Flight Search API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    return {"status": "ok"}


# ── Error translation ─────────────────────────────────────────────────────────

_HTTP_ERROR_NAMES = {
    400: "BadRequest",
    401: "Unauthorized",
    403: "Forbidden",
    404: "NotFound",
    409: "Conflict",
    422: "UnprocessableEntity",
    429: "TooManyRequests",
    500: "InternalServerError",
    502: "BadGateway",
    503: "ServiceUnavailable",
    504: "GatewayTimeout",
}


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: Union[str, List[str]],
    field: Optional[str] = None,
    details: Optional[Any] = None,
    exc: Optional[BaseException] = None,
) -> JSONResponse:
    correlation_id = str(uuid.uuid4())
    body = ErrorResponse(
        status_code=status_code,
        error=error,
        message=message,
        timestamp=datetime.now(timezone.utc),
        path=request.url.path,
        correlation_id=correlation_id,
        field=field,
        details=details if settings.is_development else None,
    )

    context = "correlation_id=%s method=%s path=%s status=%d"
    args = (correlation_id, request.method, request.url.path, status_code)
    if status_code >= 500:
        logger.error("Unhandled exception " + context + ": %s", *args, exc, exc_info=exc)
    else:
        logger.warning("Client error " + context + ": %s", *args, message)

    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@app.exception_handler(FlightSearchError)
async def flight_search_error_handler(request: Request, exc: FlightSearchError):
    field = exc.field if isinstance(exc, InvalidFlightSearchError) else None
    return _error_response(
        request, exc.status_code, exc.error, exc.message,
        field=field, details=exc.to_details(), exc=exc,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = [
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg', '')}".lstrip(": ")
        for err in exc.errors()
    ]
    return _error_response(request, 400, "BadRequest", messages)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error = _HTTP_ERROR_NAMES.get(exc.status_code, "HttpException")
    return _error_response(request, exc.status_code, error, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    return _error_response(
        request, 500, "InternalServerError", "An unexpected error occurred",
        details={"name": type(exc).__name__}, exc=exc,
    )


app.include_router(chat.router)
app.include_router(searches.router)


@app.on_event("startup")
async def on_startup():
    await init_db()
