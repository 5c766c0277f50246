import logging
import time
from datetime import datetime, timezone

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..errors import AuthError, UpstreamError, ValidationError
from ..gateway import config
from ..logging_utils import (
    configure_logging_from_env,
    log_event,
    new_request_id,
    request_id_var,
)
from . import schemas
from .services import LyricsService

configure_logging_from_env()
logger = logging.getLogger(__name__)

GENERATION_FAILED_MESSAGE = "Failed to generate lyrics. Please try again."

app = FastAPI(title="Songsmith API", version=config.APP_VERSION)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or new_request_id()
    token = request_id_var.set(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        log_event(
            logger,
            "request_completed",
            method=request.method,
            route=request.url.path,
            duration_ms=elapsed_ms,
        )
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(RequestValidationError)
async def request_body_error_handler(_request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body')}: {err.get('msg')}"
        for err in errors
    ) or "invalid request body"
    log_event(logger, "request_rejected", level=logging.WARNING, reason=message)
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_request", "message": message},
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(_request: Request, exc: ValidationError):
    log_event(
        logger, "request_rejected", level=logging.WARNING, code=exc.code, reason=exc.message
    )
    return JSONResponse(
        status_code=400,
        content={"error": exc.code, "message": exc.message},
    )


@app.exception_handler(AuthError)
@app.exception_handler(UpstreamError)
async def generation_error_handler(_request: Request, exc: Exception):
    # Upstream detail stays in the log; callers get a generic message.
    log_event(
        logger,
        "generation_failed",
        level=logging.ERROR,
        error_type=type(exc).__name__,
        reason=str(exc),
    )
    return JSONResponse(
        status_code=500,
        content={"error": "generation_failed", "message": GENERATION_FAILED_MESSAGE},
    )


@app.get("/health", response_model=schemas.HealthResponse)
def health_check():
    """Liveness probe for load balancers and Docker containers."""
    return schemas.HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=config.APP_VERSION,
    )


@app.post(
    "/api/v1/generate",
    response_model=schemas.LyricsResponse,
    responses={400: {"model": schemas.ErrorResponse}, 500: {"model": schemas.ErrorResponse}},
)
def generate_lyrics(
    request: schemas.GenerationRequest,
    service: LyricsService = Depends(config.get_lyrics_service),
):
    """
    Generates labeled song lyrics from keywords, genre, emotion and language.
    """
    # The endpoint's only job is to delegate to the service layer
    return service.generate(request)


def run() -> None:
    """Serves the API with uvicorn on HOST:PORT."""
    log_event(logger, "server_starting", host=config.HOST, port=config.PORT)
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
