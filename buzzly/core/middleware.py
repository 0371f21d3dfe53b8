import json
import logging
import time
import traceback

from colorlog import ColoredFormatter
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.responses import Response

from buzzly.core.config import settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}
RESET = "\033[0m"


def build_request_logger() -> logging.Logger:
    """Colored console output plus a plain-text copy in settings.LOG_FILE."""
    request_logger = logging.getLogger("buzzly.requests")
    if request_logger.handlers:
        return request_logger

    console = logging.StreamHandler()
    console.setFormatter(ColoredFormatter(f"%(log_color)s{LOG_FORMAT}", log_colors=LOG_COLORS))
    log_file = logging.FileHandler(settings.LOG_FILE, delay=True)
    log_file.setFormatter(logging.Formatter(LOG_FORMAT))

    request_logger.setLevel(logging.INFO)
    request_logger.addHandler(console)
    request_logger.addHandler(log_file)
    request_logger.propagate = False
    return request_logger


logger = build_request_logger()


def get_status_color(status_code: int) -> str:
    if 200 <= status_code < 300:
        return "\033[92m"  # Green
    if 400 <= status_code < 500:
        return "\033[93m"  # Yellow
    if 500 <= status_code < 600:
        return "\033[91m"  # Red
    return RESET


def failure_reason(body: bytes) -> str:
    """Pull the human readable part out of an error response body."""
    try:
        payload = json.loads(body.decode())
    except ValueError:
        return body.decode(errors="ignore")
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("detail") or payload)
    return str(payload)


def _error_body(message: str, resolution: str, error_code: str) -> dict:
    return {"message": message, "resolution": resolution, "error_code": error_code}


def register_middleware(app: FastAPI):

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger.error(f"HTTPException at {request.method} {request.url.path}: {exc.detail}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(IntegrityError)
    async def db_integrity_error_handler(request: Request, exc: IntegrityError):
        logger.error(f"Constraint violation at {request.method} {request.url.path}: {exc.orig}")
        return JSONResponse(
            status_code=400,
            content=_error_body(
                "Database constraint violated", "Please check the data you provided", "integrity_error"
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled {type(exc).__name__} at {request.method} {request.url.path}\n{traceback.format_exc()}"
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("Oops! Something went wrong", "Please try again later", "server_error"),
        )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        client = f"{request.client.host}:{request.client.port}" if request.client else "-"
        line = (
            f"{client} - {request.method} {request.url.path} - "
            f"Status: {get_status_color(response.status_code)}{response.status_code}{RESET} - "
            f"Time: {elapsed:.2f}s"
        )

        if response.status_code >= 400:
            # body_iterator is consumed here, so the response is rebuilt from the bytes
            body = b"".join([chunk async for chunk in response.body_iterator])
            response = Response(
                content=body,
                status_code=response.status_code,
                headers=dict(response.headers),
                media_type=response.media_type,
            )
            line += f" - Reason: {failure_reason(body)}"

        logger.info(line)
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)
