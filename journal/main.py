"""Contact Journal FastAPI application.

Routes live under ``/api``: tenant configuration, users and the per-user
interaction journal. Every response uses the ``{success, data?, error?}``
envelope; the exception handlers below map the error taxonomy in
``journal.errors`` onto it.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import app_state
from .api.envelope import fail, ok, utc_timestamp
from .api.routes import config_router, interactions_router, users_router
from .errors import Issue, JournalError, ValidationFailed

API_PREFIX = "/api"
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("JOURNAL_CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    await app_state.FEEDBACK_DISPATCHER.drain()


app = FastAPI(title="Contact Journal API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(config_router, prefix=API_PREFIX)
app.include_router(users_router, prefix=API_PREFIX)
app.include_router(interactions_router, prefix=API_PREFIX)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


@app.exception_handler(JournalError)
async def journal_error_handler(_: Request, exc: JournalError):
    issues = exc.issues if isinstance(exc, ValidationFailed) else ()
    return fail(exc.status_code, str(exc), issues=issues)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError):
    issues = [
        Issue(".".join(str(part) for part in error["loc"]), error["msg"]) for error in exc.errors()
    ]
    return fail(400, "Invalid request", issues=issues)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return fail(404, "Endpoint not found")
    return fail(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return fail(500, "Internal server error")


@app.get(f"{API_PREFIX}/health")
async def health():
    return ok(message="Contact Journal API is running", timestamp=utc_timestamp())


def run() -> None:
    import uvicorn

    logging.basicConfig(level=os.getenv("JOURNAL_LOG_LEVEL", "INFO"))
    uvicorn.run(
        "journal.main:app",
        host=os.getenv("JOURNAL_HOST", "0.0.0.0"),
        port=int(os.getenv("JOURNAL_PORT", "3001")),
    )


if __name__ == "__main__":
    run()
