from dotenv import load_dotenv
load_dotenv()

import logging
import time
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from api.v1.blocks import router as v1_blocks_router
from api.v1.pages import router as v1_pages_router
from api.v1.page_templates import router as v1_page_templates_router
from api.v1.public import router as v1_public_router

# Setup logging
from core.logging_config import setup_logging, get_logger, LogContext
setup_logging()
logger = get_logger(__name__)

from core.errors import ContentValidationError
from core.settings import settings
from services.block_registry import get_block_registry
from services.cache_service import build_cache_service

# Setup Sentry error tracking
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration


def filter_sentry_event(event, hint):
    """Drop health check transactions and content rejections, which are caller errors"""
    if "/health" in event.get("transaction", ""):
        return None

    exc_info = (hint or {}).get("exc_info")
    if exc_info and isinstance(exc_info[1], ContentValidationError):
        return None

    return event


if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,
        before_send=filter_sentry_event,
    )
    logger.info_ctx("Sentry error tracking enabled", environment=settings.SENTRY_ENVIRONMENT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One cache handle per process, injected into request handlers via app.state
    app.state.cache = build_cache_service(settings)
    registry = get_block_registry()
    logger.info_ctx("PageCraft API started", block_types=len(registry))

    yield

    app.state.cache.close()
    logger.info("PageCraft API stopped")


app = FastAPI(title="PageCraft API", version="1.0.0", debug=settings.DEBUG, lifespan=lifespan)


def _internal_error(request_id: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": "Internal server error", "request_id": request_id})


# Registered before add_request_id, so it runs inside it and sees request.state.request_id
@app.middleware("http")
async def log_requests(request: Request, call_next):
    if request.url.path == "/health":
        return await call_next(request)

    request_id = getattr(request.state, "request_id", "unknown")
    label = f"{request.method} {request.url.path}"
    started = time.perf_counter()

    with LogContext(request_id=request_id, path=request.url.path, method=request.method):
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"Request exception: {label}")
            return _internal_error(request_id)

        duration = round(time.perf_counter() - started, 3)
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        with LogContext(status_code=response.status_code, duration=duration):
            logger.log(level, f"{label} -> {response.status_code} in {duration}s")

    return response


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ContentValidationError)
async def content_validation_exception_handler(request: Request, exc: ContentValidationError):
    error = exc.to_http()
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, "request_id", "unknown")

    with LogContext(request_id=request_id, path=request.url.path, method=request.method):
        logger.exception(f"Unhandled exception: {type(exc).__name__}")

    return _internal_error(request_id)


app.include_router(v1_blocks_router, prefix="/api/v1")
app.include_router(v1_pages_router, prefix="/api/v1")
app.include_router(v1_page_templates_router, prefix="/api/v1")
app.include_router(v1_public_router, prefix="/api/v1/public")


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "pagecraft-api"}
