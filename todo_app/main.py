import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from .config import get_settings
from .db import init_db, close_db
from .errors import TodoAppError
from .logging_setup import setup_logging
from .routes import tasks
from .schemas import HealthStatus

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings = get_settings()
    # Startup
    try:
        await init_db(
            settings.database_url,
            max_retries=settings.db_connect_retries,
            retry_delay=settings.db_retry_delay,
        )
    except Exception as e:
        logger.warning("Database connection failed: %s", e)
        logger.warning("Application will start but task endpoints may fail")
    yield
    # Shutdown
    await close_db()


# Create FastAPI app
app = FastAPI(
    title="Todo API",
    description="REST API for a minimal task list",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


@app.exception_handler(TodoAppError)
async def todo_app_error_handler(request: Request, exc: TodoAppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.error)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    logger.info("%s %s rejected: %s", request.method, request.url.path, errors)
    return JSONResponse(status_code=400, content={"message": "Invalid request", "error": errors})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # An unregistered method on a known path is still an unmatched route
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"message": "API endpoint not found"})
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error", "error": str(exc)})


app.include_router(tasks.router, prefix="/api")


@app.get("/api/health", response_model=HealthStatus)
async def health_check():
    """Health check endpoint, independent of the store"""
    return HealthStatus(
        status="OK",
        timestamp=datetime.now(timezone.utc),
        uptime=time.monotonic() - STARTED_AT,
    )


def run():
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Starting Todo API on %s:%d", settings.host, settings.port)

    uvicorn.run(
        "todo_app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    run()
