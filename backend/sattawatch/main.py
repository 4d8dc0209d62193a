"""SattaWatch Backend -- FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sattawatch.api.router import api_router
from sattawatch.config import settings
from sattawatch.core.exceptions import SattaWatchException
from sattawatch.db.session import async_session_factory, engine
from sattawatch.db.utils import create_tables
from sattawatch.schemas import ErrorResponse
from sattawatch.scrapers.factory import create_scraper_service, create_update_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    # Startup
    logger.info("Starting SattaWatch API server...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Target: {settings.TARGET_URL}")

    try:
        await create_tables(engine)
        logger.info("Database tables verified/created")
    except Exception as e:
        logger.error(f"Database init failed: {e}", exc_info=True)

    scraper_service = create_scraper_service(async_session_factory)
    update_scheduler = create_update_scheduler(scraper_service)
    app.state.result_store = scraper_service.store
    app.state.update_scheduler = update_scheduler

    # Timer only outside tests; /scrape still works through the same run slot
    if settings.ENVIRONMENT != "test":
        update_scheduler.start(run_on_startup=settings.RUN_ON_STARTUP)
        logger.info(f"Automatic updates scheduled every {settings.UPDATE_INTERVAL_HOURS:g} hours")
    else:
        logger.info("Scheduler disabled (test environment)")

    yield

    # Shutdown
    logger.info("Shutting down SattaWatch API server...")
    await update_scheduler.shutdown()
    await engine.dispose()


app = FastAPI(
    title="SattaWatch API",
    description="Scheduled scraper for the market result board",
    version="0.1.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_methods=["GET"],
    allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
)

app.include_router(api_router)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@app.exception_handler(SattaWatchException)
async def sattawatch_exception_handler(request: Request, exc: SattaWatchException):
    """Scrape and persistence failures surface their message with a 500."""
    logger.error(f"Error in {request.url.path}: {exc.message}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return _error(exc.status_code, "Route not found")
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error(status.HTTP_400_BAD_REQUEST, "Invalid request")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error in {request.url.path}: {exc}", exc_info=exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went wrong!")
