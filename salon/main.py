import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from . import config
from .database import Database
from .domain.bookings.router import router as bookings_router
from .domain.catalog.router import router as catalog_router
from .domain.payments.paystack_client import PaystackClient
from .domain.payments.router import PUBLIC_CORS_HEADERS, PUBLIC_CORS_PATHS
from .domain.payments.router import router as payments_router
from .domain.payments.router import webhooks_router as paystack_webhooks_router
from .domain.scheduling.availability_service import AvailabilityEngine, system_clock
from .domain.scheduling.router import router as availability_router
from .domain.scheduling.settings import BusinessSettings, get_business_settings
from .jobs import create_job_pool
from .shared.errors import BookingError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce noise from third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_app(
    *,
    database_url: Optional[str] = None,
    paystack_client: Optional[PaystackClient] = None,
    business_settings: Optional[BusinessSettings] = None,
    clock: Callable[[], datetime] = system_clock,
    enable_jobs: bool = True,
) -> FastAPI:
    """Build the API; tests pass their own database, Paystack client and clock"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting up...")
        app.state.db = Database(database_url or config.DATABASE_URL)
        app.state.db.create_all()
        logger.info("Database tables ready")

        app.state.job_pool = await create_job_pool() if enable_jobs else None

        yield

        logger.info("Application shutting down...")
        if app.state.job_pool is not None:
            await app.state.job_pool.close()
        app.state.db.dispose()

    app = FastAPI(title="Bellezavari Booking API", version="1.0.0", lifespan=lifespan)

    app.state.paystack = paystack_client or PaystackClient(
        config.PAYSTACK_SECRET_KEY,
        base_url=config.PAYSTACK_BASE_URL,
        timeout=config.PAYSTACK_TIMEOUT_SECONDS,
    )
    app.state.availability = AvailabilityEngine(business_settings or get_business_settings(), clock)

    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        if exc.status_code >= 500:
            logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
        else:
            logger.warning(f"⚠️ {request.method} {request.url.path} -> {exc.status_code}: {exc.message}")

        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"detail": exc.errors()})

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Added after CORSMiddleware so it runs first; checkout is open to any origin
    @app.middleware("http")
    async def public_cors(request: Request, call_next):
        if request.url.path not in PUBLIC_CORS_PATHS:
            return await call_next(request)
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=PUBLIC_CORS_HEADERS)

        response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = "*"
        # Not valid together with a wildcard origin
        if "access-control-allow-credentials" in response.headers:
            del response.headers["access-control-allow-credentials"]
        return response

    app.include_router(catalog_router)
    app.include_router(availability_router)
    app.include_router(bookings_router)
    app.include_router(payments_router)
    app.include_router(paystack_webhooks_router)

    @app.get("/")
    async def root():
        return {"status": "ok", "service": config.BUSINESS_NAME}

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint"""
        try:
            with request.app.state.db.engine.connect() as conn:
                conn.exec_driver_sql("SELECT 1")
            database = "ok"
        except Exception as e:
            logger.error(f"❌ Health check database error: {e}")
            database = "error"
        status = "healthy" if database == "ok" else "degraded"
        return {
            "status": status,
            "database": database,
            "jobQueue": "ok" if getattr(request.app.state, "job_pool", None) else "disabled",
        }

    return app


app = create_app()
