from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from dreampuff.config import get_settings
from dreampuff.database import engine, Base
from dreampuff.models import history, product, report, session_record  # noqa: F401 (register tables)
from dreampuff.api import assistant, health, history as history_api, reports, sales, sessions, stock

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting up Dreampuff stock service...")

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    yield

    logger.info("Shutting down Dreampuff stock service...")


app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Stock and work-session tracking for a pastry shop.

    - **Stock**: product catalog, direct stock overrides and stock additions
    - **Sales**: all-or-nothing sale batches with insufficient-stock protection
    - **History & Reports**: stock movement summaries and daily report aggregation
    - **Sessions**: work-session records with background notifications
    - **Assistant**: stock questions and workflow stock commands

    ## Authentication
    Every `/api` route except health checks requires `Authorization: Bearer <API_KEY>`.

    ## Stock Consistency
    Sales and stock additions lock the affected product rows with
    `SELECT FOR UPDATE`; stock can never go below zero.
    """,
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed payloads and query parameters are plain 400 Bad Request."""
    logger.info(f"Rejected malformed request to {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Bad Request: invalid request payload.",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


app.include_router(health.router, prefix="/api")
app.include_router(stock.router, prefix="/api")
app.include_router(sales.router, prefix="/api")
app.include_router(history_api.router, prefix="/api")
app.include_router(reports.router, prefix="/api")
app.include_router(sessions.router, prefix="/api")
app.include_router(assistant.router, prefix="/api")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/api/health"
    }
