"""
Main FastAPI application.
"""
import asyncio
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from knowledge_scout.api.v1 import api_router
from knowledge_scout.core.agents.responder import AIResponder
from knowledge_scout.core.config import settings
from knowledge_scout.core.document_processor import DocumentProcessor
from knowledge_scout.core.exceptions import (
    NotFoundError,
    PreconditionError,
    ScoutError,
    ValidationError,
)
from knowledge_scout.core.helpers.extracter import TextExtractor
from knowledge_scout.db.base import SessionLocal, engine
from knowledge_scout.db.init_db import init_db
from knowledge_scout.models import Base
from knowledge_scout.schemas.common import HealthStatus
from knowledge_scout.services.file_service import FileStorage

# Configure logging BEFORE creating the app
logging.basicConfig(
    level=logging.INFO,
    format='%(levelname)s:\t%(name)s\t%(message)s',
    handlers=[
        logging.StreamHandler()  # Output to console
    ]
)
logging.getLogger("uvicorn").setLevel(logging.INFO)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Upload documents and chat with an AI assistant about their content",
    version="0.1.0",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS - Always apply middleware
cors_origins = settings.BACKEND_CORS_ORIGINS if settings.BACKEND_CORS_ORIGINS != "*" else ["*"]
logger.info(f"CORS enabled for origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Long-lived services, shared by every request
app.state.ai_responder = AIResponder.from_settings()
app.state.file_storage = FileStorage(settings.UPLOAD_DIR)
app.state.document_processor = DocumentProcessor(
    session_factory=SessionLocal,
    extractor=TextExtractor(),
    responder=app.state.ai_responder,
    storage=app.state.file_storage,
)


# Global exception handlers
ERROR_STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PreconditionError: status.HTTP_409_CONFLICT,
}


@app.exception_handler(ScoutError)
async def scout_exception_handler(request: Request, exc: ScoutError):
    """
    Map domain errors to their HTTP status codes.

    Args:
        request: Request object
        exc: Domain exception

    Returns:
        JSON response with the error message
    """
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle validation errors.

    Args:
        request: Request object
        exc: Validation exception

    Returns:
        JSON response with error details
    """
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors()},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Handle all unhandled exceptions. Details are only exposed in debug mode.

    Args:
        request: Request object
        exc: Exception

    Returns:
        JSON response with error message
    """
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    content = {"detail": "Internal server error"}
    if settings.DEBUG:
        content["message"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def resume_pending_ingestion(processor: DocumentProcessor) -> None:
    """Resume interrupted ingestion, logging instead of raising on failure."""
    try:
        processor.resume_pending()
    except Exception as e:
        logger.exception(f"Failed to resume pending ingestion: {e}")


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """
    Run on application startup: seed data and resume interrupted ingestion.
    """
    logger.info(f"Starting {settings.PROJECT_NAME}")

    db = SessionLocal()
    try:
        init_db(db)
    finally:
        db.close()

    if settings.RESUME_PENDING_ON_STARTUP:
        asyncio.get_running_loop().run_in_executor(None, resume_pending_ingestion, app.state.document_processor)

    logger.info("Documentation available at: http://localhost:8000/docs")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Run on application shutdown.
    """
    logger.info(f"Shutting down {settings.PROJECT_NAME}")


# Health check endpoint
@app.get("/", tags=["Health"])
async def root():
    """
    Root endpoint - Health check.
    """
    return {
        "message": "Knowledge Scout API",
        "status": "healthy",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"], response_model=HealthStatus)
async def health_check():
    """
    Health check endpoint.
    """
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENV,
    }


# Include API routers
app.include_router(api_router, prefix=settings.API_V1_PREFIX)
