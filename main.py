"""
CatDonation FastAPI Application

Entry point for the cat-welfare donation platform API.
"""

import time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

import config
from api.responses import error_response
from api.routers import admin, auth, campaigns, community, donations, stats, users
from database.db import create_tables
from services.errors import AppError, ValidationError
from services.upload_service import CAMPAIGN_FOLDER, folder_path

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="CatDonation API",
    description="Donation platform for cat rescue and welfare campaigns",
    version="1.0.0"
)

# CORS configuration (allow web frontend to call API)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with its status and duration."""
    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f}ms)")
    return response


# ============================================
# Error Handlers
# ============================================

def _format_errors(errors) -> list:
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return messages


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    errors = exc.errors if isinstance(exc, ValidationError) else None
    return error_response(exc.status_code, exc.message, error=exc.message, errors=errors, data=exc.data)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "Validation Error", errors=_format_errors(exc.errors()))


@app.exception_handler(PydanticValidationError)
async def pydantic_validation_handler(request: Request, exc: PydanticValidationError):
    return error_response(400, "Validation Error", errors=_format_errors(exc.errors()))


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return error_response(409, "Duplicate entry error")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return error_response(
        500,
        "Internal Server Error",
        error=str(exc) if config.is_development() else None,
    )


# ============================================
# Routers
# ============================================

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(campaigns.router)
app.include_router(donations.router)
app.include_router(community.router)
app.include_router(admin.router)
app.include_router(stats.router)

# Campaign pictures only; ID photos go through the admin API
app.mount(
    f"/uploads/{CAMPAIGN_FOLDER}",
    StaticFiles(directory=folder_path(CAMPAIGN_FOLDER)),
    name="campaign-uploads",
)


# ============================================
# Health Check Endpoint
# ============================================

@app.get("/api/health")
async def health_check():
    """Health check endpoint for monitoring and load balancers."""
    return {
        "success": True,
        "message": "CatDonation API is running",
        "data": {
            "status": "healthy",
            "service": "CatDonation API",
            "version": "1.0.0",
            "environment": config.APP_ENV,
        },
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Welcome to CatDonation API",
        "documentation": "/docs",
        "health": "/api/health"
    }


# ============================================
# Startup/Shutdown Events
# ============================================

@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info("CatDonation API starting up...")
    logger.info(f"Environment: {config.APP_ENV}")
    create_tables()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("CatDonation API shutting down...")


# ============================================
# Run Server (Development Only)
# ============================================

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on {config.APP_HOST}:{config.APP_PORT}")

    uvicorn.run(
        "main:app",
        host=config.APP_HOST,
        port=config.APP_PORT,
        reload=config.is_development(),
        log_level="info"
    )
