"""Main FastAPI application"""
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
import logging

from stylesnap.core.config import settings
from stylesnap.utils.logger import setup_file_logging
from stylesnap.api.v1.api import api_router
from stylesnap.endpoints import page_endpoints
from stylesnap.middleware.trial_identity import TrialIdentityMiddleware
from stylesnap.db.init_db import init_db
from stylesnap.errors.exceptions import BaseHTTPException
from stylesnap.errors.handlers import (
    app_exception_handler,
    validation_exception_handler,
    sqlalchemy_exception_handler,
    general_exception_handler
)

setup_file_logging(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO), settings.LOG_FILE)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Anonymous trial identities, entitlement gating and Razorpay credits for AI photo styling",
    version=settings.PROJECT_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

app.add_middleware(TrialIdentityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    # Browsers refuse credentialed responses for a wildcard origin
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(BaseHTTPException, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(api_router, prefix=settings.API_V1_STR)
app.include_router(page_endpoints.router, tags=["Pages"])

for _subdir in (settings.UPLOAD_SUBDIR, settings.GENERATED_SUBDIR):
    _directory = Path(settings.PUBLIC_DIR) / _subdir
    _directory.mkdir(parents=True, exist_ok=True)
    app.mount(f"/{_subdir}", StaticFiles(directory=str(_directory)), name=_subdir)


@app.on_event("startup")
async def startup_event():
    """Initialize database and log application startup"""
    try:
        init_db()
        logger.warning(f"{settings.PROJECT_NAME} STARTED - Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        logger.warning(f"{settings.PROJECT_NAME} STARTED - Database initialization failed, but API is running")


@app.on_event("shutdown")
async def shutdown_event():
    """Log application shutdown"""
    logger.warning(f"{settings.PROJECT_NAME} SHUTDOWN")
