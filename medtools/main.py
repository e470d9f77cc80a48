"""FastAPI application entry point."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from medtools.api.routes import chat, documents, health, index, literature, ocr, reports, web
from medtools.core.error_handlers import (
    handle_app_error,
    handle_http_error,
    handle_unknown_error,
)
from medtools.core.lifespan import lifespan
from medtools.core.middleware import trace_id_middleware
from medtools.core.settings import app_settings
from medtools.core.validation import validate_all_settings
from medtools.pipeline.core.exceptions import BaseError
from medtools.pipeline.core.logging_config import configure_structured_logging

# Configure logging
configure_structured_logging(level=app_settings.LOG_LEVEL, json_format=app_settings.LOG_JSON)
logger = logging.getLogger(__name__)

# Validate environment before starting application
validate_all_settings()

# Initialize FastAPI app
app = FastAPI(
    title="Medical AI Tools",
    version="1.0.0",
    description="LLM-backed tools for radiology, clinical documentation and medical literature",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# 1. Register Middleware
app.middleware("http")(trace_id_middleware)

# 2. Register Exception Handlers
app.add_exception_handler(StarletteHTTPException, handle_http_error)
app.add_exception_handler(BaseError, handle_app_error)
app.add_exception_handler(Exception, handle_unknown_error)

# Routes
app.include_router(health.router)
app.include_router(index.router)
app.include_router(reports.router)
app.include_router(web.router)
app.include_router(documents.router)
app.include_router(ocr.router)
app.include_router(literature.router)
app.include_router(chat.router)


def run() -> None:
    import uvicorn

    uvicorn.run("medtools.main:app", host="0.0.0.0", port=8000)
