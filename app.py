"""
FastAPI application initialization for AIStream.
This file configures all application components: routes, middleware, logging, etc.
"""
import os
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from aistream.core.config import settings
from aistream.core.dependencies import build_group_chat
from aistream.core.logging import get_logger
from aistream.api import api_router

# Logging is configured on import of aistream.core
logger = get_logger(__name__)

# Create and configure FastAPI application
app = FastAPI(
    title="AIStream - Group Chat with Streaming AI",
    description="Group chat relay that streams language model replies to every member",
    version=settings.VERSION,
    docs_url="/api/docs" if not settings.PRODUCTION else None,
    redoc_url="/api/redoc" if not settings.PRODUCTION else None
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"message": "Validation error", "details": exc.errors()}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"}
    )


origins = settings.CORS_ORIGINS.split(",") if isinstance(settings.CORS_ORIGINS, str) else settings.CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


def ensure_static_directory():
    """Ensure the static directory exists"""
    try:
        os.makedirs(settings.STATIC_DIR, exist_ok=True)
        return settings.STATIC_DIR
    except OSError as e:
        logger.error(f"Error creating static directory: {e}")
        return None


static_dir = ensure_static_directory()
if static_dir:
    app.mount("/static", StaticFiles(directory=static_dir, html=True), name="static")


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("🚀 Starting AIStream application...")

    # The completion provider is chosen once here, never per request
    if getattr(app.state, "group_chat_service", None) is None:
        app.state.group_chat_service = build_group_chat(settings)

    logger.info("💬 Group chat hub initialized")
    logger.info("   WebSocket endpoint: /groupChat")
    logger.info("   Status endpoint: /api/group-chat/status")
    logger.info("✅ Application started successfully")


@app.get("/")
async def root():
    return RedirectResponse(url="/static/index.html")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("🛑 Application stopped")
