import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from scalar_fastapi import get_scalar_api_reference
from sqlalchemy.exc import SQLAlchemyError

from snippet_manager.api.v1.router import v1_router
from snippet_manager.config import settings
from snippet_manager.services.errors import SnippetServiceError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

TAG_METADATA = [
    {
        "name": "snippets",
        "description": "Snippet library: create, update, pin, delete, share and version snippets.",
    },
    {
        "name": "shared",
        "description": "Public read access to snippets through their share token.",
    },
    {
        "name": "health",
        "description": "Liveness and database connectivity.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Snippet Manager starting")
    if settings.AUTO_CREATE_TABLES:
        try:
            from snippet_manager.database import create_tables

            await create_tables()
            logger.info("Startup check: database tables OK")
        except Exception as e:
            logger.error("Startup check: database unavailable: %s", e)

    yield

    from snippet_manager.database import engine

    await engine.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Snippet Manager API",
    summary="Store, tag, search, pin, version and share code snippets",
    description=(
        "## Overview\n\n"
        "| Module | Description |\n"
        "|------|------|\n"
        "| **Snippets** | CRUD with a limit of 10 pinned snippets |\n"
        "| **Versions** | Explicit content snapshots, numbered from 1 |\n"
        "| **Sharing** | Opaque public tokens, revoked when sharing is turned off |\n\n"
        "## Stack\n\n"
        "FastAPI + SQLAlchemy(async) + PostgreSQL"
    ),
    version="0.1.0",
    openapi_tags=TAG_METADATA,
    lifespan=lifespan,
    # Swagger UI at /swagger; Scalar takes /docs
    docs_url="/swagger",
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router)


# ---------------------------------------------------------------------------
# Error mapping: typed service failures -> {"detail": ...} with status code
# ---------------------------------------------------------------------------


@app.exception_handler(SnippetServiceError)
async def snippet_error_handler(request: Request, exc: SnippetServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected (%d): %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg', 'invalid value')}" if location else "Invalid request body"
    logger.warning("%s %s rejected (400): %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content={"detail": message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("%s %s database error", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/", tags=["default"], include_in_schema=False)
async def root():
    return {
        "message": "Snippet Manager API",
        "version": "0.1.0",
        "docs": "/docs",
        "swagger": "/swagger",
        "openapi": "/openapi.json",
    }


@app.get("/docs", include_in_schema=False)
async def scalar_html():
    return get_scalar_api_reference(
        openapi_url=app.openapi_url,
        title=app.title,
    )
