import time
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

# Load environment variables from .env file before anything else
load_dotenv()

from app.core.config import settings
from app.core.logging import setup_logging, request_id_ctx
from app.core.db import engine, init_models
from app.api.router import api_router
from app.modules.media.errors import IngestError
from app.platform.provider_registry import registry


setup_logging()
app = FastAPI(title=settings.APP_NAME)

logger = logging.getLogger("media.api")

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id", "-")
    request_id_ctx.set(rid)
    response = await call_next(request)
    if rid != "-":
        response.headers["x-request-id"] = rid
    return response

@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.2f}ms")
    return response

@app.exception_handler(IngestError)
async def ingest_error_handler(request: Request, exc: IngestError):
    if exc.status_code >= 500:
        logger.error(f"Ingest failed for {request.method} {request.url.path}: {exc.message}")
        # backend details stay in the logs
        return JSONResponse(status_code=exc.status_code, content={"error": "Could not store the file", "field": exc.field})
    logger.info(f"Ingest rejected ({exc.status_code}) for {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message, "field": exc.field})

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "An internal server error occurred."},
    )

@app.on_event("startup")
async def on_startup():
    await init_models()
    # fix the storage backend for the lifetime of the process
    registry.object_storage()

@app.on_event("shutdown")
async def on_shutdown():
    await engine.dispose()


app.include_router(api_router, prefix=settings.API_PREFIX)
