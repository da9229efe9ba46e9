import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from db import create_db_and_tables
from enums.text_entity import TextEntity
from exceptions import StorefrontException
from utils.error_handler import handle_service_error
from utils.localizator import Localizator
from web.api_router import api_router, request_language


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    await create_db_and_tables()
    logging.info(f"[Startup] Database ready: {config.DB_NAME}")
    logging.info(
        f"[Startup] Combo pricing: search cap {config.COMBO_SEARCH_MAX_TUPLES} tuples, "
        f"allocation {config.COMBO_ALLOCATION_ORDER.value}"
    )

    yield

    logging.warning('Shutting down..')


app = FastAPI(lifespan=lifespan)

if config.CORS_ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Accept-Language"],
    )
    logging.info(f"[Startup] CORS middleware enabled for origins: {config.CORS_ALLOWED_ORIGINS}")
else:
    logging.debug("[Startup] CORS middleware disabled (no allowed origins configured)")

app.include_router(api_router)


# Health check endpoint (for Docker container monitoring)
@app.get("/health")
async def health_check():
    """Health check endpoint for Docker healthcheck."""
    return {"status": "healthy"}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        reason = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        reason = "malformed body"
    logging.warning(f"Request validation failed on {request.url.path}: {reason}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": Localizator.get_text(
                TextEntity.USER, "error_invalid_request", lang=request_language(request)
            ).format(reason=reason),
        },
    )


@app.exception_handler(StorefrontException)
async def storefront_exception_handler(request: Request, exc: StorefrontException):
    status_code, message = handle_service_error(exc, lang=request_language(request))
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


@app.exception_handler(Exception)
async def exception_handler(request: Request, exc: Exception):
    logging.exception(f"Critical error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "message": Localizator.get_text(TextEntity.COMMON, "error_unexpected", lang=request_language(request)),
        },
    )


def main() -> None:
    uvicorn.run(app, host=config.WEBAPP_HOST, port=config.WEBAPP_PORT)
