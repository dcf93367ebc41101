import logging
from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.exception_handlers import http_exception_handler
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import sentry_sdk

from linkedin_api.config import config
from linkedin_api.db import database
from linkedin_api.domain import exceptions
from linkedin_api.log_config import configure_logging

from linkedin_api.entrypoints.routers.post import router as post_router
from linkedin_api.entrypoints.routers.upload import router as upload_router
from linkedin_api.entrypoints.routers.user import router as user_router

if config.SENTRY_DSN:
    sentry_sdk.init(
        dsn=config.SENTRY_DSN,
        send_default_pii=True,
    )

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await database.connect()
    yield
    await database.disconnect()

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(CorrelationIdMiddleware)

app.include_router(post_router)
app.include_router(upload_router)
app.include_router(user_router)

@app.exception_handler(HTTPException)
async def http_exception_handle_logging(request, exc):
    logger.error(f"HTTPException: {exc.status_code} {exc.detail}")
    return await http_exception_handler(request, exc)

@app.exception_handler(exceptions.NotFound)
async def not_found_handler(request: Request, exc: exceptions.NotFound):
    logger.error(f"NotFound: {exc}")
    return JSONResponse(status_code=404, content={"detail": str(exc)})

@app.exception_handler(exceptions.ValidationError)
@app.exception_handler(exceptions.BadRequest)
async def bad_request_handler(request: Request, exc: exceptions.DomainError):
    logger.error(f"{type(exc).__name__}: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.error(f"RequestValidationError: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

@app.exception_handler(exceptions.StoreError)
async def store_error_handler(request: Request, exc: exceptions.StoreError):
    logger.error(f"StoreError: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

@app.get("/")
async def root():
    return {"message": "Server is running"}
