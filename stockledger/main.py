import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stockledger.config import Settings, get_settings
from stockledger.core.errors import StockLedgerError, StorageError
from stockledger.core.logging import setup_logging
from stockledger.database import Base, engine
from stockledger.models import import_all_models
from stockledger.routers import (
    categories_router,
    health_router,
    items_router,
    stock_router,
    transactions_router,
    users_router,
)

setup_logging()
settings: Settings = get_settings()
logger = logging.getLogger("stockledger.api")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    import_all_models()
    Base.metadata.create_all(bind=engine)
    logger.info(
        "Application started",
        extra={"context": {"app": settings.APP_NAME, "environment": settings.ENVIRONMENT}},
    )
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    if not settings.LOG_REQUESTS:
        return await call_next(request)
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %d",
        request.method,
        request.url.path,
        response.status_code,
        extra={"context": {"duration_ms": round(elapsed_ms, 1)}},
    )
    return response


@app.exception_handler(StockLedgerError)
async def stockledger_error_handler(request: Request, exc: StockLedgerError):
    if isinstance(exc, StorageError):
        logger.error(
            "Storage failure on %s %s: %s",
            request.method,
            request.url.path,
            exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "message": "Internal server error"},
    )


app.include_router(health_router)
app.include_router(users_router)
app.include_router(categories_router)
app.include_router(items_router)
app.include_router(stock_router)
app.include_router(transactions_router)


__all__ = ["app"]
