# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.config import get_settings
from app.core.exceptions import AppError, DatabaseError
from app.core.notifier import get_notifier
from app.database import create_db_and_tables, get_session
from app.repositories.product_repo import ProductRepository

# Import models so SQLModel metadata is populated before create_all()
from app.models import product as _product_models  # noqa: F401
from app.models import order as _order_models  # noqa: F401

# Routers
from app.routers.products import router as products_router
from app.routers.orders import router as orders_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.

    Shutdown:
      - Close the notifier's HTTP client.
    """
    logger.info("🔥 Server starting...")
    try:
        create_db_and_tables()
        logger.info("✅ Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"❌ Startup: DB connection FAILED: {e}")
        raise
    yield
    # Only close a notifier that was actually built
    if get_notifier.cache_info().currsize:
        notifier = get_notifier()
        if hasattr(notifier, "close"):
            notifier.close()
    logger.info("👋 Shutdown complete.")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
# Browsers reject credentials with a wildcard origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error handlers ---


def _is_order_request(request: Request) -> bool:
    return request.url.path.startswith(f"{settings.API_PREFIX}/orders")


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"🔥 {request.method} {request.url.path}: {exc!r}", exc_info=exc.__cause__)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"⚠️ Rejected payload on {request.url.path}: {exc.errors()}")
    if _is_order_request(request):
        content = {"success": False, "message": "Invalid order data"}
    else:
        content = {"error": "Invalid request payload"}
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"🔥 DB error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content=DatabaseError().to_body())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"🔥 Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content=AppError().to_body())


app.include_router(products_router, prefix=settings.API_PREFIX)
app.include_router(orders_router, prefix=settings.API_PREFIX)


@app.get("/", response_class=PlainTextResponse)
def root():
    """Liveness check."""
    return "🚀 Backend running successfully"


@app.get("/db-test")
def db_test(session: Session = Depends(get_session)):
    """Ask the database for its current time."""
    return {"time": ProductRepository().server_time(session)}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT)
