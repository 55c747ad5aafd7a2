import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy import text

from app.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

# SQLAlchemy and httpx are chatty at INFO
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

from app.db.base import get_db  # noqa: E402
from app.schemas.common import COMMON_ERROR_RESPONSES  # noqa: E402
from app.services.ai import close_ai_client  # noqa: E402
from app.routers import users as users_router  # noqa: E402
from app.routers import dreams as dreams_router  # noqa: E402
from app.routers import interactions as interactions_router  # noqa: E402
from app.routers import comments as comments_router  # noqa: E402
from app.routers import ratings as ratings_router  # noqa: E402
from app.routers import analysis as analysis_router  # noqa: E402
from app.core.errors import (  # noqa: E402
    DreamJournalException,
    app_exception_handler,
    store_unavailable_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Shutdown
    close_ai_client()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Dream Journal API",
    description=(
        "**Social dream journal**\n\n"
        "Record dreams, like, favorite, rate and comment on other people's "
        "dreams, and get AI interpretations and illustrations.\n\n"
        "The caller is identified by the `X-User-Id` header set by the gateway.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    responses=COMMON_ERROR_RESPONSES,
    lifespan=lifespan,
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(DreamJournalException, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(OperationalError, store_unavailable_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(users_router.router)
app.include_router(dreams_router.router)
app.include_router(interactions_router.router)
app.include_router(comments_router.router)
app.include_router(ratings_router.router)
app.include_router(analysis_router.router)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the database
    are reachable. Returns HTTP 503 if the DB is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except OperationalError:
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}
