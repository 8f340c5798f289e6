import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

# Setup logging first
from disc_insights.core.config import app_settings
from disc_insights.core.logging_config import setup_logging
setup_logging(app_settings.log_level)

from disc_insights.analysis.queue import get_analysis_queue
from disc_insights.auth.schemas import ErrorDetail, ErrorResponse
from disc_insights.cache.connection import close_redis
from disc_insights.db.models import Base
from disc_insights.db.session import async_engine, db_session
from disc_insights.errors import ConnectivityError, RateLimitedError
from disc_insights.middleware.auth import AuthenticationMiddleware
from disc_insights.routers import admin, ai, analysis, assessments, auth, reports, webhooks

logger = logging.getLogger(__name__)

PUBLIC_PATHS = {
    "/",
    "/health/db",
    "/auth/register",
    "/auth/login",
    "/auth/token/refresh",
    "/auth/logout",
    "/auth/password/forgot",
    "/auth/password/reset",
    "/api/v1/ai/status",
    "/api/v1/webhooks/linkedin",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("DISC Insights API starting up...")
    if app_settings.database_create_all:
        async with async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created (DATABASE_CREATE_ALL).")

    yield

    logger.info("DISC Insights API shutting down...")
    await get_analysis_queue().close()
    await close_redis()
    await async_engine.dispose()
    logger.info("DISC Insights API stopped gracefully.")


app = FastAPI(title="DISC Insights API", lifespan=lifespan)

# Starlette runs the last added middleware first: CORS must wrap auth so preflights and 401s carry CORS headers
app.add_middleware(AuthenticationMiddleware, excluded_paths=PUBLIC_PATHS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(assessments.router)
app.include_router(analysis.router)
app.include_router(ai.router)
app.include_router(admin.router)
app.include_router(reports.router)
app.include_router(webhooks.router)


@app.exception_handler(ConnectivityError)
async def connectivity_error_handler(request: Request, exc: ConnectivityError):
    logger.error(f"Backing service unreachable on {request.url.path}: {exc.__cause__}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=ErrorResponse(detail=ErrorDetail(code=exc.code, message=exc.message)).model_dump(),
    )


@app.exception_handler(RateLimitedError)
async def rate_limited_error_handler(request: Request, exc: RateLimitedError):
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=ErrorResponse(detail=ErrorDetail(code=exc.code, message=exc.message)).model_dump(),
        headers={"Retry-After": str(exc.retry_after)},
    )


@app.get("/", tags=["Health Check"])
async def read_root():
    return {"status": "ok", "message": "DISC Insights API is running."}


@app.get("/health/db", tags=["Health Check"])
async def health_check_db(session: AsyncSession = Depends(db_session)):
    """Database connection health check."""
    try:
        result = (await session.execute(text("SELECT 1"))).scalar_one()
    except SQLAlchemyError as e:
        logger.error(f"DB health check failed: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail=f"Database connection error: {e}")
    return {"status": "ok", "db_check": result}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
