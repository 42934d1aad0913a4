"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.api.routes import router
from src.api.middleware import setup_cors, setup_rate_limiting
from src.config import LOG_LEVEL, validate_config
from src.db.connection import db
from src.exceptions import BeeLearnError, DatabaseError, ValidationError
from src.monitoring import init_sentry

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL)
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application"""
    logger.info("Starting API server...")
    validate_config()
    init_sentry()
    await db.init_pool()
    logger.info("Database pool initialized")

    yield

    logger.info("Shutting down API server...")
    await db.close_pool()
    logger.info("Database pool closed")


def create_api_application() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="BeeLearn Gamification API",
        description="XP, levels, streaks, badges and leaderboard for BeeLearn",
        version="1.0.0",
        lifespan=lifespan
    )

    setup_cors(app)
    setup_rate_limiting(app)

    app.include_router(router)

    @app.exception_handler(BeeLearnError)
    async def beelearn_exception_handler(request: Request, exc: BeeLearnError):
        if isinstance(exc, ValidationError):
            status_code = status.HTTP_400_BAD_REQUEST
        elif isinstance(exc, DatabaseError):
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        else:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"}
        )

    logger.info("FastAPI application created")

    return app


app = create_api_application()
