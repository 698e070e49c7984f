import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from redis.exceptions import RedisError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.api import admins, auth, buyer, buyers, content, kupon, master, pesanan, produk, public, ulasan, wilayah
from bulky.app.api.deps import get_session
from bulky.app.core.limiter import limiter
from bulky.app.core.logging import get_logger, setup_logging
from bulky.app.core.metrics import PrometheusMiddleware, get_metrics_response
from bulky.app.core.settings import get_settings
from bulky.app.services.cache import CacheService

APP_VERSION = "1.0.0"

# Load and validate settings
try:
    settings = get_settings()
except ValueError as e:
    print(f"Configuration error: {e}", file=sys.stderr)
    sys.exit(1)

# JSON logs in production, console renderer in development
setup_logging(log_level=settings.LOG_LEVEL, json_format=settings.is_production)

logger = get_logger(__name__)

logger.info(
    "Application configuration loaded",
    environment=settings.ENVIRONMENT,
    db_host=settings.DB_HOST,
    redis_host=settings.REDIS_HOST,
    upload_dir=str(settings.upload_dir),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    - Startup: log version
    - Shutdown: close the shared Redis connection
    """
    logger.info("Application starting up", version=APP_VERSION)
    yield
    logger.info("Application shutting down")
    await CacheService.close()


app = FastAPI(title="Bulky Backend", version=APP_VERSION, lifespan=lifespan)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

ALLOWED_ORIGINS = settings.allowed_origins_list
if not ALLOWED_ORIGINS:
    # Production without origins is rejected by get_settings()
    ALLOWED_ORIGINS = ["*"]
    logger.warning("CORS: Allowing all origins (development mode). Set ALLOWED_ORIGINS in production!")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(PrometheusMiddleware)

app.include_router(auth.router, prefix="/auth", tags=["auth"])

# Admin panel
app.include_router(admins.router, prefix="/panel/admin", tags=["panel-admin"])
app.include_router(buyers.router, prefix="/panel/buyer", tags=["panel-buyer"])
app.include_router(wilayah.router, prefix="/panel/wilayah", tags=["panel-wilayah"])
app.include_router(master.router, prefix="/panel/master", tags=["panel-master"])
app.include_router(produk.router, prefix="/panel/produk", tags=["panel-produk"])
app.include_router(kupon.router, prefix="/panel/kupon", tags=["panel-kupon"])
app.include_router(pesanan.router, prefix="/panel/pesanan", tags=["panel-pesanan"])
app.include_router(ulasan.router, prefix="/panel/ulasan", tags=["panel-ulasan"])
app.include_router(content.router, prefix="/panel/konten", tags=["panel-konten"])

# Buyer self-service and storefront
app.include_router(buyer.router, prefix="/buyer", tags=["buyer"])
app.include_router(public.router, prefix="/public", tags=["public"])

_upload_dir = settings.upload_dir
_upload_dir.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(_upload_dir)), name="uploads")


@app.get("/")
async def root():
    return {"status": "ok"}


@app.get("/health")
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    Health check endpoint for monitoring and orchestration.
    Checks database and Redis connectivity.
    """
    health_status = {
        "status": "healthy",
        "version": APP_VERSION,
        "checks": {
            "database": "ok",
            "redis": "ok",
        },
    }

    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = f"error: {e}"

    try:
        redis = await CacheService.get_redis()
        await redis.ping()
    except (RedisError, OSError) as e:
        logger.error("Redis health check failed", error=str(e))
        health_status["status"] = "unhealthy"
        health_status["checks"]["redis"] = f"error: {e}"

    return health_status


@app.get("/metrics")
async def metrics_endpoint(openmetrics: bool = False):
    """Prometheus metrics endpoint."""
    return get_metrics_response(openmetrics)
