from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.env import env_bool, missing_env_vars
from core.logging import get_logger, setup_logging
from web import routers
from web.deps import get_payment_settings

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    missing = missing_env_vars(["PAYMENT_SIGNING_SECRET", "PAYMENT_ENCRYPTION_KEY"])
    if missing:
        logger.warning("Payment secrets not configured: %s; transactions will not be persisted.", ", ".join(missing))
    if env_bool("DATABASE_AUTO_CREATE", False):
        from database import init_db

        init_db()
        logger.info("Database tables ensured.")
    yield


app = FastAPI(
    title="Storefront Payments API",
    description="Checkout orders, payment sessions and gateway webhooks.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_payment_settings().app_base_url.rstrip("/")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", summary="Health Check", tags=["Default"])
def health_check():
    """Basic liveness check."""
    return {"status": "ok", "message": "Storefront Payments API is running."}


@app.get("/healthz", include_in_schema=False)
def readiness_check():
    """Readiness probe including database connectivity."""
    db_ok, db_error = routers.health.ping_database()
    payload = {"status": "ok" if db_ok else "unhealthy", "database": {"ok": db_ok}}
    if db_error:
        payload["database"]["error"] = db_error
    status_code = status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=payload)


app.include_router(routers.orders.router, prefix="/api/v1")
app.include_router(routers.payments.router, prefix="/api/v1")
app.include_router(routers.health.router, prefix="/api/v1")
