"""FastAPI application entry point for the ZephVault API."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from zephvault.app.config import get_settings
from zephvault.domain.schemas import HealthResponse
from zephvault.infra.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: initialize database on startup."""
    await init_db()
    settings = get_settings()
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; AI endpoints will answer 500")
    if not settings.cron_secret:
        logger.warning("CRON_SECRET is not set; rent reminder runs will be rejected")
    yield


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

# settings.debug only drives logging, CORS and reload; FastAPI's own debug
# mode would answer unhandled errors with a plain-text traceback.
app = FastAPI(
    title="ZephVault AI API",
    lifespan=lifespan,
)

_cors_origins = settings.cors_origins_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=("*" not in _cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": str(exc) or type(exc).__name__},
    )


# ---------------------------------------------------------------------------
# Route includes
# ---------------------------------------------------------------------------
from zephvault.app.routes.ai import router as ai_router
from zephvault.app.routes.documents import router as documents_router, diagnostics_router
from zephvault.app.routes.portfolio import properties_router, tenants_router, dashboard_router
from zephvault.app.routes.rent_notices import router as rent_notices_router
from zephvault.app.routes.rent_reminders import router as rent_reminders_router

app.include_router(ai_router)
app.include_router(documents_router)
app.include_router(diagnostics_router)
app.include_router(properties_router)
app.include_router(tenants_router)
app.include_router(dashboard_router)
app.include_router(rent_notices_router)
app.include_router(rent_reminders_router)


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Return service health status."""
    return {"status": "ok", "service": "zephvault"}


def run() -> None:
    """Run the application with uvicorn (used by project.scripts entry point)."""
    uvicorn.run(
        "zephvault.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
