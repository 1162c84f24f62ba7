"""FastAPI application entry point for the RealYield listing search API."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from realyield.app.config import get_settings
from realyield.domain.schemas import HealthResponse
from realyield.infra.database import init_db
from realyield.services.listing_gateway import ListingGateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: initialize database and probe the listing provider."""
    await init_db()

    # Probe failure is a warning, not a startup error
    settings = get_settings()
    if settings.check_gateway_on_startup:
        reachable = await ListingGateway(settings).check_reachable()
        logger.info("Listing detail webhook is %s", "reachable" if reachable else "NOT reachable")
        if not reachable:
            logger.warning("Property link analysis may not work until the detail webhook is reachable")
    yield


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

app = FastAPI(
    title="RealYield Listing Search API",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS middleware — allow all origins in debug mode
_cors_origins = settings.cors_origins_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=("*" not in _cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Route includes
# ---------------------------------------------------------------------------
from realyield.app.routes.chat import router as chat_router  # noqa: E402

app.include_router(chat_router)


@app.get("/health", tags=["health"], response_model=HealthResponse)
async def health_check():
    """Return service health status."""
    return {"status": "ok", "service": "realyield"}


def run() -> None:
    """Run the application with uvicorn (used by project.scripts entry point)."""
    uvicorn.run(
        "realyield.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
