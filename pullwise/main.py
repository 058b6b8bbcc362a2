"""
FastAPI application for the Pullwise analysis service.

Run with ``uvicorn pullwise.main:app`` or ``python -m pullwise.main``.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pullwise import __version__
from pullwise.api import analysis, health
from pullwise.config import settings
from pullwise.observability.errors import setup_error_tracking
from pullwise.observability.logging import setup_logging
from pullwise.observability.metrics import setup_metrics

setup_logging(settings)

logger = logging.getLogger(__name__)

_interactive_docs = settings.ENVIRONMENT != "production"

app = FastAPI(
    title="Pullwise",
    description="Diff-based static analysis for pull requests",
    version=__version__,
    docs_url="/docs" if _interactive_docs else None,
    redoc_url="/redoc" if _interactive_docs else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(analysis.router, prefix="/analysis", tags=["analysis"])


@app.on_event("startup")
async def startup_event():
    """Metrics and error tracking must exist before the first analysis."""
    setup_metrics(settings)
    setup_error_tracking(settings)
    logger.info(
        "Pullwise started",
        extra={"environment": settings.ENVIRONMENT, "version": __version__},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pullwise.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development",
    )
