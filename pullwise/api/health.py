"""
Health endpoints.

The service has no external dependencies, so readiness only means the rule
tables compiled and the shared engine exists.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from pullwise import __version__
from pullwise.analysis.engine import AnalysisEngine
from pullwise.analysis.rules import CHANGE_RULES, PERFORMANCE_RULES, SECURITY_RULES
from pullwise.config import settings
from pullwise.dependencies import get_analysis_engine

router = APIRouter()

RULE_TABLES = {
    "security_rules": SECURITY_RULES,
    "performance_rules": PERFORMANCE_RULES,
    "change_rules": CHANGE_RULES,
}


class HealthResponse(BaseModel):
    """Health check response body."""
    status: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    environment: str = Field(default_factory=lambda: settings.ENVIRONMENT)
    version: str = __version__
    checks: Dict[str, Any] = Field(default_factory=dict)


@router.get(
    "/",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check():
    return HealthResponse(status="healthy", checks={"api": "ok"})


@router.get(
    "/ready",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Reports rule table sizes and the number of cached analyses"
)
def readiness_check(engine: AnalysisEngine = Depends(get_analysis_engine)):
    """
    Ready once every rule table holds at least one rule.

    Returns:
        HealthResponse: "ready" or "not_ready" with per-table rule counts
    """
    checks: Dict[str, Any] = {name: len(rules) for name, rules in RULE_TABLES.items()}
    ready = all(checks.values())
    checks["cached_results"] = len(engine.cache)

    return HealthResponse(status="ready" if ready else "not_ready", checks=checks)


@router.get(
    "/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
async def liveness_check():
    return {"status": "alive"}
