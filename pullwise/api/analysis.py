"""
Analysis endpoints.

Runs the diff analysis engine on file changes supplied by the dashboard's
provider client and manages the result cache.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from pullwise.analysis.cache import CacheKey
from pullwise.analysis.engine import AnalysisEngine
from pullwise.dependencies import get_analysis_engine
from pullwise.review.scorer import calculate_quality_score
from pullwise.schemas import AnalysisResult, CommitSummary, FileChange

logger = logging.getLogger(__name__)

router = APIRouter()


class AnalysisRequest(BaseModel):
    """Analysis request body."""
    change_key: str = Field(..., min_length=1, description="Pull request identifier")
    branch: str = Field(..., min_length=1, description="Head branch name")
    files: List[FileChange] = Field(default_factory=list)
    commits: List[CommitSummary] = Field(default_factory=list)
    description: str = Field(default="")


class AnalysisResponse(BaseModel):
    """Analysis response body."""
    change_key: str
    branch: str
    result: AnalysisResult
    quality: Dict[str, Any]


class CacheClearResponse(BaseModel):
    """Cache invalidation response."""
    removed: int


@router.post(
    "/",
    response_model=AnalysisResponse,
    status_code=status.HTTP_200_OK,
    summary="Analyze pull request changes",
    description="Runs lexical static analysis over the changed files of a pull request"
)
def analyze_changes(
    request: AnalysisRequest,
    engine: AnalysisEngine = Depends(get_analysis_engine),
):
    """
    Analyze a pull request.

    Defined as a plain function so FastAPI runs it in its thread pool;
    analyses of different pull requests proceed concurrently.

    Args:
        request: Files, commits and identifiers
        engine: Shared analysis engine

    Returns:
        AnalysisResponse: Result plus quality score
    """
    logger.info(
        "Analysis requested",
        extra={
            "change_key": request.change_key,
            "branch": request.branch,
            "file_count": len(request.files),
        }
    )

    result = engine.analyze(
        request.change_key,
        request.branch,
        request.files,
        request.commits,
        description=request.description,
    )

    return AnalysisResponse(
        change_key=request.change_key,
        branch=request.branch,
        result=result,
        quality=calculate_quality_score(result).to_dict(),
    )


@router.delete(
    "/cache",
    response_model=CacheClearResponse,
    status_code=status.HTTP_200_OK,
    summary="Invalidate cached analyses",
    description="Removes one entry, every branch of one change, or the whole cache"
)
def clear_cache(
    change_key: Optional[str] = Query(None),
    branch: Optional[str] = Query(None),
    engine: AnalysisEngine = Depends(get_analysis_engine),
):
    """
    Invalidate cached analyses.

    Args:
        change_key: Pull request identifier
        branch: Branch name; requires change_key

    Returns:
        CacheClearResponse: Number of removed entries
    """
    if branch and not change_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="branch requires change_key"
        )

    if change_key and branch:
        removed = engine.clear_cache(CacheKey(change_key, branch))
    elif change_key:
        removed = engine.clear_change(change_key)
    else:
        removed = engine.clear_cache()

    return CacheClearResponse(removed=removed)
