"""Moderation router -- comment analysis and real-time pass/fail checks.

Prefix: ``/api/moderation``
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from sift.moderation.engine import ModerationEngine
from sift.moderation.models import AnalysisInput
from web.backend.app.models.api import (
    AnalysisResponse,
    AnalyzeRequest,
    BatchAnalyzeRequest,
    ModerationDecisionResponse,
    PolicyResponse,
)

router = APIRouter(prefix="/api/moderation", tags=["moderation"])


def get_engine(request: Request) -> ModerationEngine:
    """Return the engine built by ``create_app``."""
    return request.app.state.engine


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_comment(
    body: AnalyzeRequest,
    engine: ModerationEngine = Depends(get_engine),
):
    """Full analysis of a single comment."""
    result = engine.analyze(AnalysisInput(text=body.text, context=body.context))
    return AnalysisResponse(**result.to_dict())


@router.post("/batch", response_model=list[AnalysisResponse])
async def analyze_comments(
    body: BatchAnalyzeRequest,
    engine: ModerationEngine = Depends(get_engine),
):
    """Analyze several comments; results are in request order."""
    return [AnalysisResponse(**r.to_dict()) for r in engine.analyze_comments(body.texts)]


@router.post("/realtime", response_model=ModerationDecisionResponse)
async def moderate_realtime(
    body: AnalyzeRequest,
    engine: ModerationEngine = Depends(get_engine),
):
    """Pass/fail gate called before a comment is committed.

    Callers should not persist the comment when ``approved`` is false and
    should show ``reason`` to the author.
    """
    decision = engine.moderate_realtime(body.text)
    return ModerationDecisionResponse(**decision.to_dict())


@router.get("/policy", response_model=PolicyResponse)
async def get_policy(engine: ModerationEngine = Depends(get_engine)):
    """Return the decision thresholds in effect."""
    return PolicyResponse(**engine.policy.to_dict())
