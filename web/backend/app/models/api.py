"""Pydantic models for API request/response serialization.

These models mirror the Sift dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Moderation models
# ---------------------------------------------------------------------------


class AnalyzeRequest(BaseModel):
    text: str = Field(..., description="Comment text to analyze")
    context: Optional[dict[str, Any]] = None


class BatchAnalyzeRequest(BaseModel):
    texts: list[str] = Field(..., max_length=500)


class ModerationFlagResponse(BaseModel):
    """Mirrors sift.moderation.models.ModerationFlag."""

    type: str
    confidence: float
    reason: str


class AnalysisResponse(BaseModel):
    """Mirrors the flat view of sift.moderation.models.AIAnalysisResult."""

    sentiment_score: float = 0.0
    toxicity_score: float = 0.0
    confidence: float = 0.0
    language: str = "en"
    topics: list[str] = Field(default_factory=list)
    mentions: list[str] = Field(default_factory=list)
    flags: list[ModerationFlagResponse] = Field(default_factory=list)
    recommended_action: str = "approve"


class ModerationDecisionResponse(BaseModel):
    """Mirrors sift.moderation.models.ModerationDecision."""

    approved: bool
    reason: Optional[str] = None
    analysis: AnalysisResponse


class PolicyResponse(BaseModel):
    """Mirrors sift.moderation.policy.DecisionPolicy."""

    reject_above: float
    auto_hide_above: float
    review_above: float
    negative_sentiment_below: float
    failure_mode: str


# ---------------------------------------------------------------------------
# Audit models
# ---------------------------------------------------------------------------


class AuditRecordResponse(BaseModel):
    """Mirrors sift.audit.audit_log.AuditRecord."""

    content_hash: str
    content_length: int
    sentiment_score: float
    toxicity_score: float
    confidence: float
    language: str
    topics: list[str] = Field(default_factory=list)
    flags: list[ModerationFlagResponse] = Field(default_factory=list)
    recommended_action: str
    analyzed_at: str


class AuditExportResponse(BaseModel):
    format: str
    count: int
    content: str


class AuditStatsResponse(BaseModel):
    total: int = 0
    by_action: dict[str, int] = Field(default_factory=dict)
