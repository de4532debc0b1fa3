"""Data models for the comment moderation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class FlagKind(Enum):
    """Why a detector flagged a comment."""

    TOXICITY = "toxicity"
    SPAM = "spam"
    HARASSMENT = "harassment"
    HATE_SPEECH = "hate_speech"
    MISINFORMATION = "misinformation"
    INAPPROPRIATE = "inappropriate"


class RecommendedAction(Enum):
    """The engine's decision, from least to most severe."""

    APPROVE = "approve"
    REVIEW = "review"
    AUTO_HIDE = "auto_hide"
    REJECT = "reject"

    @property
    def severity(self) -> int:
        return _ACTION_SEVERITY[self]


_ACTION_SEVERITY = {
    RecommendedAction.APPROVE: 0,
    RecommendedAction.REVIEW: 1,
    RecommendedAction.AUTO_HIDE: 2,
    RecommendedAction.REJECT: 3,
}


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class AnalysisInput:
    """A comment submitted for analysis.

    ``context`` is reserved for caller metadata (thread, author, ...) and is
    not consulted by the current policy.
    """

    text: str
    context: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class SentimentResult:
    score: float = 0.0  # -1.0 (negative) - 1.0 (positive)
    confidence: float = 0.0  # 0.0 - 1.0


@dataclass(frozen=True)
class ModerationFlag:
    """A typed reason code attached when a detector crosses a threshold."""

    kind: FlagKind
    confidence: float
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "confidence": self.confidence, "reason": self.reason}


@dataclass(frozen=True)
class ToxicityResult:
    score: float = 0.0  # 0.0 (clean) - 1.0 (toxic)
    confidence: float = 0.0
    flags: tuple[ModerationFlag, ...] = ()


@dataclass(frozen=True)
class ContentMetadata:
    topics: tuple[str, ...] = ()  # unique, in topic-catalog order
    mentions: tuple[str, ...] = ()  # unique, first-seen order
    language: str = "en"


@dataclass(frozen=True)
class AIAnalysisResult:
    """Aggregate analysis of one comment plus the recommended action."""

    sentiment: SentimentResult = field(default_factory=SentimentResult)
    toxicity: ToxicityResult = field(default_factory=ToxicityResult)
    content: ContentMetadata = field(default_factory=ContentMetadata)
    confidence: float = 0.0
    recommended_action: RecommendedAction = RecommendedAction.APPROVE

    @classmethod
    def safe_default(
        cls, action: RecommendedAction = RecommendedAction.APPROVE
    ) -> AIAnalysisResult:
        """Result returned when an analyzer fails: zero scores, no flags."""
        return cls(recommended_action=action)

    @property
    def sentiment_score(self) -> float:
        return self.sentiment.score

    @property
    def toxicity_score(self) -> float:
        return self.toxicity.score

    @property
    def flags(self) -> tuple[ModerationFlag, ...]:
        return self.toxicity.flags

    @property
    def topics(self) -> tuple[str, ...]:
        return self.content.topics

    @property
    def mentions(self) -> tuple[str, ...]:
        return self.content.mentions

    @property
    def language(self) -> str:
        return self.content.language

    def to_dict(self) -> dict[str, Any]:
        """Flat, JSON-ready view of the analysis."""
        return {
            "sentiment_score": self.sentiment_score,
            "toxicity_score": self.toxicity_score,
            "confidence": self.confidence,
            "language": self.language,
            "topics": list(self.topics),
            "mentions": list(self.mentions),
            "flags": [f.to_dict() for f in self.flags],
            "recommended_action": self.recommended_action.value,
        }


@dataclass(frozen=True)
class ModerationDecision:
    """Pass/fail wrapper returned by real-time moderation."""

    approved: bool
    analysis: AIAnalysisResult
    reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "approved": self.approved,
            "reason": self.reason,
            "analysis": self.analysis.to_dict(),
        }
